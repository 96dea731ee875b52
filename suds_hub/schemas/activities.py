from typing import Any, Literal

from pydantic import BaseModel

from ..models.domain import ValidationStatus


class AppliesRequest(BaseModel):
    sudsTypeId: str
    category: str
    activityName: str
    applies: bool


class FieldUpdate(BaseModel):
    field: Literal["status", "comment", "frequency", "involvedContracts", "dependentActivities"]
    value: Any = None


class ValidationRequest(BaseModel):
    status: ValidationStatus
    comment: str = ""
