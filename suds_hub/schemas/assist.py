from typing import List

from pydantic import BaseModel, Field


class AssetDescriptionRequest(BaseModel):
    name: str
    locationTypes: List[str] = Field(default_factory=list)


class ActivityAnalysisRequest(BaseModel):
    sudsTypeId: str
    category: str
    activityName: str


class AssistResponse(BaseModel):
    text: str
