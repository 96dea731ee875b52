from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator


class ContractBase(BaseModel):
    responsible: Optional[str] = None
    summary: Optional[str] = None
    logoUrl: Optional[str] = None
    startDate: Optional[date] = None
    endDate: Optional[date] = None

    @field_validator("logoUrl", "startDate", "endDate", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        if v is None:
            return None
        if isinstance(v, str) and v.strip() == "":
            return None
        return v


class ContractCreate(ContractBase):
    name: str


class ContractUpdate(ContractBase):
    name: Optional[str] = None
