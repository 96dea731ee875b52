from typing import Dict, List

from pydantic import BaseModel


class TaxonomyResponse(BaseModel):
    categories: List[str]
    activities: Dict[str, List[str]]


class CategoryCreate(BaseModel):
    name: str


class ActivityNameCreate(BaseModel):
    name: str


class ActivityNameRename(BaseModel):
    name: str


class CascadeResult(BaseModel):
    records: int
