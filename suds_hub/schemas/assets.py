from typing import List, Optional

from pydantic import BaseModel, Field


class AssetCreate(BaseModel):
    name: str
    description: str
    imageUrls: List[str] = Field(default_factory=list)
    locationTypes: List[str] = Field(default_factory=list)
    order: Optional[int] = None


class AssetUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    imageUrls: Optional[List[str]] = None
    locationTypes: Optional[List[str]] = None
    order: Optional[int] = None


class LocationTag(BaseModel):
    id: str
    name: str
    icon: str
