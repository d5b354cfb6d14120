from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field


class LocationBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    is_primary: bool = False


class LocationCreate(LocationBase):
    pass


class LocationUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    is_primary: Optional[bool] = None


class LocationOut(LocationBase):
    id: UUID
    org_id: UUID
    created_at: Optional[datetime] = None
    total_products: int = 0

    class Config:
        from_attributes = True


class LocationListResponse(BaseModel):
    locations: List[LocationOut]


class LocationResponse(BaseModel):
    location: LocationOut
