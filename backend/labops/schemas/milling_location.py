"""
Milling Location Schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MillingLocationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class MillingLocationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None


class MillingLocationResponse(BaseModel):
    id: str
    name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
