"""
Pydantic schemas for room listings and search.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rentys.models.room import Amenity, RoomType


class RoomFeatures(BaseModel):
    """Closed amenity vocabulary; unknown keys are rejected."""
    model_config = ConfigDict(extra="forbid")

    wifi: bool = False
    electricity: bool = False
    water: bool = False
    parking: bool = False
    furnished: bool = False
    security: bool = False


class RoomCreate(BaseModel):
    address_line: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1, max_length=100)
    district: str = Field(..., min_length=1, max_length=100)
    taluka: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., pattern=r"^\d{6}$")
    landmark: Optional[str] = Field(None, max_length=255)
    rent: float = Field(..., gt=0)
    room_type: RoomType
    features: RoomFeatures = Field(default_factory=RoomFeatures)
    images: List[str] = Field(default_factory=list, max_length=10)

    @field_validator("address_line", "city", "district", "taluka", "state")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be blank")
        return v

    @field_validator("landmark")
    @classmethod
    def blank_landmark_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class RoomOut(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    address_line: str
    city: str
    district: str
    taluka: str
    state: str
    pincode: str
    landmark: Optional[str] = None
    rent: float
    room_type: RoomType
    features: RoomFeatures
    images: List[str] = []
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class OwnerContact(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None


class RoomDetailOut(RoomOut):
    owner: OwnerContact


class RoomListResponse(BaseModel):
    items: List[RoomOut]
    total: int


class RoomSearch(BaseModel):
    """Tenant search filters. Absent fields do not filter."""
    location: Optional[str] = Field(None, max_length=100)
    max_rent: Optional[float] = Field(None, gt=0)
    room_type: Optional[RoomType] = None
    features: List[Amenity] = []


class RoomDeleteResponse(BaseModel):
    id: uuid.UUID
    deleted: bool
    deactivated: bool
