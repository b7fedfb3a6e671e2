"""
Room Request Pydantic Schemas
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from rentys.core.config import settings
from rentys.models.request import Decision, RequestStatus


class RequestCreate(BaseModel):
    room_id: UUID
    message: Optional[str] = Field(None, max_length=settings.MAX_REQUEST_MESSAGE_LENGTH)


class DecisionRequest(BaseModel):
    decision: Decision


class RoomSummary(BaseModel):
    id: UUID
    address_line: str
    city: str
    rent: float


class TenantContact(BaseModel):
    """email and phone stay empty until the request is accepted"""
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class RequestOut(BaseModel):
    id: UUID
    room_id: UUID
    tenant_id: UUID
    owner_id: UUID
    message: Optional[str] = None
    status: RequestStatus
    created_at: datetime
    decided_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OwnerRequestView(RequestOut):
    tenant: TenantContact
    room: RoomSummary


class TenantRequestView(RequestOut):
    room: RoomSummary


class OwnerRequestList(BaseModel):
    items: List[OwnerRequestView]
    total: int


class TenantRequestList(BaseModel):
    items: List[TenantRequestView]
    total: int
