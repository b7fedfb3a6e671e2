"""
Room Request Model - Tenant interest in a room, decided by the owner
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import Text, DateTime, Uuid, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from rentys.db.base import Base, TimestampMixin


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class Decision(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"

    @property
    def target_status(self) -> RequestStatus:
        return RequestStatus.ACCEPTED if self is Decision.ACCEPT else RequestStatus.REJECTED


class RoomRequest(TimestampMixin, Base):
    """
    owner_id is copied from the room when the request is created.
    Rows are never deleted.
    """
    __tablename__ = "requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    room_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("rooms.id"), nullable=False, index=True)
    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)

    message: Mapped[str] = mapped_column(Text, nullable=True)
    status: Mapped[RequestStatus] = mapped_column(
        SQLEnum(RequestStatus, name="request_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RequestStatus.PENDING,
        index=True,
    )
    decided_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    room = relationship("Room", back_populates="requests")
    tenant = relationship("Profile", foreign_keys=[tenant_id])
    owner = relationship("Profile", foreign_keys=[owner_id])

    __table_args__ = (
        Index("ix_requests_owner_status", "owner_id", "status"),
        Index("ix_requests_tenant_room", "tenant_id", "room_id"),
    )
