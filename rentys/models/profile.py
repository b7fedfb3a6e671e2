"""
Profile Model - Domain-level user record
"""
from enum import Enum
from sqlalchemy import String, Uuid, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
import uuid

from rentys.core.exceptions import ValidationError
from rentys.db.base import Base, TimestampMixin


class ProfileRole(str, Enum):
    TENANT = "tenant"
    OWNER = "owner"


DASHBOARD_PATHS = {
    ProfileRole.TENANT: "/tenant",
    ProfileRole.OWNER: "/owner",
}


class Profile(TimestampMixin, Base):
    """
    One profile per identity. The role is fixed at signup.
    """
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True
    )
    role: Mapped[ProfileRole] = mapped_column(
        SQLEnum(ProfileRole, name="profile_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=True)

    user = relationship("User", back_populates="profile")
    rooms = relationship("Room", back_populates="owner")

    @validates("role")
    def _validate_role(self, key, value):
        value = ProfileRole(value)
        if self.role is not None and ProfileRole(self.role) != value:
            raise ValidationError("Profile role cannot be changed")
        return value

    @property
    def dashboard_path(self) -> str:
        return DASHBOARD_PATHS[ProfileRole(self.role)]
