"""
User Model - Identity record
Local accounts carry a password hash; Supabase accounts are synced by id.
"""
from datetime import datetime
from sqlalchemy import String, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from rentys.db.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """
    Authenticated identity

    The id matches auth.users.id when Supabase is the identity provider.
    Domain data (role, contact details) lives on Profile.
    """
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=True)  # local auth only
    last_login: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    profile = relationship("Profile", back_populates="user", uselist=False)
