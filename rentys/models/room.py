"""
Room Model - Rental listings posted by owners
"""
from enum import Enum
from typing import Any, Dict, Mapping, Optional
from sqlalchemy import String, Float, Text, Boolean, Uuid, ForeignKey, JSON, Index, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
import uuid

from rentys.core.exceptions import ValidationError
from rentys.db.base import Base, TimestampMixin


class RoomType(str, Enum):
    STUDENT = "student"
    FAMILY = "family"
    BOTH = "both"


class Amenity(str, Enum):
    WIFI = "wifi"
    ELECTRICITY = "electricity"
    WATER = "water"
    PARKING = "parking"
    FURNISHED = "furnished"
    SECURITY = "security"


def normalize_features(raw: Optional[Mapping[str, Any]]) -> Dict[str, bool]:
    """
    Coerce an amenity mapping onto the closed vocabulary.

    Every amenity is present in the result; missing ones are False.
    Unknown keys and non-boolean values raise ValidationError.
    """
    features = {amenity.value: False for amenity in Amenity}
    for key, value in (raw or {}).items():
        key = key.value if isinstance(key, Amenity) else key
        if key not in features:
            raise ValidationError(f"Unknown amenity: {key}")
        if not isinstance(value, bool):
            raise ValidationError(f"Amenity '{key}' must be true or false")
        features[key] = value
    return features


class Room(TimestampMixin, Base):
    __tablename__ = "rooms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Address
    address_line: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    district: Mapped[str] = mapped_column(String(100), nullable=False)
    taluka: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    pincode: Mapped[str] = mapped_column(String(6), nullable=False)
    landmark: Mapped[str] = mapped_column(String(255), nullable=True)

    rent: Mapped[float] = mapped_column(Float, nullable=False)
    room_type: Mapped[RoomType] = mapped_column(
        SQLEnum(RoomType, name="room_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    features: Mapped[dict] = mapped_column(JSON, nullable=False, default=lambda: normalize_features(None))
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # placeholder URLs
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    owner = relationship("Profile", back_populates="rooms")
    requests = relationship("RoomRequest", back_populates="room")

    __table_args__ = (
        Index("ix_rooms_active_rent", "is_active", "rent"),
    )

    @validates("features")
    def _validate_features(self, key, value):
        return normalize_features(value)

    @validates("rent")
    def _validate_rent(self, key, value):
        if value is None or value <= 0:
            raise ValidationError("Rent must be a positive amount")
        return float(value)

    def has_amenities(self, *amenities: Amenity) -> bool:
        features = self.features or {}
        return all(features.get(Amenity(a).value, False) for a in amenities)

    @property
    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "address_line": self.address_line,
            "city": self.city,
            "rent": self.rent,
        }
