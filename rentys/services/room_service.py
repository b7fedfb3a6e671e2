"""
Room Service
Owner-scoped listing CRUD and the active-room search tenants browse.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from rentys.core.exceptions import Forbidden, NotFound
from rentys.core.security import AuthContext
from rentys.database import commit_or_raise, with_retry
from rentys.models.profile import Profile, ProfileRole
from rentys.models.request import RoomRequest
from rentys.models.room import Room, RoomType
from rentys.schemas.room import RoomCreate, RoomSearch
from rentys.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


def _like(term: str) -> str:
    escaped = term.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class RoomService:
    def __init__(self, db: Session):
        self.db = db
        self.profiles = ProfileService(db)

    # ── Lookups ───────────────────────────────────────────────────────────────

    @with_retry
    def _get_room(self, room_id: uuid.UUID) -> Optional[Room]:
        return self.db.get(Room, room_id)

    def get_active_room(self, room_id: uuid.UUID) -> Room:
        """Raises NotFound for a missing or inactive room."""
        room = self._get_room(room_id)
        if room is None or not room.is_active:
            raise NotFound("Room not found")
        return room

    def get_room_details(self, ctx: Optional[AuthContext], room_id: uuid.UUID) -> Dict[str, Any]:
        """
        Room with the owner's public contact card.

        Inactive rooms are only visible to the owner who listed them.
        """
        viewer = self.profiles.resolve_profile(ctx)
        room = self._get_room(room_id)
        if room is None or (not room.is_active and room.owner_id != viewer.id):
            raise NotFound("Room not found")

        owner: Profile = room.owner
        details = self.to_dict(room)
        details["owner"] = {"name": owner.name, "email": owner.email, "phone": owner.phone}
        return details

    # ── Owner operations ──────────────────────────────────────────────────────

    def create_room(self, ctx: Optional[AuthContext], data: RoomCreate) -> Room:
        owner = self.profiles.resolve_with_role(ctx, ProfileRole.OWNER)

        room = Room(
            owner_id=owner.id,
            address_line=data.address_line,
            city=data.city,
            district=data.district,
            taluka=data.taluka,
            state=data.state,
            pincode=data.pincode,
            landmark=data.landmark,
            rent=data.rent,
            room_type=data.room_type,
            features=data.features.model_dump(),
            images=list(data.images),
            is_active=True,
        )
        self.db.add(room)
        commit_or_raise(self.db)
        self.db.refresh(room)
        logger.info(f"[room] Owner {owner.id} listed room {room.id} in {room.city}")
        return room

    @with_retry
    def _rooms_of(self, owner_id: uuid.UUID) -> List[Room]:
        return (
            self.db.query(Room)
            .filter(Room.owner_id == owner_id)
            .order_by(Room.created_at.desc())
            .all()
        )

    def list_owner_rooms(self, ctx: Optional[AuthContext]) -> List[Room]:
        owner = self.profiles.resolve_with_role(ctx, ProfileRole.OWNER)
        return self._rooms_of(owner.id)

    @with_retry
    def _has_requests(self, room_id: uuid.UUID) -> bool:
        return (
            self.db.query(RoomRequest.id).filter(RoomRequest.room_id == room_id).first()
            is not None
        )

    def delete_room(self, ctx: Optional[AuthContext], room_id: uuid.UUID) -> Dict[str, Any]:
        """
        Remove a listing. A room that already has requests is deactivated
        instead, since requests are never deleted.
        """
        owner = self.profiles.resolve_with_role(ctx, ProfileRole.OWNER)
        room = self._get_room(room_id)
        if room is None:
            raise NotFound("Room not found")
        if room.owner_id != owner.id:
            raise Forbidden("Only the owner can delete this room")

        if self._has_requests(room.id):
            room.is_active = False
            commit_or_raise(self.db)
            logger.info(f"[room] Room {room.id} has requests; deactivated instead of deleted")
            return {"id": room_id, "deleted": False, "deactivated": True}

        self.db.delete(room)
        commit_or_raise(self.db)
        logger.info(f"[room] Room {room_id} deleted by owner {owner.id}")
        return {"id": room_id, "deleted": True, "deactivated": False}

    # ── Tenant search ─────────────────────────────────────────────────────────

    @with_retry
    def search_rooms(self, filters: RoomSearch) -> List[Room]:
        """Active rooms matching every filter that is set."""
        q = self.db.query(Room).filter(Room.is_active.is_(True))

        if filters.location and filters.location.strip():
            pattern = _like(filters.location)
            q = q.filter(or_(
                Room.city.ilike(pattern, escape="\\"),
                Room.landmark.ilike(pattern, escape="\\"),
            ))
        if filters.max_rent is not None:
            q = q.filter(Room.rent <= filters.max_rent)
        if filters.room_type is not None and filters.room_type != RoomType.BOTH:
            q = q.filter(Room.room_type == filters.room_type)

        rooms = q.order_by(Room.created_at.desc()).all()

        # Amenity flags live in a JSON column; filter in Python for portability
        if filters.features:
            rooms = [room for room in rooms if room.has_amenities(*filters.features)]
        return rooms

    # ── Serialisation ─────────────────────────────────────────────────────────

    @staticmethod
    def to_dict(room: Room) -> Dict[str, Any]:
        return {
            "id": room.id,
            "owner_id": room.owner_id,
            "address_line": room.address_line,
            "city": room.city,
            "district": room.district,
            "taluka": room.taluka,
            "state": room.state,
            "pincode": room.pincode,
            "landmark": room.landmark,
            "rent": room.rent,
            "room_type": room.room_type,
            "features": room.features or {},
            "images": room.images or [],
            "is_active": room.is_active,
            "created_at": room.created_at,
        }
