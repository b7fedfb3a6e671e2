"""
Room Listing Routes

  GET    /api/rooms              search active rooms (any signed-in user)
  POST   /api/rooms              list a new room (owner)
  GET    /api/rooms/mine         owner's rooms, active or not
  GET    /api/rooms/{id}         room detail with owner contact
  DELETE /api/rooms/{id}         delete, or deactivate if it has requests
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rentys.core.deps import get_auth_context, require_auth_context
from rentys.core.security import AuthContext
from rentys.database import get_db
from rentys.models.room import Amenity, RoomType
from rentys.schemas.room import (
    RoomCreate,
    RoomDeleteResponse,
    RoomDetailOut,
    RoomListResponse,
    RoomOut,
    RoomSearch,
)
from rentys.services.room_service import RoomService

router = APIRouter(tags=["Rooms"])


@router.get("", response_model=RoomListResponse)
def search_rooms(
    location: Optional[str] = Query(None, max_length=100, description="City or landmark"),
    max_rent: Optional[float] = Query(None, gt=0),
    room_type: Optional[RoomType] = None,
    features: List[Amenity] = Query([], description="Amenities that must be present"),
    ctx: AuthContext = Depends(require_auth_context),
    db: Session = Depends(get_db),
):
    filters = RoomSearch(location=location, max_rent=max_rent, room_type=room_type, features=features)
    svc = RoomService(db)
    rooms = svc.search_rooms(filters)
    return {"items": [svc.to_dict(r) for r in rooms], "total": len(rooms)}


@router.post("", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    svc = RoomService(db)
    return svc.to_dict(svc.create_room(ctx, payload))


@router.get("/mine", response_model=RoomListResponse)
def list_my_rooms(
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    svc = RoomService(db)
    rooms = svc.list_owner_rooms(ctx)
    return {"items": [svc.to_dict(r) for r in rooms], "total": len(rooms)}


@router.get("/{room_id}", response_model=RoomDetailOut)
def get_room(
    room_id: uuid.UUID,
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return RoomService(db).get_room_details(ctx, room_id)


@router.delete("/{room_id}", response_model=RoomDeleteResponse)
def delete_room(
    room_id: uuid.UUID,
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return RoomService(db).delete_room(ctx, room_id)
