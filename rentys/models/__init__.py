# Import all models in dependency order so relationships resolve
from rentys.models.user import User
from rentys.models.profile import Profile, ProfileRole
from rentys.models.room import Room, RoomType, Amenity
from rentys.models.request import RoomRequest, RequestStatus, Decision

__all__ = [
    "User",
    "Profile",
    "ProfileRole",
    "Room",
    "RoomType",
    "Amenity",
    "RoomRequest",
    "RequestStatus",
    "Decision",
]
