from rentys.services.auth_service import AuthService
from rentys.services.profile_service import ProfileService
from rentys.services.room_service import RoomService
from rentys.services.request_service import RequestService
from rentys.services.supabase_service import SupabaseService, supabase_service

__all__ = [
    "AuthService",
    "ProfileService",
    "RoomService",
    "RequestService",
    "SupabaseService",
    "supabase_service",
]
