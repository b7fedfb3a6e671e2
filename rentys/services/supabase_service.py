"""
Supabase Integration Service
Verifies Supabase Auth tokens and syncs Supabase users into the users table
"""
import logging
from typing import Optional, Dict, Any
import uuid

from sqlalchemy.orm import Session
from supabase import create_client, Client

from rentys.core.config import settings
from rentys.core.exceptions import BackendUnavailable
from rentys.database import commit_or_raise
from rentys.models.user import User

logger = logging.getLogger(__name__)


def _field(obj: Any, name: str) -> Any:
    """Read a field from a supabase-py model or a plain dict"""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


class SupabaseService:
    """Service for Supabase authentication and user sync"""

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        """Supabase client, created on first use"""
        if self._client is None:
            if not settings.supabase_configured:
                raise BackendUnavailable("Supabase is not configured")
            self._client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
            logger.info("Supabase client initialized successfully")
        return self._client

    def get_current_user(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Get current user from a Supabase JWT token

        Returns:
            {"id", "email"} for a valid token, otherwise None
        """
        try:
            response = self.client.auth.get_user(token)
        except BackendUnavailable:
            raise
        except Exception as e:
            logger.error(f"Token verification failed: {e}")
            return None

        user = _field(response, "user") or response
        user_id = _field(user, "id")
        if not user_id:
            return None
        return {"id": str(user_id), "email": _field(user, "email")}

    def sync_user_to_db(self, db: Session, supabase_user: Dict[str, Any]) -> User:
        """
        Upsert the Supabase identity into the users table

        Called on signup and on every authenticated request in Supabase mode.
        """
        user_id = uuid.UUID(str(supabase_user["id"]))
        email = supabase_user.get("email")

        existing_user = db.get(User, user_id)
        if existing_user:
            if email and existing_user.email != email:
                existing_user.email = email
                commit_or_raise(db)
                logger.info(f"Updated user {user_id}")
            return existing_user

        new_user = User(id=user_id, email=email)
        db.add(new_user)
        commit_or_raise(db)
        logger.info(f"Created new user {user_id}")
        return new_user

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Create new user in Supabase

        Returns:
            {"id", "email", "access_token"}; access_token is None when email
            confirmation is pending
        """
        try:
            response = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": metadata or {}},
            })
        except Exception as e:
            logger.error(f"Error creating user: {e}")
            raise BackendUnavailable("Identity provider rejected the signup") from e

        user = _field(response, "user")
        session = _field(response, "session")
        user_id = _field(user, "id")
        if not user_id:
            logger.error(f"Signup for {email} returned no user")
            raise BackendUnavailable("Identity provider returned no user for the signup")
        return {
            "id": str(user_id),
            "email": _field(user, "email") or email,
            "access_token": _field(session, "access_token"),
        }

    def sign_in(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """
        Sign in user

        Returns:
            {"id", "email", "access_token"} or None on bad credentials
        """
        try:
            response = self.client.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except Exception as e:
            logger.error(f"Error signing in user: {e}")
            return None

        user = _field(response, "user")
        session = _field(response, "session")
        user_id = _field(user, "id")
        if not user_id or not session:
            return None
        return {
            "id": str(user_id),
            "email": _field(user, "email"),
            "access_token": _field(session, "access_token"),
        }

    def sign_out(self, token: str) -> bool:
        """Revoke the session behind a user access token"""
        try:
            self.client.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.error(f"Error signing out: {e}")
            return False

    def delete_user(self, user_id: str) -> bool:
        """
        Remove a Supabase account with the service key

        Used to undo a remote signup whose local profile could not be saved.
        """
        try:
            self.client.auth.admin.delete_user(str(user_id))
            logger.info(f"Deleted Supabase user {user_id}")
            return True
        except Exception as e:
            logger.error(f"Error deleting Supabase user {user_id}: {e}")
            return False


# Singleton instance; the client itself is created lazily
supabase_service = SupabaseService()
