"""
Auth Service
Signup and login for both identity modes: local JWT accounts, or Supabase
Auth when SUPABASE_ENABLED is set.
"""
import logging
import uuid
from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from rentys.core.config import settings
from rentys.core.exceptions import NotAuthenticated, ValidationError
from rentys.core.security import AuthContext, create_access_token, get_password_hash, verify_password
from rentys.database import commit_or_raise
from rentys.db.base import utcnow
from rentys.models.profile import Profile, ProfileRole
from rentys.models.user import User
from rentys.schemas.auth import SignupRequest
from rentys.services.profile_service import ProfileService
from rentys.services.supabase_service import supabase_service

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.profiles = ProfileService(db)

    def _token_response(self, user: User, access_token: Optional[str]) -> Dict[str, Any]:
        profile = user.profile
        return {
            "access_token": access_token or "",
            "token_type": "bearer",
            "user_id": str(user.id),
            "role": profile.role if profile else None,
            "dashboard": profile.dashboard_path if profile else None,
        }

    def signup(self, data: SignupRequest) -> Dict[str, Any]:
        """Create the identity and its profile in one transaction"""
        email = data.email.lower()
        if self.db.query(User).filter(User.email == email).first():
            raise ValidationError("Email already registered")

        remote = None
        access_token = None
        if settings.SUPABASE_ENABLED:
            remote = supabase_service.sign_up(
                email, data.password, {"name": data.name, "role": data.role.value}
            )
            user = User(id=uuid.UUID(remote["id"]), email=email)
            access_token = remote["access_token"]
        else:
            user = User(email=email, hashed_password=get_password_hash(data.password))

        try:
            self.db.add(user)
            self.db.flush()
            self.profiles.create_profile(user, data.role, data.name, email, data.phone)
            commit_or_raise(self.db)
        except Exception:
            self.db.rollback()
            if remote is not None:
                # Without its profile the remote account could never be used
                logger.warning(f"[auth] Local signup failed; removing Supabase user {remote['id']}")
                supabase_service.delete_user(remote["id"])
            raise
        self.db.refresh(user)

        if access_token is None and not settings.SUPABASE_ENABLED:
            access_token = self._local_token(user)

        logger.info(f"[auth] Signed up {data.role.value} {user.id}")
        return self._token_response(user, access_token)

    def complete_profile(
        self,
        ctx: Optional[AuthContext],
        role: ProfileRole,
        name: str,
        phone: Optional[str] = None,
    ) -> Profile:
        """
        Create the profile for a signed-in identity that has none, e.g. a
        Supabase account whose signup was cut short.
        """
        if ctx is None:
            raise NotAuthenticated()
        user = self.db.get(User, ctx.user_id)
        if user is None:
            raise NotAuthenticated("Unknown identity")

        profile = self.profiles.create_profile(user, role, name, user.email, phone)
        commit_or_raise(self.db)
        self.db.refresh(profile)
        return profile

    def login(self, email: str, password: str) -> Dict[str, Any]:
        email = email.lower()

        if settings.SUPABASE_ENABLED:
            remote = supabase_service.sign_in(email, password)
            if not remote:
                raise NotAuthenticated("Incorrect email or password")
            user = supabase_service.sync_user_to_db(self.db, remote)
            access_token = remote["access_token"]
        else:
            user = self.db.query(User).filter(User.email == email).first()
            if not user or not verify_password(password, user.hashed_password):
                raise NotAuthenticated("Incorrect email or password")
            access_token = self._local_token(user)

        user.last_login = utcnow()
        commit_or_raise(self.db)
        self.db.refresh(user)
        return self._token_response(user, access_token)

    def logout(self, ctx: Optional[AuthContext]) -> bool:
        """Supabase sessions are revoked remotely; local JWTs are stateless"""
        if ctx is None:
            raise NotAuthenticated()
        if settings.SUPABASE_ENABLED:
            return supabase_service.sign_out(ctx.token)
        return True

    @staticmethod
    def _local_token(user: User) -> str:
        return create_access_token(
            data={"sub": str(user.id), "email": user.email},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
