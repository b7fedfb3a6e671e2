"""
Profile Service
Maps an authenticated identity to its profile and enforces role checks
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from rentys.core.exceptions import Forbidden, NotAuthenticated, ProfileNotFound, ValidationError
from rentys.core.security import AuthContext
from rentys.database import commit_or_raise, with_retry
from rentys.models.profile import Profile, ProfileRole
from rentys.models.user import User

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, db: Session):
        self.db = db

    @with_retry
    def _get_by_user_id(self, user_id) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.user_id == user_id).first()

    def resolve_profile(self, ctx: Optional[AuthContext]) -> Profile:
        """
        Raises:
            NotAuthenticated: no session
            ProfileNotFound: the identity has no profile yet
        """
        if ctx is None:
            raise NotAuthenticated()
        profile = self._get_by_user_id(ctx.user_id)
        if profile is None:
            raise ProfileNotFound()
        return profile

    def resolve_with_role(self, ctx: Optional[AuthContext], role: ProfileRole) -> Profile:
        profile = self.resolve_profile(ctx)
        self.require_role(profile, role)
        return profile

    @staticmethod
    def require_role(profile: Profile, role: ProfileRole) -> None:
        if ProfileRole(profile.role) != role:
            raise Forbidden(f"Only {role.value}s can do this")

    def create_profile(
        self,
        user: User,
        role: ProfileRole,
        name: str,
        email: str,
        phone: Optional[str] = None,
    ) -> Profile:
        """
        Attach a profile to a new identity. Flushes but does not commit, so
        signup can create the user and the profile in one transaction.
        """
        if self._get_by_user_id(user.id) is not None:
            raise ValidationError("Profile already exists for this account")

        profile = Profile(
            user_id=user.id,
            role=role,
            name=name.strip(),
            email=email,
            phone=phone,
        )
        self.db.add(profile)
        self.db.flush()
        logger.info(f"[profile] Created {role.value} profile {profile.id} for user {user.id}")
        return profile

    def update_profile(
        self,
        ctx: Optional[AuthContext],
        name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Profile:
        profile = self.resolve_profile(ctx)
        if name is not None:
            profile.name = name.strip()
        if phone is not None:
            profile.phone = phone or None
        commit_or_raise(self.db)
        self.db.refresh(profile)
        return profile
