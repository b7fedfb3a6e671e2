from fastapi import Depends
from starlette.requests import Request
from sqlalchemy.orm import Session
from typing import Optional
import logging

from rentys.core.config import settings
from rentys.core.exceptions import NotAuthenticated
from rentys.core.security import AuthContext, decode_access_token
from rentys.database import get_db
from rentys.services.supabase_service import supabase_service

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise NotAuthenticated("Missing or invalid authorization header")
    return token.strip()


def get_auth_context(
    request: Request,
    db: Session = Depends(get_db)
) -> Optional[AuthContext]:
    """
    Resolve the caller's session from the bearer token.

    Returns None when no Authorization header is sent; services turn that
    into NotAuthenticated. A token that is present but invalid fails here.
    """
    token = _bearer_token(request)
    if token is None:
        return None

    if settings.SUPABASE_ENABLED:
        supabase_user = supabase_service.get_current_user(token)
        if not supabase_user:
            raise NotAuthenticated("Invalid or expired token")
        user = supabase_service.sync_user_to_db(db, supabase_user)
        return AuthContext(user_id=user.id, email=user.email, token=token)

    ctx = decode_access_token(token)
    if ctx is None:
        raise NotAuthenticated("Invalid or expired token")
    return ctx


def require_auth_context(
    ctx: Optional[AuthContext] = Depends(get_auth_context)
) -> AuthContext:
    """Same as get_auth_context but an anonymous caller is a 401"""
    if ctx is None:
        raise NotAuthenticated()
    return ctx
