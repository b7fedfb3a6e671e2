"""
Security and Authentication
Password hashing, local JWT issuing/decoding, and the explicit AuthContext
handed to every service call.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from jose import JWTError, jwt
from passlib.context import CryptContext

from rentys.core.config import settings

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class AuthContext:
    """
    The authenticated caller.

    Built once per HTTP request from the bearer token and passed explicitly
    into services; nothing reads identity from global state.
    """
    user_id: uuid.UUID
    email: Optional[str] = None
    token: Optional[str] = None


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify plain password against hashed password"""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def decode_access_token(token: str) -> Optional[AuthContext]:
    """
    Decode a locally issued JWT

    Returns:
        AuthContext, or None if the token is invalid, expired or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        return None

    sub = payload.get("sub")
    if sub is None:
        logger.warning("Token missing 'sub' field")
        return None

    try:
        user_id = uuid.UUID(sub)
    except ValueError:
        logger.warning(f"Token 'sub' is not a user id: {sub}")
        return None

    return AuthContext(user_id=user_id, email=payload.get("email"), token=token)
