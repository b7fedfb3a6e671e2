"""
Authentication Endpoints
Signup, login, logout and the current-user lookup that drives the
role-specific dashboard redirect
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rentys.core.deps import get_auth_context
from rentys.core.security import AuthContext
from rentys.database import get_db
from rentys.schemas.auth import LoginRequest, MeResponse, SignupRequest, TokenResponse
from rentys.schemas.profile import ProfileOut
from rentys.services.auth_service import AuthService
from rentys.services.profile_service import ProfileService

router = APIRouter()


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(user_in: SignupRequest, db: Session = Depends(get_db)):
    """Register a new tenant or owner"""
    return AuthService(db).signup(user_in)


@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Login and get access token with role info"""
    return AuthService(db).login(credentials.email, credentials.password)


@router.post("/logout")
def logout(
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return {"success": AuthService(db).logout(ctx)}


@router.get("/me", response_model=MeResponse)
def get_me(
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Current profile plus the dashboard it belongs on"""
    profile = ProfileService(db).resolve_profile(ctx)
    return {"profile": ProfileOut.model_validate(profile), "dashboard": profile.dashboard_path}
