from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rentys.core.deps import get_auth_context
from rentys.core.security import AuthContext
from rentys.database import get_db
from rentys.schemas.profile import ProfileCreate, ProfileOut, ProfileUpdate
from rentys.services.auth_service import AuthService
from rentys.services.profile_service import ProfileService

router = APIRouter()


@router.post("", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
def create_my_profile(
    payload: ProfileCreate,
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Finish an identity that has no profile yet. A second profile is a 422."""
    return AuthService(db).complete_profile(ctx, payload.role, payload.name, payload.phone)


@router.get("/me", response_model=ProfileOut)
def get_my_profile(
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return ProfileService(db).resolve_profile(ctx)


@router.patch("/me", response_model=ProfileOut)
def update_my_profile(
    payload: ProfileUpdate,
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Update name or phone. The role cannot be changed."""
    return ProfileService(db).update_profile(ctx, name=payload.name, phone=payload.phone)
