"""
Room Request Routes

  POST   /api/requests                   tenant submits interest in a room
  GET    /api/requests/owner             owner's incoming requests
  GET    /api/requests/tenant            tenant's submitted requests
  POST   /api/requests/{id}/decision     owner accepts or rejects
"""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rentys.core.deps import get_auth_context
from rentys.core.security import AuthContext
from rentys.database import get_db
from rentys.schemas.request import (
    DecisionRequest,
    OwnerRequestList,
    RequestCreate,
    RequestOut,
    TenantRequestList,
)
from rentys.services.request_service import RequestService

router = APIRouter(tags=["Requests"])


@router.post("", response_model=RequestOut, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: RequestCreate,
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return RequestService(db).create(ctx, payload.room_id, payload.message)


@router.get("/owner", response_model=OwnerRequestList)
def list_owner_requests(
    owner_id: Optional[uuid.UUID] = None,
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Tenant contact details appear only on accepted requests"""
    items = RequestService(db).list_for_owner(ctx, owner_id)
    return {"items": items, "total": len(items)}


@router.get("/tenant", response_model=TenantRequestList)
def list_tenant_requests(
    tenant_id: Optional[uuid.UUID] = None,
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    items = RequestService(db).list_for_tenant(ctx, tenant_id)
    return {"items": items, "total": len(items)}


@router.post("/{request_id}/decision", response_model=RequestOut)
def decide_request(
    request_id: uuid.UUID,
    payload: DecisionRequest,
    ctx: Optional[AuthContext] = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """
    Accept or reject a pending request. A request that is already decided
    answers 409 invalid_transition, including a repeat of the same decision.
    """
    return RequestService(db).decide(ctx, request_id, payload.decision)
