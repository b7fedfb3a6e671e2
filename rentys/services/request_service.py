"""
Request Lifecycle Service
A tenant asks for a room; the room's owner accepts or rejects once.

    pending ──accept──▶ accepted   (terminal)
       └─────reject──▶ rejected   (terminal)

Every operation takes the caller's AuthContext explicitly and performs its
own authorization: role, ownership, and contact visibility are checked here
rather than trusted to the client or the store.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Union

from sqlalchemy import update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from rentys.core.config import settings
from rentys.core.exceptions import (
    BackendUnavailable,
    Forbidden,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from rentys.core.security import AuthContext
from rentys.database import commit_or_raise, with_retry
from rentys.db.base import utcnow
from rentys.models.profile import Profile, ProfileRole
from rentys.models.request import Decision, RequestStatus, RoomRequest
from rentys.models.room import Room
from rentys.schemas.request import OwnerRequestView, TenantRequestView
from rentys.services.profile_service import ProfileService
from rentys.services.room_service import RoomService

logger = logging.getLogger(__name__)


def _base_view(req: RoomRequest, room: Room) -> dict:
    return {
        "id": req.id,
        "room_id": req.room_id,
        "tenant_id": req.tenant_id,
        "owner_id": req.owner_id,
        "message": req.message,
        "status": req.status,
        "created_at": req.created_at,
        "decided_at": req.decided_at,
        "room": room.summary,
    }


class RequestService:
    def __init__(self, db: Session):
        self.db = db
        self.profiles = ProfileService(db)
        self.rooms = RoomService(db)

    # ── Create ────────────────────────────────────────────────────────────────

    def create(
        self,
        ctx: Optional[AuthContext],
        room_id: uuid.UUID,
        message: Optional[str] = None,
    ) -> RoomRequest:
        """
        Submit a pending request on an active room.

        Raises:
            NotAuthenticated: no session
            ProfileNotFound: identity has no profile
            Forbidden: caller is not a tenant
            ValidationError: room does not resolve or is no longer listed
        """
        tenant = self.profiles.resolve_with_role(ctx, ProfileRole.TENANT)

        try:
            room = self.rooms.get_active_room(room_id)
        except NotFound:
            raise ValidationError(f"Room {room_id} does not exist or is not listed")

        message = (message or "").strip() or settings.DEFAULT_REQUEST_MESSAGE
        if len(message) > settings.MAX_REQUEST_MESSAGE_LENGTH:
            raise ValidationError("Message is too long")

        if settings.ALLOW_DUPLICATE_PENDING_REQUESTS:
            duplicate = self._has_pending(tenant.id, room.id)
        else:
            # Lock held until commit, so concurrent creates on this room check in turn.
            # No retry here: a retry rolls back and would drop the lock.
            duplicate = self._pending_under_room_lock(tenant.id, room.id)

        if duplicate:
            if not settings.ALLOW_DUPLICATE_PENDING_REQUESTS:
                self.db.rollback()
                raise ValidationError("You already have a pending request for this room")
            logger.warning(
                f"[request] Tenant {tenant.id} already has a pending request on room {room.id}; "
                "accepting duplicate"
            )

        req = RoomRequest(
            room_id=room.id,
            tenant_id=tenant.id,
            owner_id=room.owner_id,
            message=message,
            status=RequestStatus.PENDING,
        )
        self.db.add(req)
        commit_or_raise(self.db)
        self.db.refresh(req)
        logger.info(f"[request] Tenant {tenant.id} requested room {room.id} (request {req.id})")
        return req

    def _pending_under_room_lock(self, tenant_id: uuid.UUID, room_id: uuid.UUID) -> bool:
        """SELECT ... FOR UPDATE on the room row, then the duplicate check. SQLite ignores the lock clause."""
        try:
            self.db.query(Room.id).filter(Room.id == room_id).with_for_update().one()
            return self._pending_exists(tenant_id, room_id)
        except DBAPIError as e:
            self.db.rollback()
            raise BackendUnavailable() from e

    def _pending_exists(self, tenant_id: uuid.UUID, room_id: uuid.UUID) -> bool:
        return (
            self.db.query(RoomRequest.id)
            .filter(
                RoomRequest.tenant_id == tenant_id,
                RoomRequest.room_id == room_id,
                RoomRequest.status == RequestStatus.PENDING,
            )
            .first()
            is not None
        )

    @with_retry
    def _has_pending(self, tenant_id: uuid.UUID, room_id: uuid.UUID) -> bool:
        return self._pending_exists(tenant_id, room_id)

    # ── Decide ────────────────────────────────────────────────────────────────

    @with_retry
    def _get_request(self, request_id: uuid.UUID) -> Optional[RoomRequest]:
        return self.db.get(RoomRequest, request_id)

    def decide(
        self,
        ctx: Optional[AuthContext],
        request_id: uuid.UUID,
        decision: Union[Decision, str],
    ) -> RoomRequest:
        """
        Move a pending request to accepted or rejected.

        Raises:
            NotFound: request does not resolve
            Forbidden: caller is not the request's owner
            InvalidTransition: already decided, or lost a concurrent decision
        """
        try:
            decision = Decision(decision)
        except ValueError:
            raise ValidationError(f"Unknown decision: {decision}")

        actor = self.profiles.resolve_profile(ctx)
        req = self._get_request(request_id)
        if req is None:
            raise NotFound("Request not found")
        if req.owner_id != actor.id:
            raise Forbidden("Only the room's owner can decide on this request")
        if RequestStatus(req.status).is_terminal:
            raise InvalidTransition(f"Request is already {RequestStatus(req.status).value}")

        target = decision.target_status
        stmt = (
            update(RoomRequest)
            .where(
                RoomRequest.id == req.id,
                RoomRequest.status == RequestStatus.PENDING,
            )
            .values(status=target, decided_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
        except DBAPIError as e:
            self.db.rollback()
            logger.error(f"[request] Decision write failed for {req.id}: {e}")
            raise BackendUnavailable() from e

        # Compare-and-swap: zero rows means another decision committed first
        if result.rowcount != 1:
            self.db.rollback()
            logger.warning(f"[request] Lost decision race on {req.id} ({target.value})")
            raise InvalidTransition("Request was decided by another action")

        commit_or_raise(self.db)
        self.db.refresh(req)
        logger.info(f"[request] Owner {actor.id} {target.value} request {req.id}")
        return req

    def accept(self, ctx: Optional[AuthContext], request_id: uuid.UUID) -> RoomRequest:
        return self.decide(ctx, request_id, Decision.ACCEPT)

    def reject(self, ctx: Optional[AuthContext], request_id: uuid.UUID) -> RoomRequest:
        return self.decide(ctx, request_id, Decision.REJECT)

    # ── Listings ──────────────────────────────────────────────────────────────

    @with_retry
    def _owner_rows(self, owner_id: uuid.UUID):
        return (
            self.db.query(RoomRequest, Room, Profile)
            .join(Room, Room.id == RoomRequest.room_id)
            .join(Profile, Profile.id == RoomRequest.tenant_id)
            .filter(RoomRequest.owner_id == owner_id)
            .order_by(RoomRequest.created_at.desc())
            .all()
        )

    def list_for_owner(
        self,
        ctx: Optional[AuthContext],
        owner_id: Optional[uuid.UUID] = None,
    ) -> List[OwnerRequestView]:
        """
        Requests on the caller's rooms. Tenant email and phone are only
        filled in once the request has been accepted.
        """
        owner = self.profiles.resolve_with_role(ctx, ProfileRole.OWNER)
        if owner_id is not None and owner_id != owner.id:
            raise Forbidden("Owners can only list their own requests")

        views = []
        for req, room, tenant in self._owner_rows(owner.id):
            accepted = RequestStatus(req.status) == RequestStatus.ACCEPTED
            view = _base_view(req, room)
            view["tenant"] = {
                "name": tenant.name,
                "email": tenant.email if accepted else None,
                "phone": tenant.phone if accepted else None,
            }
            views.append(OwnerRequestView(**view))
        return views

    @with_retry
    def _tenant_rows(self, tenant_id: uuid.UUID):
        return (
            self.db.query(RoomRequest, Room)
            .join(Room, Room.id == RoomRequest.room_id)
            .filter(RoomRequest.tenant_id == tenant_id)
            .order_by(RoomRequest.created_at.desc())
            .all()
        )

    def list_for_tenant(
        self,
        ctx: Optional[AuthContext],
        tenant_id: Optional[uuid.UUID] = None,
    ) -> List[TenantRequestView]:
        tenant = self.profiles.resolve_with_role(ctx, ProfileRole.TENANT)
        if tenant_id is not None and tenant_id != tenant.id:
            raise Forbidden("Tenants can only list their own requests")

        return [
            TenantRequestView(**_base_view(req, room))
            for req, room in self._tenant_rows(tenant.id)
        ]
