import os

# Must be set before rentys.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SUPABASE_ENABLED"] = "false"

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rentys import models  # noqa: F401
from rentys.core.security import AuthContext
from rentys.database import get_db
from rentys.db.base import Base
from rentys.main import app
from rentys.models.profile import ProfileRole
from rentys.schemas.auth import SignupRequest
from rentys.schemas.room import RoomCreate
from rentys.services.auth_service import AuthService
from rentys.services.room_service import RoomService

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def room_payload(**overrides):
    payload = {
        "address_line": "12 MG Road, Flat 3",
        "city": "Pune",
        "district": "Pune",
        "taluka": "Haveli",
        "state": "Maharashtra",
        "pincode": "411001",
        "landmark": "Near FC College",
        "rent": 6000,
        "room_type": "student",
        "features": {"wifi": True, "water": True},
    }
    payload.update(overrides)
    return payload


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ==================== HTTP helpers ====================


@pytest.fixture
def signup(client):
    """Sign up over HTTP and return (auth headers, token response body)"""
    def _signup(role="tenant", name=None, email=None, phone="9800000000"):
        body = {
            "email": email or f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            "password": "Secret123!",
            "role": role,
            "name": name or role.title(),
            "phone": phone,
        }
        response = client.post("/api/auth/signup", json=body)
        assert response.status_code == 201, response.text
        data = response.json()
        return {"Authorization": f"Bearer {data['access_token']}"}, data
    return _signup


@pytest.fixture
def tenant_headers(signup):
    headers, _ = signup("tenant", name="Asha Tenant", phone="9811111111")
    return headers


@pytest.fixture
def owner_headers(signup):
    headers, _ = signup("owner", name="Ravi Owner", phone="9822222222")
    return headers


@pytest.fixture
def room(client, owner_headers):
    response = client.post("/api/rooms", json=room_payload(), headers=owner_headers)
    assert response.status_code == 201, response.text
    return response.json()


# ==================== Service helpers ====================


@pytest.fixture
def make_account(db):
    """Create an identity plus profile directly and return its AuthContext"""
    def _make(role: ProfileRole, name="Someone", phone="9833333333") -> AuthContext:
        data = AuthService(db).signup(SignupRequest(
            email=f"{role.value}-{uuid.uuid4().hex[:8]}@example.com",
            password="Secret123!",
            role=role,
            name=name,
            phone=phone,
        ))
        return AuthContext(user_id=uuid.UUID(data["user_id"]))
    return _make


@pytest.fixture
def make_room(db):
    def _make(ctx: AuthContext, **overrides):
        return RoomService(db).create_room(ctx, RoomCreate(**room_payload(**overrides)))
    return _make
