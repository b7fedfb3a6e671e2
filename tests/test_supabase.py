import uuid
from types import SimpleNamespace

import pytest

from rentys.core.config import settings
from rentys.core.exceptions import BackendUnavailable, NotAuthenticated
from rentys.core.security import AuthContext
from rentys.models.profile import Profile, ProfileRole
from rentys.models.user import User
from rentys.schemas.auth import SignupRequest
from rentys.services import auth_service as auth_module
from rentys.services.auth_service import AuthService
from rentys.services.supabase_service import SupabaseService, supabase_service


class FakeAdmin:
    def __init__(self, fail=False):
        self.fail = fail
        self.signed_out = []
        self.deleted = []

    def sign_out(self, token):
        if self.fail:
            raise RuntimeError("service key rejected")
        self.signed_out.append(token)

    def delete_user(self, user_id):
        if self.fail:
            raise RuntimeError("service key rejected")
        self.deleted.append(user_id)


class FakeAuth:
    def __init__(self, user=None, fail=False):
        self.user = user
        self.fail = fail
        self.signups = []
        self.admin = FakeAdmin(fail)

    def get_user(self, token):
        if self.fail:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=self.user)

    def sign_in_with_password(self, credentials):
        if self.fail:
            raise RuntimeError("Invalid login credentials")
        return SimpleNamespace(user=self.user, session=SimpleNamespace(access_token="sb-token"))

    def sign_up(self, credentials):
        if self.fail:
            raise RuntimeError("User already registered")
        self.signups.append(credentials["email"])
        return SimpleNamespace(user=self.user, session=SimpleNamespace(access_token="sb-token"))


def _service(user=None, fail=False):
    return SupabaseService(client=SimpleNamespace(auth=FakeAuth(user, fail)))


@pytest.fixture
def remote_user():
    return SimpleNamespace(id=uuid.uuid4(), email="asha@example.com")


@pytest.fixture
def supabase_mode(monkeypatch, remote_user):
    """Switch identity to Supabase with a fake client behind the shared service"""
    fake = SimpleNamespace(auth=FakeAuth(remote_user))
    monkeypatch.setattr(settings, "SUPABASE_ENABLED", True)
    monkeypatch.setattr(supabase_service, "_client", fake)
    return fake.auth


def _signup_request(**overrides):
    data = {
        "email": "asha@example.com",
        "password": "Secret123!",
        "role": "tenant",
        "name": "Asha",
        "phone": "9811111111",
    }
    data.update(overrides)
    return SignupRequest(**data)


def test_get_current_user():
    user_id = uuid.uuid4()
    svc = _service(SimpleNamespace(id=user_id, email="asha@example.com"))
    assert svc.get_current_user("token") == {"id": str(user_id), "email": "asha@example.com"}


def test_get_current_user_invalid_token():
    assert _service(fail=True).get_current_user("token") is None


def test_sign_in_bad_credentials():
    assert _service(fail=True).sign_in("asha@example.com", "nope") is None


def test_sign_in_returns_session_token():
    user_id = uuid.uuid4()
    result = _service(SimpleNamespace(id=user_id, email="asha@example.com")).sign_in("asha@example.com", "pw")
    assert result["access_token"] == "sb-token"
    assert result["id"] == str(user_id)


def test_unconfigured_client(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_URL", "")
    with pytest.raises(BackendUnavailable):
        SupabaseService().client


def test_sync_user_creates_then_updates(db):
    user_id = uuid.uuid4()
    svc = SupabaseService(client=SimpleNamespace())

    created = svc.sync_user_to_db(db, {"id": str(user_id), "email": "old@example.com"})
    assert created.id == user_id

    svc.sync_user_to_db(db, {"id": str(user_id), "email": "new@example.com"})
    assert db.get(User, user_id).email == "new@example.com"
    assert db.query(User).count() == 1


def test_sign_up_returns_remote_token(remote_user):
    svc = _service(remote_user)
    result = svc.sign_up("asha@example.com", "Secret123!", {"role": "tenant"})
    assert result == {"id": str(remote_user.id), "email": "asha@example.com", "access_token": "sb-token"}


def test_sign_up_without_user_is_backend_error():
    with pytest.raises(BackendUnavailable):
        _service(user=None).sign_up("asha@example.com", "Secret123!")


def test_sign_up_rejected_upstream():
    with pytest.raises(BackendUnavailable):
        _service(fail=True).sign_up("asha@example.com", "Secret123!")


def test_sign_out_and_delete_user(remote_user):
    svc = _service(remote_user)
    assert svc.sign_out("sb-token") is True
    assert svc.delete_user(str(remote_user.id)) is True
    assert svc.client.auth.admin.signed_out == ["sb-token"]
    assert svc.client.auth.admin.deleted == [str(remote_user.id)]


def test_sign_out_and_delete_user_failures():
    svc = _service(fail=True)
    assert svc.sign_out("sb-token") is False
    assert svc.delete_user(str(uuid.uuid4())) is False


# ==================== Supabase identity mode ====================


def test_supabase_signup_creates_user_and_profile(db, supabase_mode, remote_user):
    result = AuthService(db).signup(_signup_request())

    assert result["access_token"] == "sb-token"
    assert result["user_id"] == str(remote_user.id)
    assert result["dashboard"] == "/tenant"
    assert supabase_mode.signups == ["asha@example.com"]

    user = db.get(User, remote_user.id)
    assert user.hashed_password is None
    assert user.profile.role == ProfileRole.TENANT
    assert user.profile.name == "Asha"


def test_supabase_signup_failure_removes_remote_account(db, supabase_mode, remote_user, monkeypatch):
    def fail_commit(session):
        session.rollback()
        raise BackendUnavailable()

    monkeypatch.setattr(auth_module, "commit_or_raise", fail_commit)

    with pytest.raises(BackendUnavailable):
        AuthService(db).signup(_signup_request())
    assert supabase_mode.admin.deleted == [str(remote_user.id)]
    assert db.query(User).count() == 0
    assert db.query(Profile).count() == 0


def test_supabase_signup_without_remote_user(db, supabase_mode):
    supabase_mode.user = None
    with pytest.raises(BackendUnavailable):
        AuthService(db).signup(_signup_request())
    assert db.query(User).count() == 0


def test_supabase_signup_without_remote_user_over_http(client, supabase_mode):
    supabase_mode.user = None
    response = client.post("/api/auth/signup", json=_signup_request().model_dump(mode="json"))
    assert response.status_code == 503
    assert response.json()["error"] == "backend_unavailable"


def test_supabase_bearer_token_resolves_profile(client, supabase_mode):
    response = client.post("/api/auth/signup", json=_signup_request().model_dump(mode="json"))
    assert response.status_code == 201
    token = response.json()["access_token"]

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["profile"]["email"] == "asha@example.com"
    assert response.json()["dashboard"] == "/tenant"


def test_supabase_invalid_token(client, supabase_mode):
    supabase_mode.fail = True
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer expired"})
    assert response.status_code == 401


def test_supabase_identity_can_finish_its_profile(client, supabase_mode):
    headers = {"Authorization": "Bearer sb-token"}
    assert client.get("/api/auth/me", headers=headers).status_code == 404

    response = client.post("/api/profiles", json={"role": "owner", "name": " Ravi "}, headers=headers)
    assert response.status_code == 201
    assert response.json()["role"] == "owner"
    assert response.json()["name"] == "Ravi"
    assert client.get("/api/auth/me", headers=headers).json()["dashboard"] == "/owner"

    response = client.post("/api/profiles", json={"role": "tenant", "name": "Again"}, headers=headers)
    assert response.status_code == 422


def test_supabase_login_syncs_user(db, supabase_mode, remote_user):
    AuthService(db).signup(_signup_request())

    result = AuthService(db).login("Asha@Example.com", "Secret123!")
    assert result["access_token"] == "sb-token"
    assert result["role"] == "tenant"
    assert db.get(User, remote_user.id).last_login is not None


def test_supabase_login_bad_credentials(db, supabase_mode):
    supabase_mode.fail = True
    with pytest.raises(NotAuthenticated):
        AuthService(db).login("asha@example.com", "wrong")


def test_supabase_logout_revokes_session(db, supabase_mode, remote_user):
    ctx = AuthContext(user_id=remote_user.id, email=remote_user.email, token="sb-token")
    assert AuthService(db).logout(ctx) is True
    assert supabase_mode.admin.signed_out == ["sb-token"]
