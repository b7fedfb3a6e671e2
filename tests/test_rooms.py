import uuid

import pytest
from sqlalchemy.exc import OperationalError

from rentys.core.config import settings
from rentys.core.exceptions import Forbidden, NotFound, ValidationError
from rentys.models.profile import ProfileRole
from rentys.models.request import RoomRequest
from rentys.models.room import Amenity, RoomType, normalize_features
from rentys.schemas.room import RoomSearch
from rentys.services.request_service import RequestService
from rentys.services.room_service import RoomService

from tests.conftest import room_payload


# ==================== Listing ====================


def test_owner_creates_room(client, owner_headers):
    response = client.post("/api/rooms", json=room_payload(), headers=owner_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["is_active"] is True
    assert data["city"] == "Pune"
    # Missing amenities default to false
    assert data["features"] == {
        "wifi": True,
        "electricity": False,
        "water": True,
        "parking": False,
        "furnished": False,
        "security": False,
    }


def test_tenant_cannot_create_room(client, tenant_headers):
    response = client.post("/api/rooms", json=room_payload(), headers=tenant_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


@pytest.mark.parametrize("overrides", [
    {"rent": 0},
    {"rent": -100},
    {"pincode": "4110"},
    {"room_type": "hostel"},
    {"features": {"wifi": True, "pool": True}},
    {"city": "   "},
])
def test_create_room_validation(client, owner_headers, overrides):
    response = client.post("/api/rooms", json=room_payload(**overrides), headers=owner_headers)
    assert response.status_code == 422


def test_normalize_features_rejects_unknown_key():
    with pytest.raises(ValidationError):
        normalize_features({"jacuzzi": True})
    assert normalize_features(None) == {a.value: False for a in Amenity}


def test_room_detail_includes_owner_contact(client, room, tenant_headers):
    response = client.get(f"/api/rooms/{room['id']}", headers=tenant_headers)
    assert response.status_code == 200
    owner = response.json()["owner"]
    assert owner["name"] == "Ravi Owner"
    assert owner["phone"] == "9822222222"
    assert owner["email"].endswith("@example.com")


def test_room_detail_unknown_room(client, tenant_headers):
    response = client.get("/api/rooms/00000000-0000-0000-0000-000000000000", headers=tenant_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_list_my_rooms(client, owner_headers, signup):
    client.post("/api/rooms", json=room_payload(city="Pune"), headers=owner_headers)
    client.post("/api/rooms", json=room_payload(city="Nashik"), headers=owner_headers)
    other_headers, _ = signup("owner")
    client.post("/api/rooms", json=room_payload(city="Satara"), headers=other_headers)

    response = client.get("/api/rooms/mine", headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 2
    assert {r["city"] for r in response.json()["items"]} == {"Pune", "Nashik"}


# ==================== Deletion ====================


def test_delete_room_without_requests(client, room, owner_headers):
    response = client.delete(f"/api/rooms/{room['id']}", headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["deleted"] is True
    assert client.get("/api/rooms/mine", headers=owner_headers).json()["total"] == 0


def test_delete_room_by_other_owner(client, room, signup):
    other_headers, _ = signup("owner")
    response = client.delete(f"/api/rooms/{room['id']}", headers=other_headers)
    assert response.status_code == 403


def test_delete_room_with_requests_deactivates(db, make_account, make_room):
    owner = make_account(ProfileRole.OWNER)
    tenant = make_account(ProfileRole.TENANT)
    room = make_room(owner)
    req = RequestService(db).create(tenant, room.id)

    result = RoomService(db).delete_room(owner, room.id)
    assert result == {"id": room.id, "deleted": False, "deactivated": True}

    # The request survives and still points at its room
    mine = RequestService(db).list_for_tenant(tenant)
    assert [v.id for v in mine] == [req.id]
    assert RoomService(db).search_rooms(RoomSearch()) == []


def test_delete_missing_room(db, make_account):
    owner = make_account(ProfileRole.OWNER)
    with pytest.raises(NotFound):
        RoomService(db).delete_room(owner, uuid.uuid4())


def test_delete_room_retries_request_lookup(db, make_account, make_room, monkeypatch):
    monkeypatch.setattr(settings, "BACKEND_RETRY_BACKOFF_SECONDS", 0)
    owner = make_account(ProfileRole.OWNER)
    room = make_room(owner)
    real_query = db.query
    failures = []

    def flaky_query(*entities):
        if entities and entities[0] is RoomRequest.id and not failures:
            failures.append(entities)
            raise OperationalError("SELECT", {}, Exception("connection reset"))
        return real_query(*entities)

    monkeypatch.setattr(db, "query", flaky_query)
    result = RoomService(db).delete_room(owner, room.id)

    assert len(failures) == 1
    assert result["deleted"] is True


def test_inactive_room_hidden_from_tenants(db, make_account, make_room):
    owner = make_account(ProfileRole.OWNER)
    tenant = make_account(ProfileRole.TENANT)
    room = make_room(owner)
    RequestService(db).create(tenant, room.id)
    RoomService(db).delete_room(owner, room.id)

    with pytest.raises(NotFound):
        RoomService(db).get_room_details(tenant, room.id)
    assert RoomService(db).get_room_details(owner, room.id)["is_active"] is False


def test_tenant_cannot_delete_room(db, make_account, make_room):
    room = make_room(make_account(ProfileRole.OWNER))
    with pytest.raises(Forbidden):
        RoomService(db).delete_room(make_account(ProfileRole.TENANT), room.id)


# ==================== Search ====================


@pytest.fixture
def listed(db, make_account, make_room):
    owner = make_account(ProfileRole.OWNER)
    rooms = {
        "cheap_student": make_room(owner, city="Pune", rent=4000, room_type="student",
                                   landmark="Near FC College", features={"wifi": True}),
        "family_flat": make_room(owner, city="Pune", rent=9000, room_type="family",
                                 landmark="Kothrud Depot", features={"wifi": True, "parking": True}),
        "nashik_both": make_room(owner, city="Nashik", rent=5000, room_type="both",
                                 landmark=None, features={}),
    }
    return owner, rooms


def _ids(rooms):
    return {r.id for r in rooms}


def test_search_by_budget(db, listed):
    _, rooms = listed
    found = RoomService(db).search_rooms(RoomSearch(max_rent=5000))
    assert _ids(found) == {rooms["cheap_student"].id, rooms["nashik_both"].id}
    assert all(r.rent <= 5000 for r in found)


def test_search_location_matches_city_or_landmark(db, listed):
    _, rooms = listed
    svc = RoomService(db)
    assert _ids(svc.search_rooms(RoomSearch(location="nashik"))) == {rooms["nashik_both"].id}
    assert _ids(svc.search_rooms(RoomSearch(location="kothrud"))) == {rooms["family_flat"].id}


def test_search_room_type_both_does_not_filter(db, listed):
    _, rooms = listed
    svc = RoomService(db)
    assert len(svc.search_rooms(RoomSearch(room_type=RoomType.BOTH))) == 3
    assert _ids(svc.search_rooms(RoomSearch(room_type=RoomType.FAMILY))) == {rooms["family_flat"].id}


def test_search_by_features(db, listed):
    _, rooms = listed
    found = RoomService(db).search_rooms(RoomSearch(features=[Amenity.WIFI, Amenity.PARKING]))
    assert _ids(found) == {rooms["family_flat"].id}


def test_search_excludes_inactive(db, listed, make_account):
    owner, rooms = listed
    tenant = make_account(ProfileRole.TENANT)
    RequestService(db).create(tenant, rooms["cheap_student"].id)
    RoomService(db).delete_room(owner, rooms["cheap_student"].id)

    found = RoomService(db).search_rooms(RoomSearch())
    assert rooms["cheap_student"].id not in _ids(found)
    assert all(r.is_active for r in found)


def test_search_wildcards_are_literal(db, listed):
    assert RoomService(db).search_rooms(RoomSearch(location="%")) == []


def test_search_over_http(client, owner_headers, tenant_headers):
    client.post("/api/rooms", json=room_payload(rent=3000, features={"wifi": True}), headers=owner_headers)
    client.post("/api/rooms", json=room_payload(rent=8000), headers=owner_headers)

    response = client.get(
        "/api/rooms",
        params={"location": "pune", "max_rent": 5000, "features": ["wifi"]},
        headers=tenant_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["rent"] == 3000


def test_search_requires_session(client):
    assert client.get("/api/rooms").status_code == 401


def test_search_rejects_unknown_feature(client, tenant_headers):
    response = client.get("/api/rooms", params={"features": ["pool"]}, headers=tenant_headers)
    assert response.status_code == 422
