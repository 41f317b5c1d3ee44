import os
import uuid
from datetime import timedelta

# Lightweight local DB; no admin seeding during tests.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:////tmp/callcounter_test.db")
os.environ.setdefault("AUTO_CREATE_DB", "true")
os.environ.setdefault("AUTO_RUN_MIGRATIONS", "false")
os.environ.setdefault("AUTO_SEED_ADMIN_USER", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("CALLS_PASSWORD_HASH_ROUNDS", "1000")
os.environ.setdefault("CALLS_JWT_SECRET", "test-jwt-secret-strong-value-123456")

from fastapi.testclient import TestClient

from callcounter.main import create_app
from callcounter.core.config import settings
from callcounter.core.db import SessionLocal
from callcounter.core.security import hash_password
from callcounter.models.user import User
from callcounter.services.call_types import URGENT
from callcounter.services.stats import local_today


def _client() -> TestClient:
    app = create_app()
    return TestClient(app)


def _create_user(*, role: str = "USER", mda_code: str | None = None) -> dict:
    username = f"calls_{uuid.uuid4().hex[:8]}"
    with SessionLocal() as db:
        user = User(
            username=username,
            full_name=f"Driver {username}",
            mda_code=mda_code or str(uuid.uuid4().int)[:7],
            password_hash=hash_password("secret123"),
            role=role,
            is_active=True,
        )
        db.add(user)
        db.commit()
        return {"id": user.id, "username": username, "mda_code": user.mda_code}


def _auth(client: TestClient, username: str) -> dict:
    login = client.post("/api/v1/auth/login", json={"username": username, "password": "secret123"})
    assert login.status_code == 200, login.text
    return {"Authorization": f"Bearer {login.json()['access_token']}"}


def _call_payload(**overrides) -> dict:
    payload = {
        "call_type": "urgent",
        "call_date": local_today(settings.timezone).isoformat(),
        "start_time": "08:00",
        "location": "תל אביב, הרצל 1",
        "city": "תל אביב",
        "street": "הרצל 1",
        "vehicle_number": "5123",
    }
    payload.update(overrides)
    return payload


def test_create_call_normalises_type_and_derives_fields():
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        resp = client.post("/api/v1/calls", json=_call_payload(end_time="09:30"), headers=headers)
        assert resp.status_code == 201, resp.text
        call = resp.json()["call"]
        assert call["call_type"] == URGENT
        assert call["vehicle_type"] == "motorcycle"
        assert call["duration_minutes"] == 90
        assert call["status"] == "completed"
        assert call["vehicle_label"].endswith("אופנוע")


def test_vehicle_number_falls_back_to_mda_code():
    user = _create_user(mda_code=str(uuid.uuid4().int)[:7])
    with _client() as client:
        headers = _auth(client, user["username"])
        resp = client.post("/api/v1/calls", json=_call_payload(vehicle_number=None), headers=headers)
        assert resp.status_code == 201
        call = resp.json()["call"]
        assert call["vehicle_number"] == user["mda_code"]
        assert call["vehicle_type"] == "ambulance"
        assert call["status"] == "active"
        assert call["duration_minutes"] is None


def test_new_call_completes_previous_active_call():
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        first = client.post("/api/v1/calls", json=_call_payload(start_time="10:00"), headers=headers).json()["call"]
        client.post("/api/v1/calls", json=_call_payload(start_time="10:45"), headers=headers)
        resp = client.get(f"/api/v1/calls/{first['id']}", headers=headers)
        assert resp.status_code == 200
        previous = resp.json()["call"]
        assert previous["status"] == "completed"
        assert previous["end_time"] == "10:45:00"
        assert previous["duration_minutes"] == 45


def test_backdated_call_leaves_later_active_call_open():
    user = _create_user()
    yesterday = (local_today(settings.timezone) - timedelta(days=1)).isoformat()
    with _client() as client:
        headers = _auth(client, user["username"])
        today_call = client.post("/api/v1/calls", json=_call_payload(start_time="14:00"), headers=headers).json()["call"]
        resp = client.post(
            "/api/v1/calls",
            json=_call_payload(call_date=yesterday, start_time="09:00", end_time="10:00"),
            headers=headers,
        )
        assert resp.status_code == 201
        current = client.get(f"/api/v1/calls/{today_call['id']}", headers=headers).json()["call"]
        assert current["status"] == "active"
        assert current["end_time"] is None
        assert current["duration_minutes"] is None


def test_call_left_open_on_earlier_day_closes_without_duration():
    user = _create_user()
    yesterday = (local_today(settings.timezone) - timedelta(days=1)).isoformat()
    with _client() as client:
        headers = _auth(client, user["username"])
        stale = client.post(
            "/api/v1/calls", json=_call_payload(call_date=yesterday, start_time="14:00"), headers=headers
        ).json()["call"]
        client.post("/api/v1/calls", json=_call_payload(start_time="09:00"), headers=headers)
        previous = client.get(f"/api/v1/calls/{stale['id']}", headers=headers).json()["call"]
        assert previous["status"] == "completed"
        assert previous["end_time"] is None
        assert previous["duration_minutes"] is None


def test_today_list_only_shows_own_calls():
    owner = _create_user()
    other = _create_user()
    with _client() as client:
        owner_headers = _auth(client, owner["username"])
        other_headers = _auth(client, other["username"])
        client.post("/api/v1/calls", json=_call_payload(), headers=owner_headers)
        yesterday = (local_today(settings.timezone) - timedelta(days=1)).isoformat()
        client.post("/api/v1/calls", json=_call_payload(call_date=yesterday, start_time="07:00"), headers=owner_headers)
        today = client.get("/api/v1/calls", headers=owner_headers).json()["calls"]
        assert len(today) == 1
        assert client.get("/api/v1/calls", headers=other_headers).json()["calls"] == []


def test_update_recomputes_duration_and_status():
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        call = client.post("/api/v1/calls", json=_call_payload(start_time="23:30"), headers=headers).json()["call"]
        resp = client.put(f"/api/v1/calls/{call['id']}", json={"end_time": "00:15", "call_type": "natbag"}, headers=headers)
        assert resp.status_code == 200
        updated = resp.json()["call"]
        assert updated["duration_minutes"] == 45
        assert updated["status"] == "completed"
        assert updated["call_type"] == "נתבג"


def test_only_owner_can_update_and_admin_can_delete():
    owner = _create_user()
    stranger = _create_user()
    admin = _create_user(role="ADMIN")
    with _client() as client:
        owner_headers = _auth(client, owner["username"])
        call = client.post("/api/v1/calls", json=_call_payload(), headers=owner_headers).json()["call"]
        stranger_headers = _auth(client, stranger["username"])
        assert client.put(f"/api/v1/calls/{call['id']}", json={"city": "x"}, headers=stranger_headers).status_code == 403
        assert client.delete(f"/api/v1/calls/{call['id']}", headers=stranger_headers).status_code == 403
        admin_headers = _auth(client, admin["username"])
        assert client.put(f"/api/v1/calls/{call['id']}", json={"city": "x"}, headers=admin_headers).status_code == 403
        resp = client.delete(f"/api/v1/calls/{call['id']}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json() == {"status": "success", "id": call["id"]}
        assert client.get(f"/api/v1/calls/{call['id']}", headers=owner_headers).status_code == 404


def test_create_call_validation():
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        assert client.post("/api/v1/calls", json=_call_payload(location="   "), headers=headers).status_code == 422
        payload = _call_payload()
        payload.pop("start_time")
        assert client.post("/api/v1/calls", json=payload, headers=headers).status_code == 422


def test_history_is_paginated():
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        for hour in range(3):
            client.post("/api/v1/calls", json=_call_payload(start_time=f"1{hour}:00"), headers=headers)
        resp = client.get("/api/v1/calls/history?page=1&page_size=2", headers=headers)
        assert resp.status_code == 200
        assert len(resp.json()["calls"]) == 2
        assert resp.headers.get("X-Total-Count") == "3"
        assert resp.headers.get("X-Page-Size") == "2"
        second = client.get("/api/v1/calls/history?page=2&page_size=2", headers=headers).json()
        assert len(second["calls"]) == 1


def test_historical_month_includes_statistics():
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        client.post(
            "/api/v1/calls",
            json=_call_payload(call_date="2025-02-10", start_time="08:00", end_time="09:00"),
            headers=headers,
        )
        client.post(
            "/api/v1/calls",
            json=_call_payload(call_date="2025-03-01", start_time="08:00", end_time="08:30"),
            headers=headers,
        )
        resp = client.get("/api/v1/calls/historical?year=2025&month=2", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["range"] == {"start": "2025-02-01", "end": "2025-03-01"}
        assert len(body["calls"]) == 1
        assert body["statistics"]["totalCalls"] == 1
        assert body["statistics"]["totalHours"] == 1.0


def test_parse_text_reports_missing_fields():
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        resp = client.post("/api/v1/calls/parse-text", json={"text": "עיר: חיפה\nיציאה: 7:10"}, headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["call"] == {"city": "חיפה", "start_time": "07:10"}
        assert body["missing"] == ["call_type", "call_date"]
