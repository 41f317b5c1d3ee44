import os
import uuid

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
from callcounter.core.db import SessionLocal
from callcounter.core.security import hash_password
from callcounter.models.user import User
from callcounter.services.call_types import URGENT


def _client() -> TestClient:
    app = create_app()
    return TestClient(app)


def _create_user(*, role: str = "USER") -> dict:
    username = f"u_{uuid.uuid4().hex[:10]}"
    with SessionLocal() as db:
        user = User(
            username=username,
            full_name=f"Driver {username}",
            mda_code=str(uuid.uuid4().int)[:7],
            password_hash=hash_password("secret123"),
            role=role,
            is_active=True,
        )
        db.add(user)
        db.commit()
        return {"id": user.id, "username": username}


def _auth(client: TestClient, username: str) -> dict:
    login = client.post("/api/v1/auth/login", json={"username": username, "password": "secret123"})
    assert login.status_code == 200, login.text
    return {"Authorization": f"Bearer {login.json()['access_token']}"}


def _api_key(client: TestClient, permissions: list[str] | None = None) -> tuple[dict, str]:
    admin = _create_user(role="ADMIN")
    headers = _auth(client, admin["username"])
    payload = {"key_name": "integration"}
    if permissions is not None:
        payload["permissions"] = permissions
    resp = client.post("/api/v1/admin/api-keys", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return admin, resp.json()["api_key"]


def test_external_requires_api_key():
    with _client() as client:
        assert client.get("/api/v1/external/calls").status_code == 401
        resp = client.get("/api/v1/external/calls", headers={"X-API-Key": "not-a-key"})
        assert resp.status_code == 401


def test_external_permission_enforced():
    with _client() as client:
        _, key = _api_key(client, permissions=["stats:read"])
        resp = client.get("/api/v1/external/calls", headers={"X-API-Key": key})
        assert resp.status_code == 403
        assert client.get("/api/v1/external/stats", headers={"X-API-Key": key}).status_code == 200


def test_external_create_and_filter_calls():
    city = f"עיר{uuid.uuid4().hex[:6]}"
    with _client() as client:
        owner, key = _api_key(client)
        headers = {"X-API-Key": key}
        for start in ("08:00", "09:00"):
            resp = client.post(
                "/api/v1/external/calls",
                json={
                    "call_type": "urgent",
                    "call_date": "2024-11-05",
                    "start_time": start,
                    "location": f"{city}, רחוב 1",
                    "city": city,
                    "vehicle_number": "12345",
                },
                headers=headers,
            )
            assert resp.status_code == 201
            assert resp.json()["call"]["user_id"] == owner["id"]

        resp = client.get(
            "/api/v1/external/calls", params={"date": "2024-11-05", "city": city, "type": "urgent"}, headers=headers
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["pagination"]["total"] == 2
        assert all(c["call_type"] == URGENT for c in body["calls"])

        page = client.get(
            "/api/v1/external/calls", params={"date": "2024-11-05", "city": city, "limit": 1}, headers=headers
        ).json()
        assert len(page["calls"]) == 1
        assert page["pagination"]["has_more"] is True

        stats = client.get("/api/v1/external/stats", params={"date": "2024-11-05"}, headers=headers).json()
        assert stats["calls_by_city"][city] == 2
        assert stats["stats"]["countsByVehicleCategory"]["personal_standby"] >= 2


def test_external_limit_bounds():
    with _client() as client:
        _, key = _api_key(client)
        headers = {"X-API-Key": key}
        assert client.get("/api/v1/external/calls?limit=0", headers=headers).status_code == 422
        assert client.get("/api/v1/external/calls?limit=1001", headers=headers).status_code == 422
        resp = client.get(
            "/api/v1/external/calls", params={"start_date": "2024-02-01", "end_date": "2024-01-01"}, headers=headers
        )
        assert resp.status_code == 400
