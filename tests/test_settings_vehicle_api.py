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
from callcounter.models.vehicle import UserVehicle, Vehicle


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


def _reset_vehicle(number: str, *, in_fleet: bool = False) -> None:
    with SessionLocal() as db:
        db.query(UserVehicle).filter(UserVehicle.vehicle_number == number).delete()
        db.query(Vehicle).filter(Vehicle.vehicle_number == number).delete()
        if in_fleet:
            db.add(Vehicle(vehicle_number=number))
        db.commit()


def test_entry_code_setting_round_trip():
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        assert client.get("/api/v1/settings/entry-code", headers=headers).json() == {"entry_code": None}
        resp = client.put("/api/v1/settings/entry-code", json={"entry_code": "1379#"}, headers=headers)
        assert resp.status_code == 200
        assert client.get("/api/v1/settings/entry-code", headers=headers).json() == {"entry_code": "1379#"}


def test_meter_visa_setting():
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        resp = client.put(
            "/api/v1/settings/meter-visa", json={"meter_number": "111", "visa_number": "222"}, headers=headers
        )
        assert resp.status_code == 200
        body = client.get("/api/v1/settings/meter-visa", headers=headers).json()
        assert body == {"meter_number": "111", "visa_number": "222"}


def test_select_vehicle_and_conflict():
    _reset_vehicle("5987")
    first = _create_user()
    second = _create_user()
    with _client() as client:
        first_headers = _auth(client, first["username"])
        second_headers = _auth(client, second["username"])
        assert client.get("/api/v1/vehicle/current", headers=first_headers).json()["vehicle_number"] is None

        resp = client.post("/api/v1/vehicle/current", json={"vehicle_number": "5987"}, headers=first_headers)
        assert resp.status_code == 200
        assert resp.json()["vehicle_type"] == "motorcycle"

        clash = client.post("/api/v1/vehicle/current", json={"vehicle_number": "5987"}, headers=second_headers)
        assert clash.status_code == 409

        client.delete("/api/v1/vehicle/current", headers=first_headers)
        resp = client.post("/api/v1/vehicle/current", json={"vehicle_number": "5987"}, headers=second_headers)
        assert resp.status_code == 200
        client.delete("/api/v1/vehicle/current", headers=second_headers)


def test_switching_vehicle_rederives_type():
    _reset_vehicle("6987")
    _reset_vehicle("15987")
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        client.post("/api/v1/vehicle/current", json={"vehicle_number": "6987"}, headers=headers)
        resp = client.post("/api/v1/vehicle/current", json={"vehicle_number": "15987"}, headers=headers)
        assert resp.json()["vehicle_type"] == "personal_standby"
        current = client.get("/api/v1/vehicle/current", headers=headers).json()
        assert current["vehicle_number"] == "15987"
        client.delete("/api/v1/vehicle/current", headers=headers)


def test_available_vehicles_exclude_selected():
    _reset_vehicle("6988", in_fleet=True)
    _reset_vehicle("6989", in_fleet=True)
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        client.post("/api/v1/vehicle/current", json={"vehicle_number": "6988"}, headers=headers)
        numbers = {v["vehicle_number"] for v in client.get("/api/v1/vehicle/available", headers=headers).json()["vehicles"]}
        assert "6988" not in numbers
        assert "6989" in numbers
        client.delete("/api/v1/vehicle/current", headers=headers)


def test_vehicle_number_must_be_digits():
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        resp = client.post("/api/v1/vehicle/current", json={"vehicle_number": "AB12"}, headers=headers)
        assert resp.status_code == 422
