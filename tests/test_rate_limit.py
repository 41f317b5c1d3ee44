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
from callcounter.core.rate_limit import TokenBucketLimiter, limiter
from callcounter.core.security import hash_password
from callcounter.models.user import User


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


def test_rate_limit_blocks(monkeypatch):
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
        monkeypatch.setenv("RATE_LIMIT_RPS", "0.1")
        monkeypatch.setenv("RATE_LIMIT_BURST", "1")
        limiter.reset()
        resp1 = client.get("/api/v1/calls", headers=headers)
        resp2 = client.get("/api/v1/calls", headers=headers)
        assert resp1.status_code == 200
        assert resp2.status_code == 429
        assert int(resp2.headers["Retry-After"]) >= 1
        # Buckets are per route group.
        assert client.get("/api/v1/stats", headers=headers).status_code == 200
    limiter.reset()


def test_rate_limit_disabled_by_default_in_dev(monkeypatch):
    monkeypatch.delenv("RATE_LIMIT_ENABLED", raising=False)
    monkeypatch.setenv("CALLS_ENV", "dev")
    monkeypatch.setenv("RATE_LIMIT_BURST", "1")
    user = _create_user()
    with _client() as client:
        headers = _auth(client, user["username"])
        for _ in range(3):
            assert client.get("/api/v1/calls", headers=headers).status_code == 200


def test_token_bucket_refills():
    bucket = TokenBucketLimiter()
    assert bucket.allow("k", rps=1000.0, burst=1)[0] is True
    allowed, retry_after = bucket.allow("k", rps=0.001, burst=1)
    assert allowed is False
    assert retry_after > 0
    bucket.reset()
    assert bucket.allow("k", rps=0.001, burst=1)[0] is True
