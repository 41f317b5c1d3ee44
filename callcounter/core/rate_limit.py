"""In-memory rate limiter (per-process token bucket) keyed by caller and route group."""

from __future__ import annotations

import hashlib
import os
import threading
import time
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, Request


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None:
        return None
    val = raw.strip().lower()
    if val in {"1", "true", "yes"}:
        return True
    if val in {"0", "false", "no"}:
        return False
    return None


def rate_limit_enabled() -> bool:
    explicit = _env_bool("RATE_LIMIT_ENABLED")
    if explicit is not None:
        return explicit
    return (os.getenv("CALLS_ENV") or os.getenv("APP_ENV") or "dev").strip().lower() == "prod"


def _env_number(name: str, default: float, minimum: float) -> float:
    try:
        val = float(os.getenv(name, str(default)))
    except Exception:
        val = default
    return max(val, minimum)


def _caller_identity(request: Request, authorization: Optional[str], api_key: Optional[str]) -> str:
    credential = None
    if authorization and authorization.lower().startswith("bearer "):
        credential = authorization.split(" ", 1)[1].strip()
    elif api_key:
        credential = api_key.strip()
    if credential:
        return hashlib.sha256(credential.encode("utf-8")).hexdigest()[:16]
    return request.client.host if request.client else "unknown"


def _path_group(path: str) -> str:
    parts = [p for p in path.split("/") if p]
    if len(parts) >= 3 and parts[0] == "api" and parts[1] == "v1":
        return f"/api/v1/{parts[2]}"
    if parts:
        return f"/{parts[0]}"
    return "/"


@dataclass
class Bucket:
    tokens: float
    last_ts: float


class TokenBucketLimiter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._buckets: dict[str, Bucket] = {}

    def allow(self, key: str, *, rps: float, burst: int) -> tuple[bool, float]:
        now = time.monotonic()
        with self._lock:
            bucket = self._buckets.setdefault(key, Bucket(tokens=float(burst), last_ts=now))
            elapsed = max(0.0, now - bucket.last_ts)
            bucket.tokens = min(float(burst), bucket.tokens + elapsed * rps)
            bucket.last_ts = now
            if bucket.tokens >= 1.0:
                bucket.tokens -= 1.0
                return True, 0.0
            retry_after = (1.0 - bucket.tokens) / rps
            return False, max(retry_after, 0.1)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


limiter = TokenBucketLimiter()


def rate_limit_dependency(
    request: Request,
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> None:
    if not rate_limit_enabled():
        return
    rps = _env_number("RATE_LIMIT_RPS", 5.0, 0.1)
    burst = int(_env_number("RATE_LIMIT_BURST", 20, 1))
    key = f"{_caller_identity(request, authorization, x_api_key)}:{_path_group(request.url.path)}"
    allowed, retry_after = limiter.allow(key, rps=rps, burst=burst)
    if not allowed:
        raise HTTPException(
            status_code=429,
            detail="Too Many Requests",
            headers={"Retry-After": str(max(1, int(retry_after)))},
        )
