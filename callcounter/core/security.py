"""
Password hashing and session-bound access tokens.

Access tokens are HS256 JWTs whose `jti` names a row in `user_sessions`;
a token is only honoured while that row exists, so logout and account
removal take effect immediately.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional


PASSWORD_SCHEME = "pbkdf2_sha256"
DEFAULT_PASSWORD_ROUNDS = 120000
# Drivers stay signed in for a week by default.
DEFAULT_TOKEN_TTL_MIN = 7 * 24 * 60
DEV_JWT_SECRET = "dev-jwt-secret-change-me"


class TokenError(ValueError):
    """Raised when an access token cannot be trusted."""


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _unb64(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


def _password_rounds() -> int:
    try:
        return max(1, int(os.getenv("CALLS_PASSWORD_HASH_ROUNDS", str(DEFAULT_PASSWORD_ROUNDS))))
    except ValueError:
        return DEFAULT_PASSWORD_ROUNDS


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password cannot be empty")
    rounds = _password_rounds()
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("ascii"), rounds)
    return "$".join((PASSWORD_SCHEME, str(rounds), salt, digest.hex()))


def verify_password(password: str, encoded: str) -> bool:
    parts = (encoded or "").split("$")
    if len(parts) != 4 or parts[0] != PASSWORD_SCHEME or not parts[1].isdigit():
        return False
    _, rounds, salt, expected = parts
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("ascii"), int(rounds))
    return hmac.compare_digest(digest.hex(), expected)


def jwt_secret() -> str:
    """Signing secret; empty in prod when CALLS_JWT_SECRET is unset."""
    secret = (os.getenv("CALLS_JWT_SECRET") or "").strip()
    if secret:
        return secret
    env = (os.getenv("CALLS_ENV") or os.getenv("APP_ENV") or "dev").strip().lower()
    return "" if env == "prod" else DEV_JWT_SECRET


def token_ttl() -> timedelta:
    try:
        minutes = max(1, int(os.getenv("CALLS_JWT_EXP_MIN", str(DEFAULT_TOKEN_TTL_MIN))))
    except ValueError:
        minutes = DEFAULT_TOKEN_TTL_MIN
    return timedelta(minutes=minutes)


def new_session_id() -> str:
    return secrets.token_hex(16)


def _sign(signing_input: str, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()


def create_access_token(
    *,
    sub: str,
    user_id: str,
    session_id: str,
    expires_at: Optional[datetime] = None,
) -> str:
    """Sign a token for `user_id`; role and profile are read from the database on use."""
    secret = jwt_secret()
    if not secret:
        raise RuntimeError("CALLS_JWT_SECRET is required")
    now = datetime.now(timezone.utc)
    expires_at = expires_at or now + token_ttl()
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    claims = {
        "sub": sub,
        "user_id": user_id,
        "jti": session_id,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    header = _b64(json.dumps({"alg": "HS256", "typ": "JWT"}, separators=(",", ":")).encode("utf-8"))
    body = _b64(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    return f"{header}.{body}.{_b64(_sign(f'{header}.{body}', secret))}"


def decode_access_token(token: str) -> dict[str, Any]:
    secret = jwt_secret()
    if not secret:
        raise TokenError("JWT secret not configured")
    try:
        header, body, signature = token.split(".")
        provided = _unb64(signature)
    except ValueError:
        raise TokenError("Malformed token") from None
    if not hmac.compare_digest(_sign(f"{header}.{body}", secret), provided):
        raise TokenError("Invalid signature")
    try:
        claims = json.loads(_unb64(body).decode("utf-8"))
    except ValueError:
        raise TokenError("Invalid payload") from None
    if not isinstance(claims, dict):
        raise TokenError("Invalid payload")
    exp = claims.get("exp")
    if not isinstance(exp, int) or exp <= int(datetime.now(timezone.utc).timestamp()):
        raise TokenError("Token expired")
    for name in ("sub", "user_id", "jti"):
        if not claims.get(name):
            raise TokenError(f"Missing claim {name}")
    return claims
