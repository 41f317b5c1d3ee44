"""
Auth helpers: bearer-token users, role checks and API-key principals.

Every bearer request is resolved against the database: the token's session
must still exist and its user must still be active. The role is read from
the user row, so promotions and demotions apply on the next request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .db import get_db
from .security import TokenError, decode_access_token
from ..models.api_key import ApiKey
from ..models.user import User
from ..services.sessions import active_session


ADMIN_ROLE = "ADMIN"
USER_ROLE = "USER"


@dataclass
class UserContext:
    role: str
    user_id: str
    username: Optional[str] = None
    mda_code: Optional[str] = None
    full_name: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return (self.role or "").upper() == ADMIN_ROLE


@dataclass
class ApiKeyContext:
    key_id: int
    user_id: str
    permissions: list[str] = field(default_factory=list)


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    if not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> UserContext:
    token = _extract_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    try:
        claims = decode_access_token(token)
    except TokenError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user_id = str(claims["user_id"])
    session_id = str(claims["jti"])
    if active_session(db, session_id, user_id) is None:
        raise HTTPException(status_code=401, detail="Session expired or logged out")
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="User no longer exists")
    return UserContext(
        role=(user.role or USER_ROLE).upper(),
        user_id=user.id,
        username=user.username,
        mda_code=user.mda_code,
        full_name=user.full_name,
        session_id=session_id,
    )


def require_roles(*roles: str):
    def _dep(user: UserContext = Depends(get_current_user)):
        allowed = {r.strip().upper() for r in roles if r and r.strip()}
        if allowed and user.role.upper() not in allowed:
            raise HTTPException(status_code=403, detail="Admin privileges required")
        return user

    return _dep


require_admin = require_roles(ADMIN_ROLE)


def require_api_permission(permission: str):
    """Resolve the `X-API-Key` header to an active key holding `permission`."""

    def _dep(
        x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
        db: Session = Depends(get_db),
    ) -> ApiKeyContext:
        if not (x_api_key or "").strip():
            raise HTTPException(status_code=401, detail="Missing API key")
        key = ApiKey.lookup(db, x_api_key)
        owner = db.get(User, key.user_id) if key else None
        if not key or not key.is_active or owner is None or not owner.is_active:
            raise HTTPException(status_code=401, detail="Invalid API key")
        if not key.allows(permission):
            raise HTTPException(status_code=403, detail=f"API key lacks permission {permission}")
        key.last_used_at = datetime.utcnow()
        db.commit()
        return ApiKeyContext(key_id=key.id, user_id=key.user_id, permissions=list(key.permissions or []))

    return _dep
