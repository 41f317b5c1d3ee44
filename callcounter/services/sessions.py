"""
Sign-in sessions backing the access tokens.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..core.security import create_access_token, new_session_id, token_ttl
from ..models.user import User
from ..models.user_session import UserSession


logger = logging.getLogger("sessions")


def open_session(db: Session, user: User) -> str:
    """Record a new session for `user` and return its signed access token."""
    now = datetime.utcnow()
    db.query(UserSession).filter(
        UserSession.user_id == user.id, UserSession.expires_at <= now
    ).delete(synchronize_session=False)
    session = UserSession(id=new_session_id(), user_id=user.id, created_at=now, expires_at=now + token_ttl())
    db.add(session)
    db.commit()
    return create_access_token(
        sub=user.username,
        user_id=user.id,
        session_id=session.id,
        expires_at=session.expires_at,
    )


def active_session(db: Session, session_id: str, user_id: str) -> Optional[UserSession]:
    session = db.get(UserSession, session_id)
    if session is None or session.user_id != user_id or session.is_expired():
        return None
    return session


def close_session(db: Session, session_id: str) -> bool:
    deleted = db.query(UserSession).filter(UserSession.id == session_id).delete(synchronize_session=False)
    db.commit()
    return bool(deleted)


def close_user_sessions(db: Session, user_id: str) -> int:
    """Revoke every session of `user_id`; the caller commits."""
    return db.query(UserSession).filter(UserSession.user_id == user_id).delete(synchronize_session=False)
