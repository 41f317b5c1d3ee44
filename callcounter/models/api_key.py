"""
ORM model for API keys used by external integrations.

Only the sha256 digest of a key is stored; the raw key is shown once at
creation time.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, Session, mapped_column

from . import Base


API_PERMISSIONS = ("calls:read", "calls:write", "stats:read")


class ApiKey(Base):
    __tablename__ = "api_keys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key_name: Mapped[str] = mapped_column(String(128))
    key_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    permissions: Mapped[list[str]] = mapped_column(JSON, default=lambda: list(API_PERMISSIONS))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @staticmethod
    def digest(raw_key: str) -> str:
        return hashlib.sha256(raw_key.strip().encode("utf-8")).hexdigest()

    @classmethod
    def issue(
        cls, *, user_id: str, key_name: str, permissions: Optional[Iterable[str]] = None
    ) -> tuple["ApiKey", str]:
        """New unsaved key for `user_id` plus the raw secret to hand to the caller."""
        raw_key = secrets.token_hex(32)
        key = cls(
            key_name=key_name.strip(),
            key_hash=cls.digest(raw_key),
            user_id=user_id,
            permissions=list(permissions) if permissions else list(API_PERMISSIONS),
        )
        return key, raw_key

    @classmethod
    def lookup(cls, db: Session, raw_key: str) -> Optional["ApiKey"]:
        if not raw_key or not raw_key.strip():
            return None
        return db.query(cls).filter(cls.key_hash == cls.digest(raw_key)).first()

    def allows(self, permission: str) -> bool:
        return bool(self.is_active) and permission in (self.permissions or [])
