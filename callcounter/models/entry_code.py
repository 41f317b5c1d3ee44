"""
ORM model for building entry codes curated by administrators.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from . import Base


class EntryCode(Base):
    __tablename__ = "entry_codes"
    __table_args__ = (
        UniqueConstraint("entry_code", "city", "street", name="uq_entry_codes_code_city_street"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_code: Mapped[str] = mapped_column(String(64))
    city: Mapped[str] = mapped_column(String(128), index=True)
    street: Mapped[str] = mapped_column(String(256))
    location_details: Mapped[str | None] = mapped_column(String(512), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
