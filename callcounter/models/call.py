"""
ORM model for logged calls.

A call is one dispatch of a vehicle: its type, date, start and end time,
location and the vehicle that drove it. The vehicle category is derived
from the vehicle number whenever the number is assigned.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from . import Base
from ..services.vehicle_classifier import classify_vehicle


CALL_STATUS_ACTIVE = "active"
CALL_STATUS_COMPLETED = "completed"


class Call(Base):
    __tablename__ = "calls"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    call_type: Mapped[str] = mapped_column(String(32))
    call_date: Mapped[date] = mapped_column(Date, index=True)
    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(16), default=CALL_STATUS_ACTIVE, index=True)
    location: Mapped[str] = mapped_column(String(512))
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    street: Mapped[str | None] = mapped_column(String(256), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    vehicle_number: Mapped[str | None] = mapped_column(String(16), index=True, nullable=True)
    vehicle_type: Mapped[str] = mapped_column(String(32), default="ambulance")
    alert_code_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("alert_codes.id", ondelete="SET NULL"), nullable=True
    )
    medical_code_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("medical_codes.id", ondelete="SET NULL"), nullable=True
    )
    entry_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    meter_visa_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped["User"] = relationship("User", back_populates="calls")  # noqa: F821
    alert_code: Mapped[Optional["AlertCode"]] = relationship("AlertCode")  # noqa: F821
    medical_code: Mapped[Optional["MedicalCode"]] = relationship("MedicalCode")  # noqa: F821

    @validates("vehicle_number")
    def _derive_vehicle_type(self, key, value):
        value = value.strip() if isinstance(value, str) else value
        self.vehicle_type = classify_vehicle(value)
        return value or None
