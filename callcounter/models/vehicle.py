"""
ORM models for the vehicle fleet and each user's currently selected vehicle.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from . import Base
from ..services.vehicle_classifier import classify_vehicle


class Vehicle(Base):
    __tablename__ = "vehicles"

    vehicle_number: Mapped[str] = mapped_column(String(16), primary_key=True)
    vehicle_type: Mapped[str] = mapped_column(String(32), default="ambulance")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @validates("vehicle_number")
    def _derive_vehicle_type(self, key, value):
        self.vehicle_type = classify_vehicle(value)
        return value


class UserVehicle(Base):
    __tablename__ = "user_vehicle_settings"

    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    vehicle_number: Mapped[str] = mapped_column(String(16), unique=True, index=True)
    vehicle_type: Mapped[str] = mapped_column(String(32), default="ambulance")
    selected_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @validates("vehicle_number")
    def _derive_vehicle_type(self, key, value):
        self.vehicle_type = classify_vehicle(value)
        return value
