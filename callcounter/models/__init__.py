"""
SQLAlchemy model base class for the call counter backend.

This package defines ORM models for users, calls, reference codes, vehicles
and API keys. All models should inherit from the declarative `Base`
defined here.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


from .user import User  # noqa: E402,F401
from .codes import AlertCode, MedicalCode  # noqa: E402,F401
from .call import Call  # noqa: E402,F401
from .entry_code import EntryCode  # noqa: E402,F401
from .vehicle import Vehicle, UserVehicle  # noqa: E402,F401
from .user_settings import UserSettings  # noqa: E402,F401
from .api_key import ApiKey  # noqa: E402,F401
from .user_session import UserSession  # noqa: E402,F401

__all__ = [
    "Base",

    # Users
    "User",
    "UserSettings",
    "ApiKey",
    "UserSession",

    # Calls
    "Call",
    "AlertCode",
    "MedicalCode",
    "EntryCode",

    # Vehicles
    "Vehicle",
    "UserVehicle",
]
