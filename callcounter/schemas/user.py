"""
Pydantic schemas for authentication and user management.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginIn(BaseModel):
    # Username, email, full name or MDA code.
    username: str
    password: str


class RegisterIn(BaseModel):
    username: str = Field(..., min_length=3, max_length=128)
    password: str = Field(..., min_length=6, max_length=256)
    full_name: str = Field(..., min_length=1, max_length=255)
    mda_code: str = Field(..., min_length=1, max_length=16, pattern=r"^\d+$")
    email: Optional[str] = Field(default=None, max_length=255)


class UserOut(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    mda_code: Optional[str] = None
    role: str
    is_admin: bool
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AdminFlagIn(BaseModel):
    is_admin: bool
