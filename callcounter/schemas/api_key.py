"""
Pydantic schemas for API keys.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.api_key import API_PERMISSIONS


class ApiKeyCreate(BaseModel):
    key_name: str = Field(..., min_length=1, max_length=128)
    permissions: Optional[List[str]] = None

    @field_validator("permissions")
    @classmethod
    def _known_permissions(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        unknown = [p for p in value if p not in API_PERMISSIONS]
        if unknown:
            raise ValueError(f"unknown permissions: {', '.join(unknown)}")
        return value


class ApiKeyOut(BaseModel):
    id: int
    key_name: str
    permissions: List[str]
    is_active: bool
    last_used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
