"""
Pydantic schemas for alert codes, medical codes and entry codes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CodeIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class CodeOut(BaseModel):
    id: int
    code: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EntryCodeCreate(BaseModel):
    entry_code: str = Field(..., min_length=1, max_length=64)
    city: str = Field(..., min_length=1, max_length=128)
    street: str = Field(..., min_length=1, max_length=256)
    location_details: Optional[str] = Field(default=None, max_length=512)
    notes: Optional[str] = Field(default=None, max_length=1024)


class EntryCodeUpdate(BaseModel):
    entry_code: Optional[str] = Field(default=None, min_length=1, max_length=64)
    city: Optional[str] = Field(default=None, min_length=1, max_length=128)
    street: Optional[str] = Field(default=None, min_length=1, max_length=256)
    location_details: Optional[str] = Field(default=None, max_length=512)
    notes: Optional[str] = Field(default=None, max_length=1024)


class EntryCodeOut(BaseModel):
    id: int
    entry_code: str
    city: str
    street: str
    location_details: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
