"""
Pydantic schemas for per-user settings and vehicle selection.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class EntryCodeSettingIn(BaseModel):
    entry_code: Optional[str] = Field(default=None, max_length=64)


class MeterVisaIn(BaseModel):
    meter_number: Optional[str] = Field(default=None, max_length=64)
    visa_number: Optional[str] = Field(default=None, max_length=64)


class VehicleIn(BaseModel):
    vehicle_number: str = Field(..., min_length=1, max_length=16, pattern=r"^\s*\d+\s*$")
