"""
Pydantic schemas for calls.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CallCreate(BaseModel):
    call_type: str = Field(..., min_length=1, max_length=32)
    call_date: date
    start_time: time
    end_time: Optional[time] = None
    location: str = Field(..., min_length=1, max_length=512)
    city: Optional[str] = Field(default=None, max_length=128)
    street: Optional[str] = Field(default=None, max_length=256)
    description: Optional[str] = None
    vehicle_number: Optional[str] = Field(default=None, max_length=16)
    alert_code_id: Optional[int] = None
    medical_code_id: Optional[int] = None
    entry_code: Optional[str] = Field(default=None, max_length=64)
    meter_visa_number: Optional[str] = Field(default=None, max_length=64)

    @field_validator("call_type", "location")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class CallUpdate(BaseModel):
    call_type: Optional[str] = Field(default=None, min_length=1, max_length=32)
    call_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=512)
    city: Optional[str] = None
    street: Optional[str] = None
    description: Optional[str] = None
    vehicle_number: Optional[str] = Field(default=None, max_length=16)
    alert_code_id: Optional[int] = None
    medical_code_id: Optional[int] = None
    entry_code: Optional[str] = None
    meter_visa_number: Optional[str] = None


class CallOut(BaseModel):
    id: int
    user_id: str
    call_type: str
    call_date: date
    start_time: time
    end_time: Optional[time]
    duration_minutes: Optional[int]
    status: str
    location: str
    city: Optional[str]
    street: Optional[str]
    description: Optional[str]
    vehicle_number: Optional[str]
    vehicle_type: str
    alert_code_id: Optional[int]
    medical_code_id: Optional[int]
    entry_code: Optional[str]
    meter_visa_number: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


class CallTextIn(BaseModel):
    text: str = Field(..., max_length=20000)
