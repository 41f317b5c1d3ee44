"""
Call lifecycle helpers shared by the user-facing and external APIs.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ..models.call import CALL_STATUS_ACTIVE, CALL_STATUS_COMPLETED, Call
from ..models.user import User
from ..models.vehicle import UserVehicle
from ..schemas.call import CallCreate, CallOut, CallUpdate
from .call_types import normalize_call_type
from .stats import stats_window
from .vehicle_classifier import vehicle_label


logger = logging.getLogger("calls")


def compute_duration_minutes(start: Optional[time], end: Optional[time]) -> Optional[int]:
    """Whole minutes from start to end; an end earlier than start ended the next day."""
    if start is None or end is None:
        return None
    anchor = date(2000, 1, 1)
    start_dt = datetime.combine(anchor, start)
    end_dt = datetime.combine(anchor, end)
    if end_dt < start_dt:
        end_dt += timedelta(days=1)
    return round((end_dt - start_dt).total_seconds() / 60)


def _apply_end_time(call: Call, end_time: Optional[time]) -> None:
    call.end_time = end_time
    call.duration_minutes = compute_duration_minutes(call.start_time, end_time)
    call.status = CALL_STATUS_COMPLETED if end_time else CALL_STATUS_ACTIVE


def resolve_vehicle_number(db: Session, user_id: str, requested: Optional[str]) -> Optional[str]:
    """Explicit number, else the user's selected vehicle, else their MDA code."""
    if requested and requested.strip():
        return requested.strip()
    selected = db.get(UserVehicle, user_id)
    if selected:
        return selected.vehicle_number
    user = db.get(User, user_id)
    if user and user.mda_code:
        return user.mda_code
    return None


def complete_active_calls(
    db: Session, *, user_id: str, vehicle_number: Optional[str], call_date: date, start_time: time
) -> int:
    """Close active calls on the same vehicle that started before `call_date` `start_time`.

    A call from the same day ends at `start_time`. One left open on an earlier
    day is marked completed without an end time, since its length is unknown.
    Active calls that start later are left alone.
    """
    query = db.query(Call).filter(
        Call.user_id == user_id,
        Call.status == CALL_STATUS_ACTIVE,
        or_(
            Call.call_date < call_date,
            and_(Call.call_date == call_date, Call.start_time < start_time),
        ),
    )
    if vehicle_number:
        query = query.filter(Call.vehicle_number == vehicle_number)
    else:
        query = query.filter(Call.vehicle_number.is_(None))
    completed = 0
    for call in query.all():
        if call.call_date == call_date:
            _apply_end_time(call, start_time)
        else:
            call.status = CALL_STATUS_COMPLETED
        completed += 1
    return completed


def create_call(db: Session, *, user_id: str, payload: CallCreate) -> Call:
    vehicle_number = resolve_vehicle_number(db, user_id, payload.vehicle_number)
    completed = complete_active_calls(
        db,
        user_id=user_id,
        vehicle_number=vehicle_number,
        call_date=payload.call_date,
        start_time=payload.start_time,
    )
    if completed:
        logger.info("Auto-completed %s active call(s) user=%s vehicle=%s", completed, user_id, vehicle_number)
    call = Call(
        user_id=user_id,
        call_type=normalize_call_type(payload.call_type),
        call_date=payload.call_date,
        start_time=payload.start_time,
        location=payload.location,
        city=payload.city or None,
        street=payload.street or None,
        description=payload.description or None,
        vehicle_number=vehicle_number,
        alert_code_id=payload.alert_code_id,
        medical_code_id=payload.medical_code_id,
        entry_code=payload.entry_code or None,
        meter_visa_number=payload.meter_visa_number or None,
    )
    _apply_end_time(call, payload.end_time)
    db.add(call)
    db.commit()
    db.refresh(call)
    return call


def update_call(db: Session, call: Call, payload: CallUpdate) -> Call:
    changes = payload.model_dump(exclude_unset=True)
    if "call_type" in changes and changes["call_type"] is not None:
        call.call_type = normalize_call_type(changes["call_type"])
    if changes.get("call_date") is not None:
        call.call_date = changes["call_date"]
    if changes.get("start_time") is not None:
        call.start_time = changes["start_time"]
    if changes.get("location") is not None:
        call.location = changes["location"]
    if "vehicle_number" in changes:
        call.vehicle_number = changes["vehicle_number"]
    for name in (
        "city",
        "street",
        "description",
        "alert_code_id",
        "medical_code_id",
        "entry_code",
        "meter_visa_number",
    ):
        if name in changes:
            setattr(call, name, changes[name])
    if "end_time" in changes:
        _apply_end_time(call, changes["end_time"])
    elif "start_time" in changes:
        call.duration_minutes = compute_duration_minutes(call.start_time, call.end_time)
    db.commit()
    db.refresh(call)
    return call


def call_to_item(call: Call) -> dict:
    item = CallOut.model_validate(call).model_dump(mode="json")
    item["vehicle_label"] = vehicle_label(call.vehicle_type)
    item["alert_code"] = call.alert_code.code if call.alert_code else None
    item["medical_code"] = call.medical_code.code if call.medical_code else None
    return item


def window_calls(
    db: Session,
    window: str,
    today: date,
    *,
    user_id: Optional[str] = None,
    vehicle_number: Optional[str] = None,
) -> list[Call]:
    """Calls whose call_date falls inside a named stats window, optionally for one user/vehicle."""
    start, end = stats_window(window, today)
    query = db.query(Call).filter(Call.call_date >= start, Call.call_date <= end)
    if user_id:
        query = query.filter(Call.user_id == user_id)
    if vehicle_number:
        query = query.filter(Call.vehicle_number == vehicle_number.strip())
    return query.all()
