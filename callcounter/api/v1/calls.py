"""
Call logging endpoints for the signed-in driver.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session, joinedload

from ...core.auth import UserContext, get_current_user
from ...core.config import settings
from ...core.db import get_db
from ...core.pagination import PageRequest, page_request
from ...models.call import Call
from ...models.vehicle import UserVehicle
from ...schemas.call import CallCreate, CallTextIn, CallUpdate
from ...services.call_text_parser import missing_fields, parse_call_text
from ...services.calls import call_to_item, create_call, update_call
from ...services.stats import aggregate_calls, local_today


router = APIRouter(prefix="/api/v1/calls", tags=["calls"])
logger = logging.getLogger("calls")


def _own_calls(db: Session, user: UserContext):
    return (
        db.query(Call)
        .options(joinedload(Call.alert_code), joinedload(Call.medical_code))
        .filter(Call.user_id == user.user_id)
    )


def _get_owned_call(db: Session, call_id: int, user: UserContext, *, allow_admin: bool = False) -> Call:
    call = db.get(Call, call_id)
    if not call:
        raise HTTPException(status_code=404, detail="Call not found")
    if call.user_id != user.user_id and not (allow_admin and user.is_admin):
        raise HTTPException(status_code=403, detail="Not allowed to modify this call")
    return call


@router.get("")
def list_today_calls(
    vehicle_number: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    query = _own_calls(db, user).filter(Call.call_date == local_today(settings.timezone))
    if vehicle_number:
        query = query.filter(Call.vehicle_number == vehicle_number.strip())
    calls = query.order_by(Call.created_at.desc()).all()
    return {"calls": [call_to_item(c) for c in calls]}


@router.get("/history")
def list_call_history(
    response: Response,
    vehicle_number: Optional[str] = Query(None),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    query = _own_calls(db, user)
    if vehicle_number:
        query = query.filter(Call.vehicle_number == vehicle_number.strip())
    total, calls = paging.fetch(query.order_by(Call.call_date.desc(), Call.created_at.desc()), response)
    return {
        "calls": [call_to_item(c) for c in calls],
        **paging.body(total),
    }


@router.get("/historical")
def historical_calls(
    year: int = Query(..., ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    if month:
        start = date(year, month, 1)
        end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    else:
        start = date(year, 1, 1)
        end = date(year + 1, 1, 1)

    query = _own_calls(db, user).filter(Call.call_date >= start, Call.call_date < end)
    selected = db.get(UserVehicle, user.user_id)
    if selected:
        query = query.filter(Call.vehicle_number == selected.vehicle_number)
    calls = query.order_by(Call.call_date.desc(), Call.start_time.desc()).all()
    return {
        "range": {"start": start.isoformat(), "end": end.isoformat()},
        "vehicle_number": selected.vehicle_number if selected else None,
        "calls": [call_to_item(c) for c in calls],
        "statistics": aggregate_calls(calls).as_dict(),
    }


@router.post("/parse-text")
def parse_text(payload: CallTextIn, user: UserContext = Depends(get_current_user)) -> dict:
    parsed = parse_call_text(payload.text)
    return {"call": parsed, "missing": missing_fields(parsed)}


@router.post("", status_code=201)
def add_call(
    payload: CallCreate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    call = create_call(db, user_id=user.user_id, payload=payload)
    logger.info("Call created id=%s user=%s type=%s vehicle=%s", call.id, user.user_id, call.call_type, call.vehicle_number)
    return {"call": call_to_item(call)}


@router.get("/{call_id}")
def get_call(
    call_id: int,
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    call = _get_owned_call(db, call_id, user, allow_admin=True)
    return {"call": call_to_item(call)}


@router.put("/{call_id}")
def edit_call(
    call_id: int,
    payload: CallUpdate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    call = _get_owned_call(db, call_id, user)
    call = update_call(db, call, payload)
    return {"call": call_to_item(call)}


@router.delete("/{call_id}")
def delete_call(
    call_id: int,
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    call = _get_owned_call(db, call_id, user, allow_admin=True)
    db.delete(call)
    db.commit()
    logger.info("Call deleted id=%s by user=%s", call_id, user.user_id)
    return {"status": "success", "id": call_id}
