"""
Personal statistics endpoints: today, the last 7 days and the last 30 days.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...core.auth import UserContext, get_current_user
from ...core.config import settings
from ...core.db import get_db
from ...services.calls import window_calls
from ...services.stats import STATS_WINDOWS, aggregate_calls, local_today


router = APIRouter(prefix="/api/v1/stats", tags=["stats"])


@router.get("")
def stats_summary(
    vehicle_number: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    today = local_today(settings.timezone)
    result: dict = {"date": today.isoformat(), "timezone": settings.timezone}
    for window in STATS_WINDOWS:
        calls = window_calls(db, window, today, user_id=user.user_id, vehicle_number=vehicle_number)
        result[window] = aggregate_calls(calls).as_dict()
    return result


@router.get("/{window}")
def stats_for_window(
    window: str,
    vehicle_number: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    if window not in STATS_WINDOWS:
        raise HTTPException(status_code=404, detail=f"Unknown stats window: {window}")
    today = local_today(settings.timezone)
    calls = window_calls(db, window, today, user_id=user.user_id, vehicle_number=vehicle_number)
    return {"window": window, "date": today.isoformat(), "stats": aggregate_calls(calls).as_dict()}
