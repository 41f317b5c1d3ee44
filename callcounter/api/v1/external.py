"""
External integration API authenticated by `X-API-Key`.

Keys carry a permission list (`calls:read`, `calls:write`, `stats:read`).
Calls created here belong to the key's owner.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, joinedload

from ...core.auth import ApiKeyContext, require_api_permission
from ...core.config import settings
from ...core.db import get_db
from ...models.call import Call
from ...schemas.call import CallCreate
from ...services.call_types import normalize_call_type
from ...services.calls import call_to_item, create_call
from ...services.stats import aggregate_calls, local_today


router = APIRouter(prefix="/api/v1/external", tags=["external"])
logger = logging.getLogger("external")


@router.get("/calls")
def external_list_calls(
    date_: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    city: Optional[str] = Query(None),
    call_type: Optional[str] = Query(None, alias="type"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    key: ApiKeyContext = Depends(require_api_permission("calls:read")),
) -> dict:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    query = db.query(Call).options(joinedload(Call.alert_code), joinedload(Call.medical_code))
    if date_:
        query = query.filter(Call.call_date == date_)
    else:
        if start_date:
            query = query.filter(Call.call_date >= start_date)
        if end_date:
            query = query.filter(Call.call_date <= end_date)
    if city and city.strip():
        query = query.filter(Call.city.ilike(f"%{city.strip()}%"))
    if call_type and call_type.strip():
        query = query.filter(Call.call_type == normalize_call_type(call_type))
    total = query.count()
    calls = (
        query.order_by(Call.call_date.desc(), Call.start_time.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return {
        "calls": [call_to_item(c) for c in calls],
        "pagination": {"total": total, "limit": limit, "offset": offset, "has_more": offset + len(calls) < total},
    }


@router.post("/calls", status_code=201)
def external_create_call(
    payload: CallCreate,
    db: Session = Depends(get_db),
    key: ApiKeyContext = Depends(require_api_permission("calls:write")),
) -> dict:
    call = create_call(db, user_id=key.user_id, payload=payload)
    logger.info("External call created id=%s key_id=%s", call.id, key.key_id)
    return {"call": call_to_item(call)}


@router.get("/stats")
def external_stats(
    date_: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    key: ApiKeyContext = Depends(require_api_permission("stats:read")),
) -> dict:
    target = date_ or local_today(settings.timezone)
    calls = db.query(Call).filter(Call.call_date == target).all()
    by_city = Counter((c.city or "").strip() or "unknown" for c in calls)
    return {
        "date": target.isoformat(),
        "stats": aggregate_calls(calls).as_dict(),
        "calls_by_city": dict(by_city),
    }
