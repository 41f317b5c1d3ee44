"""
Per-user form defaults: the last entry code and meter/visa numbers.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.auth import UserContext, get_current_user
from ...core.db import get_db
from ...models.user_settings import UserSettings
from ...schemas.settings import EntryCodeSettingIn, MeterVisaIn


router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


def _settings_for(db: Session, user_id: str) -> UserSettings:
    row = db.get(UserSettings, user_id)
    if row is None:
        row = UserSettings(user_id=user_id)
        db.add(row)
    return row


@router.get("/entry-code")
def get_entry_code(db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)) -> dict:
    row = db.get(UserSettings, user.user_id)
    return {"entry_code": row.entry_code if row else None}


@router.put("/entry-code")
def put_entry_code(
    payload: EntryCodeSettingIn,
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    row = _settings_for(db, user.user_id)
    row.entry_code = payload.entry_code
    db.commit()
    return {"entry_code": row.entry_code}


@router.get("/meter-visa")
def get_meter_visa(db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)) -> dict:
    row = db.get(UserSettings, user.user_id)
    return {
        "meter_number": row.meter_number if row else None,
        "visa_number": row.visa_number if row else None,
    }


@router.put("/meter-visa")
def put_meter_visa(
    payload: MeterVisaIn,
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    row = _settings_for(db, user.user_id)
    row.meter_number = payload.meter_number
    row.visa_number = payload.visa_number
    db.commit()
    return {"meter_number": row.meter_number, "visa_number": row.visa_number}
