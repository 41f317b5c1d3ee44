"""
Read-only reference code lists for the call form.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.db import get_db
from ...models.codes import AlertCode, MedicalCode
from ...schemas.codes import CodeOut


router = APIRouter(prefix="/api/v1/codes", tags=["codes"])


@router.get("/alert")
def list_alert_codes(db: Session = Depends(get_db)) -> dict:
    rows = db.query(AlertCode).order_by(AlertCode.code.asc()).all()
    return {"codes": [CodeOut.model_validate(r).model_dump(mode="json") for r in rows]}


@router.get("/medical")
def list_medical_codes(db: Session = Depends(get_db)) -> dict:
    rows = db.query(MedicalCode).order_by(MedicalCode.code.asc()).all()
    return {"codes": [CodeOut.model_validate(r).model_dump(mode="json") for r in rows]}
