"""
Entry-code lookup for drivers.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...core.db import get_db
from ...services.entry_codes import list_entry_codes


router = APIRouter(prefix="/api/v1/entry-codes", tags=["entry-codes"])


@router.get("")
def get_entry_codes(response: Response, db: Session = Depends(get_db)) -> dict:
    items = list_entry_codes(db)
    response.headers["Cache-Control"] = "no-cache"
    return {"items": items, "count": len(items)}
