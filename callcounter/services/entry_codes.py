"""
Entry-code directory: curated codes merged with codes seen on logged calls.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from ..models.call import Call
from ..models.entry_code import EntryCode


def _location_details(location: str | None) -> str:
    if not location:
        return ""
    parts = [part.strip() for part in location.split(",")]
    if len(parts) <= 2:
        return ""
    return ", ".join(parts[2:])


def merge_entry_codes(manual: Iterable[EntryCode], from_calls: Iterable[Call]) -> list[dict]:
    """De-duplicate by (code, city, street); curated entries win over call-derived ones."""
    merged: dict[tuple, dict] = {}
    for row in manual:
        key = (row.entry_code, row.city or "", row.street or "")
        merged[key] = {
            "id": row.id,
            "entry_code": row.entry_code,
            "city": row.city or "",
            "street": row.street or "",
            "location_details": row.location_details or "",
            "notes": row.notes or "",
            "source": "manual",
        }
    for call in from_calls:
        if not call.entry_code:
            continue
        key = (call.entry_code, call.city or "", call.street or "")
        if key in merged:
            continue
        merged[key] = {
            "entry_code": call.entry_code,
            "city": call.city or "",
            "street": call.street or "",
            "location_details": _location_details(call.location),
            "source": "call",
        }
    return list(merged.values())


def list_entry_codes(db: Session) -> list[dict]:
    manual = db.query(EntryCode).order_by(EntryCode.city.asc(), EntryCode.street.asc()).all()
    from_calls = (
        db.query(Call)
        .filter(Call.entry_code.isnot(None), Call.entry_code != "")
        .order_by(Call.city.asc(), Call.street.asc())
        .all()
    )
    return merge_entry_codes(manual, from_calls)
