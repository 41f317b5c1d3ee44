"""
Call statistics: date windows and the per-window aggregation fold.

`aggregate_calls` is a pure, single-pass fold over call records that were
already filtered to a window by a database query. It accepts ORM rows or
plain mappings.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from .call_types import CANONICAL_CALL_TYPES, normalize_call_type
from .vehicle_classifier import VEHICLE_CATEGORIES, classify_vehicle


TODAY = "today"
WEEKLY = "weekly"
MONTHLY = "monthly"

STATS_WINDOWS = {TODAY: 0, WEEKLY: 7, MONTHLY: 30}

DEFAULT_TIMEZONE = "Asia/Jerusalem"


def _zero_call_types() -> dict[str, int]:
    return {name: 0 for name in CANONICAL_CALL_TYPES}


def _zero_categories() -> dict[str, int]:
    return {name: 0 for name in VEHICLE_CATEGORIES}


@dataclass
class CallStats:
    total_calls: int = 0
    total_hours: float = 0.0
    counts_by_call_type: dict[str, int] = field(default_factory=_zero_call_types)
    counts_by_vehicle_category: dict[str, int] = field(default_factory=_zero_categories)

    def as_dict(self) -> dict:
        return {
            "totalCalls": self.total_calls,
            "totalHours": self.total_hours,
            "countsByCallType": dict(self.counts_by_call_type),
            "countsByVehicleCategory": dict(self.counts_by_vehicle_category),
        }


def _field(call, name: str):
    if isinstance(call, Mapping):
        return call.get(name)
    return getattr(call, name, None)


def aggregate_calls(calls: Iterable) -> CallStats:
    stats = CallStats()
    total_minutes = 0
    for call in calls:
        stats.total_calls += 1
        total_minutes += _field(call, "duration_minutes") or 0
        category = classify_vehicle(_field(call, "vehicle_number"))
        stats.counts_by_vehicle_category[category] += 1
        call_type = normalize_call_type(_field(call, "call_type"))
        if isinstance(call_type, str) and call_type in stats.counts_by_call_type:
            stats.counts_by_call_type[call_type] += 1
    stats.total_hours = round(total_minutes / 60, 2)
    return stats


def local_today(tz_name: str | None = None) -> date:
    try:
        tz = ZoneInfo(tz_name or DEFAULT_TIMEZONE)
    except Exception:
        tz = ZoneInfo(DEFAULT_TIMEZONE)
    return datetime.now(tz).date()


def stats_window(name: str, today: date) -> tuple[date, date]:
    """Inclusive (start, end) call_date range for a named window ending today."""
    try:
        days = STATS_WINDOWS[name]
    except KeyError:
        raise ValueError(f"Unknown stats window: {name}") from None
    return today - timedelta(days=days), today
