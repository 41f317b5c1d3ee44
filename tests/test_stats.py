from datetime import date
from types import SimpleNamespace

import pytest

from callcounter.services.call_types import ARAN, ATAN, URGENT
from callcounter.services.stats import (
    STATS_WINDOWS,
    aggregate_calls,
    local_today,
    stats_window,
)


def test_empty_input_gives_zero_filled_counters():
    stats = aggregate_calls([]).as_dict()
    assert stats["totalCalls"] == 0
    assert stats["totalHours"] == 0
    assert stats["countsByCallType"] == {URGENT: 0, ATAN: 0, ARAN: 0, "נתבג": 0}
    assert stats["countsByVehicleCategory"] == {
        "motorcycle": 0,
        "picanto": 0,
        "ambulance": 0,
        "personal_standby": 0,
    }


def test_hours_rounded_to_two_decimals():
    calls = [
        {"call_type": URGENT, "duration_minutes": 60, "vehicle_number": "5123"},
        {"call_type": URGENT, "duration_minutes": 30, "vehicle_number": "5123"},
    ]
    stats = aggregate_calls(calls)
    assert stats.total_hours == 1.5
    assert aggregate_calls([{"duration_minutes": 20}]).total_hours == 0.33


def test_missing_duration_counts_as_zero():
    stats = aggregate_calls([{"call_type": URGENT, "duration_minutes": None}])
    assert stats.total_calls == 1
    assert stats.total_hours == 0


def test_non_string_call_type_counted_but_not_bucketed():
    stats = aggregate_calls([{"call_type": ["urgent"], "duration_minutes": 15}, {"call_type": {"x": 1}}])
    assert stats.total_calls == 2
    assert sum(stats.counts_by_call_type.values()) == 0


def test_category_counts_sum_to_total():
    calls = [
        {"call_type": "urgent", "vehicle_number": "12345"},
        {"call_type": "atan", "vehicle_number": "5123"},
        {"call_type": "aran", "vehicle_number": "6001"},
        {"call_type": "other", "vehicle_number": None},
        {"call_type": URGENT, "vehicle_number": "bad"},
    ]
    stats = aggregate_calls(calls)
    assert stats.total_calls == 5
    assert sum(stats.counts_by_vehicle_category.values()) == 5
    assert stats.counts_by_vehicle_category["ambulance"] == 2
    assert stats.counts_by_call_type[URGENT] == 2
    # Unknown types stay in the total but not in the breakdown.
    assert sum(stats.counts_by_call_type.values()) == 4


def test_accepts_orm_like_objects():
    calls = [SimpleNamespace(call_type=ATAN, duration_minutes=45, vehicle_number="5001")]
    stats = aggregate_calls(calls)
    assert stats.counts_by_call_type[ATAN] == 1
    assert stats.counts_by_vehicle_category["motorcycle"] == 1
    assert stats.total_hours == 0.75


def test_window_boundaries_are_inclusive():
    today = date(2026, 3, 10)
    assert stats_window("today", today) == (today, today)
    assert stats_window("weekly", today) == (date(2026, 3, 3), today)
    assert stats_window("monthly", today) == (date(2026, 2, 8), today)


def test_unknown_window_rejected():
    with pytest.raises(ValueError):
        stats_window("yearly", date(2026, 3, 10))


def test_local_today_tolerates_bad_timezone():
    assert isinstance(local_today("Not/AZone"), date)
    assert set(STATS_WINDOWS) == {"today", "weekly", "monthly"}
