from datetime import time

from callcounter.services.calls import compute_duration_minutes


def test_same_day_duration():
    assert compute_duration_minutes(time(8, 0), time(9, 30)) == 90


def test_crossing_midnight_adds_a_day():
    assert compute_duration_minutes(time(23, 50), time(0, 20)) == 30


def test_missing_side_gives_none():
    assert compute_duration_minutes(time(8, 0), None) is None
    assert compute_duration_minutes(None, time(8, 0)) is None


def test_equal_times_are_zero():
    assert compute_duration_minutes(time(10, 15), time(10, 15)) == 0
