from types import SimpleNamespace

from callcounter.services.entry_codes import merge_entry_codes


def _manual(**kwargs):
    base = {"id": 1, "entry_code": "1234", "city": "חיפה", "street": "הגפן", "location_details": None, "notes": None}
    base.update(kwargs)
    return SimpleNamespace(**base)


def _call(**kwargs):
    base = {"entry_code": "1234", "city": "חיפה", "street": "הגפן", "location": "חיפה, הגפן, בניין 3, קומה 2"}
    base.update(kwargs)
    return SimpleNamespace(**base)


def test_manual_entries_win_over_call_entries():
    merged = merge_entry_codes([_manual(notes="gate")], [_call()])
    assert len(merged) == 1
    assert merged[0]["source"] == "manual"
    assert merged[0]["id"] == 1
    assert merged[0]["notes"] == "gate"


def test_call_entries_fill_in_location_details():
    merged = merge_entry_codes([], [_call(entry_code="999")])
    assert merged == [
        {
            "entry_code": "999",
            "city": "חיפה",
            "street": "הגפן",
            "location_details": "בניין 3, קומה 2",
            "source": "call",
        }
    ]


def test_calls_without_code_are_skipped_and_duplicates_collapse():
    merged = merge_entry_codes([], [_call(entry_code=None), _call(), _call(location="x")])
    assert len(merged) == 1
    assert merged[0]["location_details"] == "בניין 3, קומה 2"
