"""
Vehicle category derivation from MDA / vehicle numbers.

The digit pattern of a number encodes the vehicle it belongs to:

* five digits starting with 1 or 2: a personal standby responder
* four digits starting with 5: a motorcycle
* four digits starting with 6: a Picanto (small car)
* anything else, including blank or non-numeric input: an ambulance

Classification never fails; malformed numbers fall back to ambulance so
reporting is never blocked by bad data.
"""

from __future__ import annotations

MOTORCYCLE = "motorcycle"
PICANTO = "picanto"
AMBULANCE = "ambulance"
PERSONAL_STANDBY = "personal_standby"

VEHICLE_CATEGORIES = (MOTORCYCLE, PICANTO, AMBULANCE, PERSONAL_STANDBY)

_HEBREW_NAMES = {
    MOTORCYCLE: "אופנוע",
    PICANTO: "פיקנטו",
    AMBULANCE: "אמבולנס",
    PERSONAL_STANDBY: "כונן אישי",
}

_EMOJI = {
    MOTORCYCLE: "🏍️",
    PICANTO: "🚗",
    AMBULANCE: "🚑",
    PERSONAL_STANDBY: "👨‍⚕️",
}

_DIGITS = frozenset("0123456789")


def classify_vehicle(code: object) -> str:
    if code is None:
        return AMBULANCE
    text = str(code).strip()
    if not text or not set(text) <= _DIGITS:
        return AMBULANCE
    first = text[0]
    if len(text) == 5 and first in {"1", "2"}:
        return PERSONAL_STANDBY
    if len(text) == 4 and first == "5":
        return MOTORCYCLE
    if len(text) == 4 and first == "6":
        return PICANTO
    return AMBULANCE


def vehicle_hebrew_name(category: str) -> str:
    return _HEBREW_NAMES.get(category, _HEBREW_NAMES[AMBULANCE])


def vehicle_emoji(category: str) -> str:
    return _EMOJI.get(category, _EMOJI[AMBULANCE])


def vehicle_label(category: str) -> str:
    """Display label such as ``"🚑 אמבולנס"``; unknown categories render as ambulance."""
    return f"{vehicle_emoji(category)} {vehicle_hebrew_name(category)}"
