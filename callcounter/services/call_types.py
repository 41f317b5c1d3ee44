"""
Call-type normalisation.

Clients and legacy rows carry English tokens or alternate Hebrew spellings;
storage and reporting use four canonical Hebrew labels. Unknown values pass
through unchanged.
"""

from __future__ import annotations

URGENT = "דחוף"
ATAN = 'אט"ן'
ARAN = "ארן"
NATBAG = "נתבג"

CANONICAL_CALL_TYPES = (URGENT, ATAN, ARAN, NATBAG)

# English keys are matched case-insensitively.
_ALIASES = {
    "urgent": URGENT,
    "atan": ATAN,
    "aran": ARAN,
    "natbag": NATBAG,
    URGENT: URGENT,
    ATAN: ATAN,
    "אט״ן": ATAN,  # gershayim
    "אט'ן": ATAN,
    "אטן": ATAN,
    ARAN: ARAN,
    NATBAG: NATBAG,
}


def normalize_call_type(value):
    if not isinstance(value, str):
        return value
    key = value.strip()
    canonical = _ALIASES.get(key) or _ALIASES.get(key.lower())
    if canonical is None:
        return value
    return canonical


def is_canonical_call_type(value) -> bool:
    return value in CANONICAL_CALL_TYPES
