"""
Extract call fields from free text, typically OCR output of a dispatch
screenshot.

Fields are located by their Hebrew labels. Anything not found is simply
left out of the result; parsing never fails.
"""

from __future__ import annotations

import re

from .call_types import normalize_call_type


_PATTERNS = {
    "call_date": re.compile(r"תאריך[:\s]*(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})"),
    "call_type": re.compile(r'דחיפות[:\s]*(דחוף|אט"ן|אט״ן|אטן|ארן|נתבג)'),
    "meter_visa_number": re.compile(r"מונה[:\s]*(\d+)"),
    "city": re.compile(r"עיר[:\s]*([א-ת ]+)"),
    "street": re.compile(r"רחוב[:\s]*([א-ת\d ]+)"),
    "alert_code": re.compile(r"קוד הזנקה[:\s]*(\d+)"),
    "medical_code": re.compile(r"קוד רפואי[:\s]*(\d+)"),
    "start_time": re.compile(r"יציאה[:\s]*(\d{1,2}:\d{2})"),
    "arrival_time": re.compile(r"במקום[:\s]*(\d{1,2}:\d{2})"),
    "end_time": re.compile(r"סיום[:\s]*(\d{1,2}:\d{2})"),
}

REQUIRED_FIELDS = ("call_type", "call_date", "start_time", "city")


def parse_date(value: str) -> str:
    """Turn ``DD/MM/YYYY`` (or ``-`` separated, two-digit year) into ISO ``YYYY-MM-DD``."""
    parts = re.split(r"[-/]", value)
    if len(parts) != 3:
        return value
    day, month, year = parts
    if len(year) == 2:
        year = "20" + year
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def _pad_time(value: str) -> str:
    hours, minutes = value.split(":", 1)
    return f"{hours.zfill(2)}:{minutes}"


def parse_call_text(text: str | None) -> dict[str, str]:
    if not text:
        return {}
    parsed: dict[str, str] = {}
    for name, pattern in _PATTERNS.items():
        match = pattern.search(text)
        if not match:
            continue
        value = match.group(1).strip()
        if not value:
            continue
        if name == "call_date":
            value = parse_date(value)
        elif name == "call_type":
            value = normalize_call_type(value)
        elif name.endswith("_time"):
            value = _pad_time(value)
        parsed[name] = value
    return parsed


def missing_fields(parsed: dict) -> list[str]:
    return [name for name in REQUIRED_FIELDS if not parsed.get(name)]
