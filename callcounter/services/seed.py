"""
Seed reference data (alert codes, medical codes, fleet vehicles) from JSON.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from sqlalchemy.orm import Session

from ..models.codes import AlertCode, MedicalCode
from ..models.vehicle import Vehicle


def _load_seed(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return data
    return {}


def seed_reference_data(db: Session, seed_path: Path) -> Dict[str, int]:
    """
    Insert codes and vehicles listed in `seed_path` that are not present yet.

    Expected shape: ``{"alert_codes": [...], "medical_codes": [...], "vehicles": [...]}``.
    Returns the number of rows inserted per section.
    """
    inserted = {"alert_codes": 0, "medical_codes": 0, "vehicles": 0}
    if not seed_path.exists():
        return inserted
    data = _load_seed(seed_path)
    for section, model in (("alert_codes", AlertCode), ("medical_codes", MedicalCode)):
        existing = {row[0] for row in db.query(model.code).all()}
        for raw in data.get(section, []) or []:
            code = str(raw).strip()
            if not code or code in existing:
                continue
            db.add(model(code=code))
            existing.add(code)
            inserted[section] += 1
    existing_vehicles = {row[0] for row in db.query(Vehicle.vehicle_number).all()}
    for raw in data.get("vehicles", []) or []:
        number = str(raw).strip()
        if not number.isdigit() or number in existing_vehicles:
            continue
        db.add(Vehicle(vehicle_number=number))
        existing_vehicles.add(number)
        inserted["vehicles"] += 1
    db.commit()
    return inserted
