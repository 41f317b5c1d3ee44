"""
Vehicle selection for the signed-in driver.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...core.auth import UserContext, get_current_user
from ...core.db import get_db
from ...models.vehicle import UserVehicle, Vehicle
from ...schemas.settings import VehicleIn
from ...services.vehicle_classifier import vehicle_label


router = APIRouter(prefix="/api/v1/vehicle", tags=["vehicle"])
logger = logging.getLogger("vehicle")


def _vehicle_item(vehicle_number: str | None, vehicle_type: str | None) -> dict:
    return {
        "vehicle_number": vehicle_number,
        "vehicle_type": vehicle_type,
        "vehicle_label": vehicle_label(vehicle_type) if vehicle_type else None,
    }


@router.get("/current")
def get_current_vehicle(db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)) -> dict:
    selected = db.get(UserVehicle, user.user_id)
    if not selected:
        return _vehicle_item(None, None)
    return _vehicle_item(selected.vehicle_number, selected.vehicle_type)


@router.post("/current")
def select_vehicle(
    payload: VehicleIn,
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
) -> dict:
    number = payload.vehicle_number.strip()
    holder = db.query(UserVehicle).filter(UserVehicle.vehicle_number == number).first()
    if holder and holder.user_id != user.user_id:
        raise HTTPException(status_code=409, detail="Vehicle is already in use by another user")
    selected = db.get(UserVehicle, user.user_id)
    if selected is None:
        selected = UserVehicle(user_id=user.user_id, vehicle_number=number)
        db.add(selected)
    else:
        selected.vehicle_number = number
    db.commit()
    logger.info("Vehicle selected user=%s vehicle=%s", user.user_id, number)
    return _vehicle_item(selected.vehicle_number, selected.vehicle_type)


@router.delete("/current")
def release_vehicle(db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)) -> dict:
    selected = db.get(UserVehicle, user.user_id)
    if selected:
        db.delete(selected)
        db.commit()
    return {"status": "success"}


@router.get("/available")
def available_vehicles(db: Session = Depends(get_db)) -> dict:
    taken = {row[0] for row in db.query(UserVehicle.vehicle_number).all()}
    vehicles = db.query(Vehicle).order_by(Vehicle.vehicle_number.asc()).all()
    return {
        "vehicles": [
            _vehicle_item(v.vehicle_number, v.vehicle_type) for v in vehicles if v.vehicle_number not in taken
        ]
    }
