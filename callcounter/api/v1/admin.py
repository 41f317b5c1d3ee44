"""
Administrator endpoints: dashboard, users, calls, reference codes,
entry codes, the vehicle fleet and API keys.

Every route requires the `ADMIN` role.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ...core.auth import ADMIN_ROLE, USER_ROLE, UserContext, require_admin
from ...core.config import settings
from ...core.db import get_db
from ...core.pagination import PageRequest, page_request
from ...models.api_key import ApiKey
from ...models.call import Call
from ...models.codes import AlertCode, MedicalCode
from ...models.entry_code import EntryCode
from ...models.user import User
from ...models.user_settings import UserSettings
from ...models.vehicle import UserVehicle, Vehicle
from ...schemas.api_key import ApiKeyCreate, ApiKeyOut
from ...schemas.codes import CodeIn, CodeOut, EntryCodeCreate, EntryCodeOut, EntryCodeUpdate
from ...schemas.settings import VehicleIn
from ...schemas.user import AdminFlagIn, UserOut
from ...services.calls import call_to_item, window_calls
from ...services.sessions import close_user_sessions
from ...services.stats import STATS_WINDOWS, aggregate_calls, local_today
from ...services.vehicle_classifier import vehicle_label


router = APIRouter(prefix="/api/v1/admin", tags=["admin"])
logger = logging.getLogger("admin")

CODE_MODELS = {"alert": AlertCode, "medical": MedicalCode}


def _code_model(kind: str):
    model = CODE_MODELS.get(kind)
    if model is None:
        raise HTTPException(status_code=404, detail=f"Unknown code kind: {kind}")
    return model


def _user_item(user: User) -> dict:
    return UserOut.model_validate(user).model_dump(mode="json")


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), admin: UserContext = Depends(require_admin)) -> dict:
    today = local_today(settings.timezone)
    windows = {}
    monthly = None
    for window in STATS_WINDOWS:
        stats = aggregate_calls(window_calls(db, window, today))
        windows[window] = {"calls": stats.total_calls, "hours": stats.total_hours}
        if window == "monthly":
            monthly = stats
    users = db.query(User).order_by(User.created_at.asc()).all()
    return {
        "date": today.isoformat(),
        "totalUsers": len(users),
        "windows": windows,
        "vehicleCallStats": [
            {"vehicle_type": category, "label": vehicle_label(category), "count": count}
            for category, count in monthly.counts_by_vehicle_category.items()
        ],
        "callTypeStats": [
            {"call_type": call_type, "count": count} for call_type, count in monthly.counts_by_call_type.items()
        ],
        "users": [_user_item(u) for u in users],
    }


@router.get("/users")
def list_users(db: Session = Depends(get_db), admin: UserContext = Depends(require_admin)) -> dict:
    counts = dict(db.query(Call.user_id, func.count(Call.id)).group_by(Call.user_id).all())
    items = []
    for user in db.query(User).order_by(User.username.asc()).all():
        item = _user_item(user)
        item["call_count"] = counts.get(user.id, 0)
        items.append(item)
    return {"users": items}


@router.patch("/users/{user_id}/admin")
def set_admin_flag(
    user_id: str,
    payload: AdminFlagIn,
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id == admin.user_id and not payload.is_admin:
        raise HTTPException(status_code=400, detail="Cannot remove your own admin privileges")
    user.role = ADMIN_ROLE if payload.is_admin else USER_ROLE
    db.commit()
    db.refresh(user)
    logger.info("Admin flag changed user=%s is_admin=%s by=%s", user.id, payload.is_admin, admin.user_id)
    return {"user": _user_item(user)}


@router.delete("/users/{user_id}")
def delete_user(user_id: str, db: Session = Depends(get_db), admin: UserContext = Depends(require_admin)) -> dict:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id == admin.user_id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    deleted_calls = db.query(Call).filter(Call.user_id == user_id).delete(synchronize_session=False)
    db.query(UserVehicle).filter(UserVehicle.user_id == user_id).delete(synchronize_session=False)
    db.query(UserSettings).filter(UserSettings.user_id == user_id).delete(synchronize_session=False)
    db.query(ApiKey).filter(ApiKey.user_id == user_id).delete(synchronize_session=False)
    close_user_sessions(db, user_id)
    db.query(EntryCode).filter(EntryCode.created_by == user_id).update(
        {EntryCode.created_by: None}, synchronize_session=False
    )
    db.delete(user)
    db.commit()
    logger.info("User deleted user=%s calls=%s by=%s", user_id, deleted_calls, admin.user_id)
    return {"status": "success", "id": user_id, "deleted_calls": deleted_calls}


@router.get("/calls")
def list_all_calls(
    response: Response,
    user_id: Optional[str] = Query(None),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    query = db.query(Call).options(
        joinedload(Call.user), joinedload(Call.alert_code), joinedload(Call.medical_code)
    )
    if user_id:
        query = query.filter(Call.user_id == user_id)
    total, calls = paging.fetch(query.order_by(Call.call_date.desc(), Call.created_at.desc()), response)
    items = []
    for call in calls:
        item = call_to_item(call)
        item["username"] = call.user.username if call.user else None
        item["mda_code"] = call.user.mda_code if call.user else None
        items.append(item)
    return {"calls": items, **paging.body(total)}


@router.get("/codes/{kind}")
def list_codes(kind: str, db: Session = Depends(get_db), admin: UserContext = Depends(require_admin)) -> dict:
    model = _code_model(kind)
    rows = db.query(model).order_by(model.code.asc()).all()
    return {"codes": [CodeOut.model_validate(r).model_dump(mode="json") for r in rows]}


@router.post("/codes/{kind}", status_code=201)
def create_code(
    kind: str,
    payload: CodeIn,
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    model = _code_model(kind)
    code = payload.code.strip()
    if db.query(model).filter(model.code == code).first():
        raise HTTPException(status_code=409, detail="Code already exists")
    row = model(code=code)
    db.add(row)
    db.commit()
    db.refresh(row)
    return {"code": CodeOut.model_validate(row).model_dump(mode="json")}


@router.put("/codes/{kind}/{code_id}")
def update_code(
    kind: str,
    code_id: int,
    payload: CodeIn,
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    model = _code_model(kind)
    row = db.get(model, code_id)
    if not row:
        raise HTTPException(status_code=404, detail="Code not found")
    code = payload.code.strip()
    clash = db.query(model).filter(model.code == code, model.id != code_id).first()
    if clash:
        raise HTTPException(status_code=409, detail="Code already exists")
    row.code = code
    db.commit()
    db.refresh(row)
    return {"code": CodeOut.model_validate(row).model_dump(mode="json")}


@router.delete("/codes/{kind}/{code_id}")
def delete_code(
    kind: str,
    code_id: int,
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    model = _code_model(kind)
    row = db.get(model, code_id)
    if not row:
        raise HTTPException(status_code=404, detail="Code not found")
    column = Call.alert_code_id if model is AlertCode else Call.medical_code_id
    db.query(Call).filter(column == code_id).update({column: None}, synchronize_session=False)
    db.delete(row)
    db.commit()
    return {"status": "success", "id": code_id}


def _entry_code_conflict(
    db: Session, entry_code: str, city: str, street: str, exclude_id: Optional[int] = None
) -> bool:
    query = db.query(EntryCode).filter(
        EntryCode.entry_code == entry_code,
        EntryCode.city == city,
        EntryCode.street == street,
    )
    if exclude_id is not None:
        query = query.filter(EntryCode.id != exclude_id)
    return query.first() is not None


@router.post("/entry-codes", status_code=201)
def create_entry_code(
    payload: EntryCodeCreate,
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    entry_code, city, street = payload.entry_code.strip(), payload.city.strip(), payload.street.strip()
    if _entry_code_conflict(db, entry_code, city, street):
        raise HTTPException(status_code=409, detail="Entry code already exists for this address")
    row = EntryCode(
        entry_code=entry_code,
        city=city,
        street=street,
        location_details=payload.location_details,
        notes=payload.notes,
        created_by=admin.user_id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return {"entry_code": EntryCodeOut.model_validate(row).model_dump(mode="json")}


@router.put("/entry-codes/{entry_id}")
def update_entry_code(
    entry_id: int,
    payload: EntryCodeUpdate,
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    row = db.get(EntryCode, entry_id)
    if not row:
        raise HTTPException(status_code=404, detail="Entry code not found")
    changes = payload.model_dump(exclude_unset=True)
    for name in ("entry_code", "city", "street"):
        if changes.get(name) is not None:
            setattr(row, name, changes[name].strip())
    for name in ("location_details", "notes"):
        if name in changes:
            setattr(row, name, changes[name])
    if _entry_code_conflict(db, row.entry_code, row.city, row.street, exclude_id=entry_id):
        db.rollback()
        raise HTTPException(status_code=409, detail="Entry code already exists for this address")
    db.commit()
    db.refresh(row)
    return {"entry_code": EntryCodeOut.model_validate(row).model_dump(mode="json")}


@router.delete("/entry-codes/{entry_id}")
def delete_entry_code(
    entry_id: int,
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    row = db.get(EntryCode, entry_id)
    if not row:
        raise HTTPException(status_code=404, detail="Entry code not found")
    db.delete(row)
    db.commit()
    return {"status": "success", "id": entry_id}


@router.get("/vehicles")
def list_vehicles(db: Session = Depends(get_db), admin: UserContext = Depends(require_admin)) -> dict:
    holders = {row.vehicle_number: row.user_id for row in db.query(UserVehicle).all()}
    vehicles = db.query(Vehicle).order_by(Vehicle.vehicle_number.asc()).all()
    return {
        "vehicles": [
            {
                "vehicle_number": v.vehicle_number,
                "vehicle_type": v.vehicle_type,
                "vehicle_label": vehicle_label(v.vehicle_type),
                "in_use_by": holders.get(v.vehicle_number),
            }
            for v in vehicles
        ]
    }


@router.post("/vehicles", status_code=201)
def create_vehicle(
    payload: VehicleIn,
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    number = payload.vehicle_number.strip()
    if db.get(Vehicle, number):
        raise HTTPException(status_code=409, detail="Vehicle already exists")
    vehicle = Vehicle(vehicle_number=number)
    db.add(vehicle)
    db.commit()
    return {
        "vehicle_number": vehicle.vehicle_number,
        "vehicle_type": vehicle.vehicle_type,
        "vehicle_label": vehicle_label(vehicle.vehicle_type),
    }


@router.delete("/vehicles/{vehicle_number}")
def delete_vehicle(
    vehicle_number: str,
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    vehicle = db.get(Vehicle, vehicle_number)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    db.delete(vehicle)
    db.commit()
    return {"status": "success", "vehicle_number": vehicle_number}


@router.get("/api-keys")
def list_api_keys(db: Session = Depends(get_db), admin: UserContext = Depends(require_admin)) -> dict:
    keys = db.query(ApiKey).filter(ApiKey.user_id == admin.user_id).order_by(ApiKey.created_at.desc()).all()
    return {"api_keys": [ApiKeyOut.model_validate(k).model_dump(mode="json") for k in keys]}


@router.post("/api-keys", status_code=201)
def create_api_key(
    payload: ApiKeyCreate,
    db: Session = Depends(get_db),
    admin: UserContext = Depends(require_admin),
) -> dict:
    key, raw_key = ApiKey.issue(user_id=admin.user_id, key_name=payload.key_name, permissions=payload.permissions)
    db.add(key)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="API key collision, retry")
    db.refresh(key)
    logger.info("API key created id=%s user=%s", key.id, admin.user_id)
    return {"api_key": raw_key, "key": ApiKeyOut.model_validate(key).model_dump(mode="json")}


@router.delete("/api-keys/{key_id}")
def delete_api_key(key_id: int, db: Session = Depends(get_db), admin: UserContext = Depends(require_admin)) -> dict:
    key = db.get(ApiKey, key_id)
    if not key:
        raise HTTPException(status_code=404, detail="API key not found")
    if key.user_id != admin.user_id:
        raise HTTPException(status_code=403, detail="Not allowed to delete this API key")
    db.delete(key)
    db.commit()
    return {"status": "success", "id": key_id}
