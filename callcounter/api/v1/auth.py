"""
Authentication endpoints: registration, login and token introspection.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...core.auth import ADMIN_ROLE, USER_ROLE, UserContext, get_current_user
from ...core.db import get_db
from ...core.security import hash_password, verify_password
from ...models.user import User
from ...schemas.user import LoginIn, RegisterIn, UserOut
from ...services.sessions import close_session, open_session
from ...services.vehicle_classifier import classify_vehicle


router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
logger = logging.getLogger("auth")


def _build_login_response(user: User, token: str) -> dict:
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": {
            **UserOut.model_validate(user).model_dump(mode="json"),
            "vehicle_type": classify_vehicle(user.mda_code),
        },
    }


def _find_login_user(db: Session, identifier: str) -> User | None:
    lowered = identifier.lower()
    # Exact matches in priority order: username, email, full name, MDA code.
    candidates = (
        db.query(User)
        .filter(
            or_(
                func.lower(User.username) == lowered,
                func.lower(User.email) == lowered,
                User.full_name == identifier,
                User.mda_code == identifier,
            )
        )
        .all()
    )
    for match in (
        lambda u: u.username.lower() == lowered,
        lambda u: (u.email or "").lower() == lowered,
        lambda u: u.full_name == identifier,
        lambda u: u.mda_code == identifier,
    ):
        for user in candidates:
            if match(user):
                return user
    return None


@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db)) -> dict:
    identifier = payload.username.strip()
    if not identifier or not payload.password:
        raise HTTPException(status_code=400, detail="username and password are required")
    user = _find_login_user(db, identifier)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    logger.info("Login user=%s", user.username)
    return _build_login_response(user, open_session(db, user))


@router.post("/register", status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)) -> dict:
    username = payload.username.strip()
    if " " in username:
        raise HTTPException(status_code=400, detail="username cannot contain spaces")
    email = (payload.email or "").strip().lower() or None
    mda_code = payload.mda_code.strip()

    if db.query(User).filter(func.lower(User.username) == username.lower()).first():
        raise HTTPException(status_code=409, detail="Username already exists")
    if email and db.query(User).filter(func.lower(User.email) == email).first():
        raise HTTPException(status_code=409, detail="Email already registered")
    if db.query(User).filter(User.mda_code == mda_code).first():
        raise HTTPException(status_code=409, detail="MDA code already registered")

    # Bootstrap: first registered account becomes admin.
    total_users = db.query(func.count(User.id)).scalar() or 0
    role = ADMIN_ROLE if total_users == 0 else USER_ROLE

    user = User(
        username=username,
        email=email,
        full_name=payload.full_name.strip(),
        mda_code=mda_code,
        password_hash=hash_password(payload.password),
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user=%s role=%s", user.username, role)
    return _build_login_response(user, open_session(db, user))


@router.get("/me")
def me(user: UserContext = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    row = db.get(User, user.user_id)
    if not row or not row.is_active:
        raise HTTPException(status_code=401, detail="User no longer exists")
    return {
        **UserOut.model_validate(row).model_dump(mode="json"),
        "vehicle_type": classify_vehicle(row.mda_code),
    }


@router.get("/check-username")
def check_username(username: str = Query(..., min_length=1), db: Session = Depends(get_db)) -> dict:
    exists = db.query(User.id).filter(func.lower(User.username) == username.strip().lower()).first()
    return {"username": username, "exists": exists is not None}


@router.post("/logout")
def logout(user: UserContext = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    close_session(db, user.session_id)
    logger.info("Logout user=%s", user.username)
    return {"status": "success"}


@router.get("/validate")
def validate(user: UserContext = Depends(get_current_user)) -> dict:
    return {
        "valid": True,
        "user": {
            "id": user.user_id,
            "username": user.username,
            "full_name": user.full_name,
            "mda_code": user.mda_code,
            "role": user.role,
            "is_admin": user.is_admin,
        },
    }
