"""
Bootstrap seed helper for the initial administrator account.
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core.security import hash_password
from ..models.user import User


def seed_admin_user(db: Session) -> None:
    logger = logging.getLogger("auth-seed")
    username = (os.getenv("CALLS_ADMIN_USERNAME") or "admin").strip()
    password = (os.getenv("CALLS_ADMIN_PASSWORD") or "").strip()

    if not username:
        logger.warning("Skipping admin seed: empty CALLS_ADMIN_USERNAME")
        return
    if not password:
        logger.warning("Skipping admin seed: CALLS_ADMIN_PASSWORD is empty")
        return

    existing = db.query(User).filter(func.lower(User.username) == username.lower()).first()
    if existing:
        if existing.role != "ADMIN" or not existing.is_active:
            existing.role = "ADMIN"
            existing.is_active = True
            db.commit()
            logger.info("Promoted existing user %s to admin", username)
        return

    db.add(
        User(
            username=username,
            full_name=(os.getenv("CALLS_ADMIN_FULL_NAME") or "Administrator").strip(),
            password_hash=hash_password(password),
            role="ADMIN",
            is_active=True,
        )
    )
    db.commit()
    logger.info("Seeded admin user %s", username)
