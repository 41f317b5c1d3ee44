"""
Entry point for the MDA call counter backend.

This script creates the FastAPI application, includes all API routers
and runs the startup bootstrap (schema, migrations, seeds). Run with:

    uvicorn callcounter.main:app --reload

"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import FastAPI

from .core.db import engine, SessionLocal
from .models import Base
from .services.auth_seed import seed_admin_user
from .services.seed import seed_reference_data
from .scripts.run_migrations import run_migrations_to_head

from .api import api_router
from .core.config import settings, get_app_env, env_flag
from .core.errors import log_exception
from .core.logging_config import setup_logging


def create_app() -> FastAPI:
    setup_logging(settings.log_level, settings.log_file)
    app = FastAPI(title="MDA Call Counter Backend", version="0.1.0")
    # Include API routers
    app.include_router(api_router)

    @app.on_event("startup")
    def _init_db() -> None:
        logger = logging.getLogger("startup")
        env = get_app_env()
        if env_flag("AUTO_CREATE_DB", "true"):
            try:
                Base.metadata.create_all(bind=engine)
            except Exception as exc:
                log_exception(logger, "DB create_all failed", exc=exc)
                if env == "prod":
                    raise
        if env_flag("AUTO_RUN_MIGRATIONS", "false"):
            try:
                run_migrations_to_head()
            except Exception as exc:
                log_exception(logger, "DB migrations failed", exc=exc)
                if env == "prod":
                    raise
        seed_path = os.getenv("SEED_REFERENCE_PATH", "")
        if seed_path:
            try:
                with SessionLocal() as db:
                    inserted = seed_reference_data(db, Path(seed_path))
                logger.info("Reference data seeded %s", inserted)
            except Exception as exc:
                log_exception(logger, "Seed reference data failed", extra={"path": seed_path}, exc=exc)
                if env == "prod":
                    raise
        if env_flag("AUTO_SEED_ADMIN_USER", "true"):
            try:
                with SessionLocal() as db:
                    seed_admin_user(db)
            except Exception as exc:
                log_exception(logger, "Seed admin user failed", exc=exc)
                if env == "prod":
                    raise

    return app


app = create_app()
