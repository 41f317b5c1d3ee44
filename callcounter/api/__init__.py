"""
API package for the call counter backend.

This package aggregates all API routers to be included in the FastAPI
application. The API is versioned under ``/api/v1``.
"""

from fastapi import APIRouter, Depends
from .v1.auth import router as auth_router
from .v1.calls import router as calls_router
from .v1.stats import router as stats_router
from .v1.codes import router as codes_router
from .v1.entry_codes import router as entry_codes_router
from .v1.settings import router as settings_router
from .v1.vehicle import router as vehicle_router
from .v1.admin import router as admin_router
from .v1.external import router as external_router
from .v1.health import router as health_router
from ..core.auth import get_current_user
from ..core.rate_limit import rate_limit_dependency

api_router = APIRouter()
protected = [Depends(get_current_user), Depends(rate_limit_dependency)]
api_router.include_router(auth_router, dependencies=[Depends(rate_limit_dependency)])
api_router.include_router(calls_router, dependencies=protected)
api_router.include_router(stats_router, dependencies=protected)
api_router.include_router(codes_router, dependencies=protected)
api_router.include_router(entry_codes_router, dependencies=protected)
api_router.include_router(settings_router, dependencies=protected)
api_router.include_router(vehicle_router, dependencies=protected)
api_router.include_router(admin_router, dependencies=protected)
api_router.include_router(external_router, dependencies=[Depends(rate_limit_dependency)])
api_router.include_router(health_router)
