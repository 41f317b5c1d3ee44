"""
Service layer for the call counter backend.

Pure business rules (vehicle classification, call-type normalisation and
statistics) live beside the database helpers used by the API routers.
"""

from .vehicle_classifier import classify_vehicle
from .call_types import normalize_call_type
from .stats import aggregate_calls

__all__ = ["classify_vehicle", "normalize_call_type", "aggregate_calls"]
