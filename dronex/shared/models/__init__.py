"""Shared domain models for DroneX services."""
from .emergency import (
    GeoPoint,
    Severity,
    Utterance,
)

__all__ = [
    "GeoPoint",
    "Severity",
    "Utterance",
]
