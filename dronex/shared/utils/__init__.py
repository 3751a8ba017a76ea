"""Shared utilities for DroneX services."""
from .pii import configure_hash_salt, fingerprint_text, hash_identifier

__all__ = ["hash_identifier", "fingerprint_text", "configure_hash_salt"]
