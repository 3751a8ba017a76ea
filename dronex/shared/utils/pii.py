"""Identifier hashing for logs and emitted events.

User identifiers and message text never appear raw in logs or in the
escalation stream. Identifiers are hashed with a process-wide salt;
message text only gets an unsalted fingerprint for correlation.
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)

MIN_SALT_LENGTH = 32

# Loaded from the HASH_SALT environment variable at service startup
_HASH_SALT: Optional[str] = None


def configure_hash_salt(salt: str) -> None:
    """Set the salt used by hash_identifier().

    Must be called during startup, before any identifier is hashed.

    Args:
        salt: Secret salt, at least 32 characters

    Raises:
        ValueError: If salt is empty or too short
    """
    global _HASH_SALT
    if not salt or len(salt) < MIN_SALT_LENGTH:
        logger.critical(
            "HASH_SALT_CONFIGURATION_FAILED",
            extra={"reason": "salt_too_short", "min_length": MIN_SALT_LENGTH}
        )
        raise ValueError(f"Hash salt must be at least {MIN_SALT_LENGTH} characters")

    _HASH_SALT = salt
    logger.info("HASH_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def hash_identifier(value: str) -> str:
    """Hash a user identifier (user id, phone number, email).

    Args:
        value: Raw identifier

    Returns:
        64-char hex SHA-256 digest of salt + value

    Raises:
        RuntimeError: If the salt has not been configured
    """
    if _HASH_SALT is None:
        logger.critical(
            "IDENTIFIER_HASH_FAILED",
            extra={"reason": "salt_not_configured", "action": "call configure_hash_salt()"}
        )
        raise RuntimeError("Hash salt not configured. Call configure_hash_salt() first.")

    return hashlib.sha256(f"{_HASH_SALT}{value}".encode()).hexdigest()


def fingerprint_text(text: str) -> str:
    """Unsalted SHA-256 of message text, for correlating log lines."""
    return hashlib.sha256(text.encode()).hexdigest()
