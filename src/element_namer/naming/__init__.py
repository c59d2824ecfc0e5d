"""Unique name generation."""

from .generator import (
    DEFAULT_PREFIX,
    DELIMITER,
    FINGERPRINT_LENGTH,
    MAX_ATTEMPTS,
    PREFIX_HINT,
    NameExhaustedError,
    UniqueNameGenerator,
    validate_prefix,
)
from .seeding import SeededGenerator

__all__ = [
    "DEFAULT_PREFIX",
    "DELIMITER",
    "FINGERPRINT_LENGTH",
    "MAX_ATTEMPTS",
    "NameExhaustedError",
    "PREFIX_HINT",
    "SeededGenerator",
    "UniqueNameGenerator",
    "validate_prefix",
]
