"""Utility functions for seodesk."""

from seodesk.utils.db_compat import DbDialect, detect_dialect
from seodesk.utils.security import (
    generate_session_id,
    hash_password,
    mask_sensitive_data,
    verify_password,
)

__all__ = [
    "DbDialect",
    "detect_dialect",
    "generate_session_id",
    "hash_password",
    "mask_sensitive_data",
    "verify_password",
]
