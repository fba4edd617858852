"""Security utilities for authentication.

This module provides security-related utilities:
- Password hashing (scrypt, per-password random salt)
- Password verification in constant time
- Session id generation
- Data masking for logs
"""

import hashlib
import secrets
from typing import Any

_SCRYPT_N = 16384
_SCRYPT_R = 8
_SCRYPT_P = 1
_KEY_LENGTH = 64
_SALT_BYTES = 16


def _scrypt(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode(),
        salt=salt.encode(),
        n=_SCRYPT_N,
        r=_SCRYPT_R,
        p=_SCRYPT_P,
        dklen=_KEY_LENGTH,
    )


def hash_password(password: str) -> str:
    """Hash a password with scrypt and a random salt.

    Args:
        password: Plain-text password

    Returns:
        ``"<hex digest>.<hex salt>"``

    Example:
        ```python
        stored = hash_password("s3cret")
        # Returns: "9f2c...e1.5a7b...03"
        ```
    """
    salt = secrets.token_hex(_SALT_BYTES)
    return f"{_scrypt(password, salt).hex()}.{salt}"


def verify_password(supplied: str, stored: str) -> bool:
    """Check *supplied* against a value produced by :func:`hash_password`.

    Malformed stored values never match.
    """
    hashed, sep, salt = stored.partition(".")
    if not sep or not hashed or not salt:
        return False
    try:
        expected = bytes.fromhex(hashed)
    except ValueError:
        return False
    return secrets.compare_digest(expected, _scrypt(supplied, salt))


def generate_session_id(length: int = 32) -> str:
    """Generate a URL-safe random session id."""
    return secrets.token_urlsafe(length)


def mask_sensitive_data(
    data: dict[str, Any],
    sensitive_keys: list[str] | None = None,
    mask_char: str = "*",
) -> dict[str, Any]:
    """Mask sensitive data in dictionary.

    Args:
        data: Dictionary to mask
        sensitive_keys: List of keys to mask (default: common sensitive fields)
        mask_char: Character to use for masking (default: '*')

    Returns:
        Dictionary with masked values

    Example:
        ```python
        masked = mask_sensitive_data({"username": "ann", "password": "x"})
        # Returns: {"username": "ann", "password": "***MASKED***"}
        ```
    """
    if sensitive_keys is None:
        sensitive_keys = ["password", "secret", "token", "session"]

    masked = data.copy()
    for key in masked:
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in sensitive_keys):
            masked[key] = f"{mask_char * 3}MASKED{mask_char * 3}"
    return masked


__all__ = [
    "generate_session_id",
    "hash_password",
    "mask_sensitive_data",
    "verify_password",
]
