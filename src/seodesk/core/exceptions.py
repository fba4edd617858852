"""Custom exceptions for seodesk.

All exceptions derive from :class:`SeodeskError` so callers can catch the
entire family with a single ``except SeodeskError`` clause.  Each class carries
the HTTP status it is rendered with by the API layer.

Hierarchy::

    SeodeskError
    ├── UnauthenticatedError      (401)
    ├── ForbiddenError            (403)
    ├── EntityNotFoundError       (404)
    ├── InvalidDataError          (400)
    ├── ConflictError             (400)
    └── StoreError                (500)
"""

from __future__ import annotations

from typing import Any


class SeodeskError(Exception):
    """Base exception for all seodesk errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r})"


class UnauthenticatedError(SeodeskError):
    """Raised when a request carries no valid session."""

    status_code = 401

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__("Unauthorized", details)


class ForbiddenError(SeodeskError):
    """Raised when the acting user does not own the target entity (or its parent)."""

    status_code = 403

    def __init__(
        self,
        message: str = "Forbidden",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)


class EntityNotFoundError(SeodeskError):
    """Raised when a referenced entity id does not exist."""

    status_code = 404

    def __init__(
        self,
        entity_type: str,
        entity_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"{entity_type.capitalize()} not found", details)
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidDataError(SeodeskError):
    """Raised when a payload fails validation or references a missing parent."""

    status_code = 400

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.errors: list[dict[str, Any]] = errors or []


class ConflictError(SeodeskError):
    """Raised when a unique user field (username, email) is already taken."""

    status_code = 400

    def __init__(
        self,
        field: str,
        value: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"{field.capitalize()} already exists", details)
        self.field = field
        self.value = value


class StoreError(SeodeskError):
    """Raised when the entity store fails unexpectedly."""

    status_code = 500

    def __init__(
        self,
        operation: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Store operation {operation!r} failed: {reason}", details)
        self.operation = operation
        self.reason = reason


__all__ = [
    "ConflictError",
    "EntityNotFoundError",
    "ForbiddenError",
    "InvalidDataError",
    "SeodeskError",
    "StoreError",
    "UnauthenticatedError",
]
