"""Exception handlers rendering seodesk errors as ``{message, errors?}`` bodies."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from seodesk.core.exceptions import InvalidDataError, SeodeskError, StoreError

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

# Router tag → message used when a request fails schema validation.
_VALIDATION_MESSAGES: dict[str, str] = {
    "auth": "Missing required fields",
    "clients": "Invalid client data",
    "projects": "Invalid project data",
    "tasks": "Invalid task data",
    "reports": "Invalid report data",
}
_DEFAULT_VALIDATION_MESSAGE = "Invalid request data"


def _validation_message(request: Request) -> str:
    route = request.scope.get("route")
    for tag in getattr(route, "tags", None) or []:
        if tag in _VALIDATION_MESSAGES:
            return _VALIDATION_MESSAGES[tag]
    return _DEFAULT_VALIDATION_MESSAGE


def _format_errors(errors: Any) -> list[dict[str, Any]]:
    formatted: list[dict[str, Any]] = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        formatted.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return formatted


async def seodesk_error_handler(request: Request, exc: SeodeskError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error(
            "Store failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "An unexpected error occurred"},
        )
    content: dict[str, Any] = {"message": exc.message}
    if isinstance(exc, InvalidDataError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = _validation_message(request)
    logger.debug("Validation failed on %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message, "errors": _format_errors(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SeodeskError, seodesk_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, validation_error_handler  # type: ignore[arg-type]
    )


__all__ = [
    "register_exception_handlers",
    "seodesk_error_handler",
    "validation_error_handler",
]
