"""Session middleware: request-scoped user resolution.

Every request that is not on a public path gets ``request.state.user``
(the resolved :class:`~seodesk.core.types.User`, or ``None``) and
``request.state.session_token`` before it reaches a route.  Whether a route
requires a user is decided by its dependencies, so unauthenticated requests
pass through here untouched.
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

if TYPE_CHECKING:
    from starlette.middleware.base import RequestResponseEndpoint

    from seodesk.manager import SeodeskManager

logger = logging.getLogger(__name__)

_DEFAULT_SKIP_PATHS: list[str] = [
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
]


def extract_token(request: Request, cookie_name: str) -> str | None:
    """Return the session token from ``Authorization: Bearer`` or the session cookie.

    The header wins when both are present.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header:
        parts = auth_header.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    return request.cookies.get(cookie_name) or None


class SessionMiddleware(BaseHTTPMiddleware):
    """Resolve the session user for every request and log its timing.

    Processing pipeline
    -------------------
    1. Skip resolution for public paths and OPTIONS requests (preflight).
    2. Read the token (Bearer header first, then cookie).
    3. Resolve it through ``app.state.manager.auth``.
    4. Forward to the next handler.
    5. Render any exception that escaped the route handlers as a 500.

    Parameters
    ----------
    app:
        The ASGI application (injected by Starlette's middleware machinery).
    cookie_name:
        Name of the session cookie.
    skip_paths:
        URL prefixes that bypass session resolution.
    """

    def __init__(
        self,
        app: Any,
        *,
        cookie_name: str = "seodesk_session",
        skip_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.cookie_name = cookie_name
        self.skip_paths: list[str] = (
            skip_paths if skip_paths is not None else list(_DEFAULT_SKIP_PATHS)
        )
        logger.info("SessionMiddleware registered skip_paths=%s", self.skip_paths)

    def _is_path_skipped(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.skip_paths)

    def _should_skip_request(self, request: Request) -> bool:
        if request.method == "OPTIONS":
            return True
        return self._is_path_skipped(request.url.path)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()

        if self._should_skip_request(request):
            logger.debug("Skipping session resolution for %s", request.url.path)
            return await call_next(request)

        manager: SeodeskManager | None = getattr(request.app.state, "manager", None)
        if manager is None:
            logger.error(
                "SessionMiddleware has no manager; was SeodeskManager.create_lifespan() used?"
            )
            return self._error_response(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "Service is not yet initialised.",
            )

        try:
            token = extract_token(request, self.cookie_name)
            user = await manager.auth.resolve(token)
            request.state.user = user
            request.state.session_token = token

            response = await call_next(request)

            total_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "Request user=%s %s %s [%d] %.2f ms",
                user.id if user is not None else "-",
                request.method,
                request.url.path,
                response.status_code,
                total_ms,
            )
            return response

        except Exception as exc:
            logger.error("Unexpected error: %s", exc, exc_info=True)
            return self._error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "An unexpected error occurred",
            )

    @staticmethod
    def _error_response(status_code: int, message: str) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"message": message})


__all__ = ["SessionMiddleware", "extract_token"]
