"""FastAPI dependency-injection helpers for seodesk routes."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from seodesk.core.exceptions import UnauthenticatedError
from seodesk.core.types import User
from seodesk.manager import SeodeskManager


def get_manager(request: Request) -> SeodeskManager:
    """Return the manager published by :meth:`SeodeskManager.create_lifespan`."""
    manager = getattr(request.app.state, "manager", None)
    if manager is None:
        raise RuntimeError(
            "manager not found on app.state. "
            "Did you forget to use SeodeskManager.create_lifespan()?"
        )
    return manager


async def get_current_user_optional(request: Request) -> User | None:
    """Return the user resolved by the session middleware, if any."""
    return getattr(request.state, "user", None)


async def get_current_user(
    user: Annotated[User | None, Depends(get_current_user_optional)],
) -> User:
    """Return the session user, raising 401 when there is none.

    Example
    -------
    .. code-block:: python

        @router.get("/api/clients")
        async def list_clients(user: CurrentUser, manager: Manager):
            return await manager.clients.list_for_user(user.id)
    """
    if user is None:
        raise UnauthenticatedError()
    return user


def get_session_token(request: Request) -> str | None:
    return getattr(request.state, "session_token", None)


Manager = Annotated[SeodeskManager, Depends(get_manager)]
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_current_user_optional)]
SessionToken = Annotated[str | None, Depends(get_session_token)]


__all__ = [
    "CurrentUser",
    "Manager",
    "OptionalUser",
    "SessionToken",
    "get_current_user",
    "get_current_user_optional",
    "get_manager",
    "get_session_token",
]
