"""Registration, login, logout and the current user's profile."""
from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Response, status

from seodesk.core.types import LoginRequest, UserCreate, UserPublic, UserUpdate
from seodesk.dependencies import CurrentUser, Manager, SessionToken

if TYPE_CHECKING:
    from seodesk.manager import SeodeskManager

router = APIRouter(prefix="/api", tags=["auth"])


def _set_session_cookie(response: Response, manager: SeodeskManager, token: str) -> None:
    config = manager.config
    response.set_cookie(
        key=config.session_cookie_name,
        value=token,
        max_age=config.session_max_age,
        httponly=True,
        samesite="lax",
        secure=config.session_cookie_secure,
    )


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def register(body: UserCreate, response: Response, manager: Manager):
    user, token = await manager.auth.register(body)
    _set_session_cookie(response, manager, token)
    return user.public()


@router.post("/login", response_model=UserPublic)
async def login(body: LoginRequest, response: Response, manager: Manager):
    user, token = await manager.auth.login(body.username, body.password)
    _set_session_cookie(response, manager, token)
    return user.public()


@router.post("/logout")
async def logout(response: Response, manager: Manager, token: SessionToken):
    await manager.auth.logout(token)
    response.delete_cookie(manager.config.session_cookie_name)
    return {"message": "Logged out"}


@router.get("/user", response_model=UserPublic)
async def current_user(user: CurrentUser):
    return user.public()


@router.put("/user", response_model=UserPublic)
async def update_current_user(body: UserUpdate, user: CurrentUser, manager: Manager):
    """Update the caller's email, full name and/or password."""
    updated = await manager.auth.update_user(user, body)
    return updated.public()
