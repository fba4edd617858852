"""Dependencies: get_manager, get_current_user, get_session_token."""
from __future__ import annotations

from types import SimpleNamespace

import pytest

from seodesk.core.exceptions import UnauthenticatedError
from seodesk.core.types import User
from seodesk.dependencies import (
    get_current_user,
    get_current_user_optional,
    get_manager,
    get_session_token,
)


def _make_request(state: dict | None = None, app_state: dict | None = None):
    return SimpleNamespace(
        state=SimpleNamespace(**(state or {})),
        app=SimpleNamespace(state=SimpleNamespace(**(app_state or {}))),
    )


def _user() -> User:
    return User(id=1, username="ann", email="ann@example.test", full_name="Ann", password="h")


class TestGetManager:

    def test_returns_manager(self) -> None:
        sentinel = object()
        assert get_manager(_make_request(app_state={"manager": sentinel})) is sentinel

    def test_missing_manager_raises(self) -> None:
        with pytest.raises(RuntimeError, match="create_lifespan"):
            get_manager(_make_request())


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_optional_reads_request_state(self) -> None:
        user = _user()
        assert await get_current_user_optional(_make_request(state={"user": user})) is user
        assert await get_current_user_optional(_make_request()) is None

    @pytest.mark.asyncio
    async def test_required_passes_user(self) -> None:
        user = _user()
        assert await get_current_user(user=user) is user

    @pytest.mark.asyncio
    async def test_required_raises_401(self) -> None:
        with pytest.raises(UnauthenticatedError) as exc_info:
            await get_current_user(user=None)
        assert exc_info.value.status_code == 401


class TestSessionToken:

    def test_token(self) -> None:
        assert get_session_token(_make_request(state={"session_token": "abc"})) == "abc"
        assert get_session_token(_make_request()) is None
