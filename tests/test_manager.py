"""SeodeskManager lifecycle, component wiring and health check.

API contract:
  - SeodeskManager(config, *, store=None, session_store=None); no I/O in __init__.
  - create_lifespan(config, ...) is a @staticmethod returning a lifespan callable.
"""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

from factories import make_config, user_payload
from fastapi import FastAPI
import pytest

from seodesk.manager import SeodeskManager
from seodesk.storage.database import SQLAlchemyEntityStore
from seodesk.storage.memory import InMemoryEntityStore
from seodesk.storage.redis import RedisSessionStore
from seodesk.storage.sessions import InMemorySessionStore


def _make_manager(config=None, store=None, session_store=None) -> SeodeskManager:
    return SeodeskManager(
        config or make_config(),
        store=store if store is not None else InMemoryEntityStore(),
        session_store=session_store,
    )


class TestConstruction:

    def test_creates_without_error(self) -> None:
        m = _make_manager()
        assert m._initialized is False

    def test_stores_config(self) -> None:
        cfg = make_config()
        assert _make_manager(config=cfg).config is cfg

    def test_default_backends(self) -> None:
        m = SeodeskManager(make_config())
        assert isinstance(m.store, SQLAlchemyEntityStore)
        assert isinstance(m.sessions, InMemorySessionStore)
        assert m.sessions.ttl == 604800

    def test_redis_backend(self) -> None:
        cfg = make_config(session_backend="redis", redis_url="redis://localhost:6379/0")
        with patch("seodesk.storage.redis.aioredis.from_url", return_value=MagicMock()):
            m = _make_manager(config=cfg)
        assert isinstance(m.sessions, RedisSessionStore)

    def test_components_share_store(self) -> None:
        m = _make_manager()
        assert m.access.store is m.store
        assert m.activity.store is m.store
        assert m.auth.store is m.store
        assert m.auth.sessions is m.sessions
        assert m.dashboard.store is m.store
        for service in (m.clients, m.projects, m.tasks, m.reports):
            assert service.store is m.store
            assert service.access is m.access
            assert service.activity is m.activity

    def test_dashboard_settings_from_config(self) -> None:
        m = _make_manager(config=make_config(deadline_window_days=14, recent_clients_limit=2))
        assert m.dashboard.deadline_window.days == 14
        assert m.dashboard.recent_clients_limit == 2


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_initialize_idempotent(self) -> None:
        store = InMemoryEntityStore()
        store.initialize = AsyncMock()
        m = _make_manager(store=store)
        await m.initialize()
        await m.initialize()
        store.initialize.assert_awaited_once()
        assert m._initialized is True

    @pytest.mark.asyncio
    async def test_shutdown_closes_stores(self) -> None:
        store = InMemoryEntityStore()
        store.close = AsyncMock()
        sessions = InMemorySessionStore()
        sessions.close = AsyncMock()
        m = _make_manager(store=store, session_store=sessions)
        await m.initialize()
        await m.shutdown()
        store.close.assert_awaited_once()
        sessions.close.assert_awaited_once()
        assert m._initialized is False

    @pytest.mark.asyncio
    async def test_shutdown_before_initialize_is_noop(self) -> None:
        store = InMemoryEntityStore()
        store.close = AsyncMock()
        await _make_manager(store=store).shutdown()
        store.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_context_manager_with_sqlite(self) -> None:
        async with SeodeskManager(make_config()) as m:
            user, token = await m.auth.register(user_payload("ann"))
            assert (await m.auth.resolve(token)).id == user.id
        assert m._initialized is False

    @pytest.mark.asyncio
    async def test_lifespan_publishes_manager(self) -> None:
        cfg = make_config()
        lifespan = SeodeskManager.create_lifespan(cfg, store=InMemoryEntityStore())
        app = FastAPI()
        async with lifespan(app):
            assert isinstance(app.state.manager, SeodeskManager)
            assert app.state.config is cfg
            assert app.state.manager._initialized is True
        assert app.state.manager._initialized is False


class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_healthy(self) -> None:
        m = _make_manager()
        health = await m.health_check()
        assert health["status"] == "healthy"
        assert health["components"]["entity_store"]["backend"] == "InMemoryEntityStore"
        assert health["components"]["session_store"]["backend"] == "InMemorySessionStore"

    @pytest.mark.asyncio
    async def test_store_failure(self) -> None:
        store = InMemoryEntityStore()
        store.list_activity_logs = AsyncMock(side_effect=RuntimeError("db down"))
        health = await _make_manager(store=store).health_check()
        assert health["status"] == "unhealthy"
        assert health["components"]["entity_store"] == {
            "status": "unhealthy",
            "error": "db down",
        }

    @pytest.mark.asyncio
    async def test_health_route_unhealthy(self, app, http) -> None:
        app.state.manager.store.list_activity_logs = AsyncMock(side_effect=RuntimeError("down"))
        resp = await http.get("/health")
        assert resp.status_code == 503
        assert resp.json()["status"] == "unhealthy"
