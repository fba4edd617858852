"""Shared pytest fixtures for the seodesk test suite.

Design philosophy
-----------------
- All fixtures that touch I/O use SQLite in-memory (or the in-memory store)
  so the test suite runs without any external services (PostgreSQL, Redis).
- The ``store`` fixture is parametrised over both entity store
  implementations, so every contract test runs against each of them.
- Scope is kept at "function" to guarantee full isolation.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from factories import SQLITE_URL, make_config, user_payload
from httpx import ASGITransport, AsyncClient

from seodesk.app import create_app
from seodesk.storage.database import SQLAlchemyEntityStore
from seodesk.storage.memory import InMemoryEntityStore
from seodesk.storage.sessions import InMemorySessionStore

if TYPE_CHECKING:
    from fastapi import FastAPI

    from seodesk.core.config import SeodeskConfig
    from seodesk.core.types import User
    from seodesk.storage.entity_store import EntityStore


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
async def sqlite_store():
    """SQLite-backed entity store for integration tests."""
    store = SQLAlchemyEntityStore(database_url=SQLITE_URL, pool_size=1)
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture(params=["memory", "sqlite"])
async def store(request):
    """Each entity store implementation in turn."""
    if request.param == "memory":
        yield InMemoryEntityStore()
        return
    sql_store = SQLAlchemyEntityStore(database_url=SQLITE_URL, pool_size=1)
    await sql_store.initialize()
    yield sql_store
    await sql_store.close()


@pytest.fixture
async def owner(store: EntityStore) -> User:
    return await store.create_user(user_payload("ann"))


@pytest.fixture
async def stranger(store: EntityStore) -> User:
    return await store.create_user(user_payload("bob"))


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> SeodeskConfig:
    return make_config()


@pytest.fixture
async def app(config: SeodeskConfig):
    """Application with in-memory stores; the lifespan runs around the test."""
    application = create_app(
        config,
        store=InMemoryEntityStore(),
        session_store=InMemorySessionStore(ttl=config.session_max_age),
    )
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def http(app: FastAPI):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
