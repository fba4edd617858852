"""Central seodesk manager: lifecycle and component orchestration.

The manager owns one instance of every component and hands the same
references to every request handler:

    EntityStore ─┬─ AccessControl ─┐
                 ├─ ActivityLogger ┼─ Client/Project/Task/ReportService
                 ├─ AuthService ◄──┤  (with the SessionStore)
                 └─ DashboardAggregator

Construction performs no I/O.  :meth:`SeodeskManager.initialize` creates the
tables; :meth:`SeodeskManager.shutdown` disposes engines and connections.

The recommended integration is :func:`seodesk.app.create_app`, which wires
:meth:`SeodeskManager.create_lifespan` for you::

    app = create_app(SeodeskConfig())
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from seodesk.access import AccessControl
from seodesk.activity import ActivityLogger
from seodesk.auth import AuthService
from seodesk.dashboard import DashboardAggregator
from seodesk.services import ClientService, ProjectService, ReportService, TaskService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI
    from starlette.types import Lifespan

    from seodesk.core.config import SeodeskConfig
    from seodesk.storage.entity_store import EntityStore
    from seodesk.storage.sessions import SessionStore

logger = logging.getLogger(__name__)


class SeodeskManager:
    """Orchestrator for every seodesk component.

    Lifecycle
    ---------
    1. **Construct**: builds the stores (or takes the given ones) and the
       components around them, with no I/O.
    2. **initialize()**: creates database tables.  Idempotent.
    3. **shutdown()**: disposes the database engine and session store
       connections.

    Usable directly in tests::

        async with SeodeskManager(config, store=InMemoryEntityStore()) as m:
            user, token = await m.auth.register(UserCreate(...))

    Parameters
    ----------
    config:
        Validated :class:`~seodesk.core.config.SeodeskConfig`.
    store:
        Override the default
        :class:`~seodesk.storage.database.SQLAlchemyEntityStore`.
    session_store:
        Override the session store selected by ``config.session_backend``.
    """

    def __init__(
        self,
        config: SeodeskConfig,
        *,
        store: EntityStore | None = None,
        session_store: SessionStore | None = None,
    ) -> None:
        self.config = config
        self._initialized = False

        self.store: EntityStore = store if store is not None else self._build_store()
        self.sessions: SessionStore = (
            session_store if session_store is not None else self._build_session_store()
        )

        self.access = AccessControl(self.store)
        self.activity = ActivityLogger(self.store)
        self.auth = AuthService(
            self.store,
            self.sessions,
            self.activity,
            secret=config.session_secret,
            algorithm=config.session_algorithm,
            max_age=config.session_max_age,
        )
        self.dashboard = DashboardAggregator(
            self.store,
            deadline_window_days=config.deadline_window_days,
            recent_activity_limit=config.recent_activity_limit,
            recent_clients_limit=config.recent_clients_limit,
            upcoming_deadlines_limit=config.upcoming_deadlines_limit,
        )
        self.clients = ClientService(self.store, self.access, self.activity)
        self.projects = ProjectService(self.store, self.access, self.activity)
        self.tasks = TaskService(self.store, self.access, self.activity)
        self.reports = ReportService(self.store, self.access, self.activity)

        logger.info(
            "SeodeskManager created store=%s sessions=%s",
            type(self.store).__name__,
            type(self.sessions).__name__,
        )

    def _build_store(self) -> EntityStore:
        from seodesk.storage.database import SQLAlchemyEntityStore

        return SQLAlchemyEntityStore(
            database_url=self.config.database_url,
            pool_size=self.config.database_pool_size,
            max_overflow=self.config.database_max_overflow,
            echo=self.config.database_echo,
        )

    def _build_session_store(self) -> SessionStore:
        if self.config.session_backend == "redis":
            from seodesk.storage.redis import RedisSessionStore

            # validate_configuration() guarantees redis_url for this backend
            return RedisSessionStore(
                redis_url=self.config.redis_url or "",
                ttl=self.config.session_max_age,
            )
        from seodesk.storage.sessions import InMemorySessionStore

        return InMemorySessionStore(ttl=self.config.session_max_age)

    async def initialize(self) -> None:
        """Create storage tables.  Subsequent calls are no-ops."""
        if self._initialized:
            return
        logger.info("SeodeskManager initialising …")
        await self.store.initialize()
        self._initialized = True
        logger.info("SeodeskManager initialised")

    async def shutdown(self) -> None:
        """Release connection pools and session store connections."""
        if not self._initialized:
            return
        logger.info("SeodeskManager shutting down …")
        await self.store.close()
        await self.sessions.close()
        self._initialized = False
        logger.info("SeodeskManager shutdown complete")

    async def __aenter__(self) -> SeodeskManager:
        await self.initialize()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.shutdown()

    @staticmethod
    def create_lifespan(
        config: SeodeskConfig,
        *,
        store: EntityStore | None = None,
        session_store: SessionStore | None = None,
    ) -> Lifespan[FastAPI]:
        """Build a FastAPI ``lifespan`` that owns a :class:`SeodeskManager`.

        The lifespan creates the manager, publishes it on
        ``app.state.manager``, initialises it, and shuts it down on teardown.
        """

        @asynccontextmanager
        async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
            manager = SeodeskManager(config, store=store, session_store=session_store)
            app.state.manager = manager
            app.state.config = config
            await manager.initialize()
            try:
                yield
            finally:
                await manager.shutdown()

        return _lifespan

    async def health_check(self) -> dict[str, Any]:
        """Return health information for the managed components."""
        health: dict[str, Any] = {"status": "healthy", "components": {}}
        try:
            await self.store.list_activity_logs(limit=1)
            health["components"]["entity_store"] = {
                "status": "healthy",
                "backend": type(self.store).__name__,
            }
        except Exception as exc:
            health["status"] = "unhealthy"
            health["components"]["entity_store"] = {
                "status": "unhealthy",
                "error": str(exc),
            }
        health["components"]["session_store"] = {
            "status": "healthy",
            "backend": type(self.sessions).__name__,
        }
        return health


__all__ = ["SeodeskManager"]
