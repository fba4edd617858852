"""FastAPI application factory.

Run with uvicorn's factory mode, configuration coming from ``SEODESK_*``
environment variables::

    uvicorn seodesk.app:create_app --factory
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI

from seodesk.api import api_router
from seodesk.api.errors import register_exception_handlers
from seodesk.core.config import SeodeskConfig
from seodesk.manager import SeodeskManager
from seodesk.middleware.session import SessionMiddleware

if TYPE_CHECKING:
    from seodesk.storage.entity_store import EntityStore
    from seodesk.storage.sessions import SessionStore

logger = logging.getLogger(__name__)


def create_app(
    config: SeodeskConfig | None = None,
    *,
    store: EntityStore | None = None,
    session_store: SessionStore | None = None,
) -> FastAPI:
    """Build the seodesk application.

    Parameters
    ----------
    config:
        Application configuration; read from the environment when omitted.
    store:
        Entity store override (e.g. :class:`~seodesk.storage.memory.InMemoryEntityStore`).
    session_store:
        Session store override.
    """
    if config is None:
        config = SeodeskConfig()  # type: ignore[call-arg]
    logging.getLogger("seodesk").setLevel(config.log_level)

    app = FastAPI(
        title="seodesk",
        lifespan=SeodeskManager.create_lifespan(
            config, store=store, session_store=session_store
        ),
    )
    app.add_middleware(SessionMiddleware, cookie_name=config.session_cookie_name)
    register_exception_handlers(app)
    app.include_router(api_router)
    logger.info("seodesk application created")
    return app


__all__ = ["create_app"]
