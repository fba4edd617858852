"""Storage implementations for seodesk data.

Entity storage:
- SQLAlchemy: persistent storage (PostgreSQL, SQLite, MySQL)
- In-Memory: testing and development

Session storage:
- Redis: shared across worker processes
- In-Memory: single process

Example:
    ```python
    from seodesk.storage import RedisSessionStore, SQLAlchemyEntityStore

    store = SQLAlchemyEntityStore(database_url="postgresql+asyncpg://localhost/seodesk")
    await store.initialize()

    sessions = RedisSessionStore(redis_url="redis://localhost:6379/0")
    ```
"""

from seodesk.storage.database import SQLAlchemyEntityStore
from seodesk.storage.entity_store import EntityStore
from seodesk.storage.memory import InMemoryEntityStore
from seodesk.storage.redis import RedisSessionStore
from seodesk.storage.sessions import InMemorySessionStore, SessionStore

__all__ = [
    "EntityStore",
    "InMemoryEntityStore",
    "InMemorySessionStore",
    "RedisSessionStore",
    "SQLAlchemyEntityStore",
    "SessionStore",
]
