"""Redis-backed session storage.

Each session is one key ``<prefix>:<session id>`` holding the user id, written
with ``SETEX`` so Redis expires it together with the session token.
"""
from __future__ import annotations

import logging

from redis import asyncio as aioredis

from seodesk.storage.sessions import SessionStore
from seodesk.utils.security import generate_session_id

logger = logging.getLogger(__name__)


class RedisSessionStore(SessionStore):
    """Session storage shared by every worker through Redis.

    Example
    -------
    .. code-block:: python

        sessions = RedisSessionStore(redis_url="redis://localhost:6379/0", ttl=86400)
        sid = await sessions.create(user.id)
        assert await sessions.get(sid) == user.id
    """

    def __init__(
        self,
        redis_url: str,
        ttl: int = 604800,
        key_prefix: str = "seodesk:session",
    ) -> None:
        super().__init__(ttl)
        self.key_prefix = key_prefix
        self.redis: aioredis.Redis = aioredis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        logger.info("RedisSessionStore initialised ttl=%ds prefix=%s", ttl, key_prefix)

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}:{session_id}"

    async def create(self, user_id: int) -> str:
        session_id = generate_session_id()
        await self.redis.setex(self._key(session_id), self.ttl, str(user_id))
        logger.debug("Opened session for user id=%d", user_id)
        return session_id

    async def get(self, session_id: str) -> int | None:
        value = await self.redis.get(self._key(session_id))
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            logger.warning("Discarding malformed session value for key %s", self._key(session_id))
            await self.redis.delete(self._key(session_id))
            return None

    async def delete(self, session_id: str) -> None:
        await self.redis.delete(self._key(session_id))

    async def close(self) -> None:
        await self.redis.aclose()
        logger.info("RedisSessionStore closed")


__all__ = ["RedisSessionStore"]
