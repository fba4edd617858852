"""Credential verification and session identity.

A login produces two things: a server-side session record (see
:mod:`seodesk.storage.sessions`) and a signed JWT carrying the user id
(``sub``) and the session id (``sid``).  A token resolves to a user only
while its signature, its ``exp`` and its session record are all valid, so
logging out revokes the token immediately.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt

from seodesk.core.exceptions import UnauthenticatedError
from seodesk.core.types import ActivityAction, EntityType
from seodesk.utils.security import hash_password, mask_sensitive_data, verify_password

if TYPE_CHECKING:
    from seodesk.activity import ActivityLogger
    from seodesk.core.types import User, UserCreate, UserUpdate
    from seodesk.storage.entity_store import EntityStore
    from seodesk.storage.sessions import SessionStore

logger = logging.getLogger(__name__)


class AuthService:
    """Register, log in, log out and resolve session tokens.

    Example:
        ```python
        auth = AuthService(store, sessions, activity, secret=config.session_secret)
        user, token = await auth.login("ann", "s3cret")
        assert (await auth.resolve(token)).id == user.id
        await auth.logout(token)
        assert await auth.resolve(token) is None
        ```
    """

    def __init__(
        self,
        store: EntityStore,
        sessions: SessionStore,
        activity: ActivityLogger,
        *,
        secret: str,
        algorithm: str = "HS256",
        max_age: int = 604800,
    ) -> None:
        if not secret:
            raise ValueError("AuthService requires a non-empty secret key.")
        self.store = store
        self.sessions = sessions
        self.activity = activity
        self.secret = secret
        self.algorithm = algorithm
        self.max_age = max_age

    # ── Tokens ───────────────────────────────────────────────────────────────

    def issue_token(self, user_id: int, session_id: str) -> str:
        claims: dict[str, Any] = {
            "sub": str(user_id),
            "sid": session_id,
            "exp": datetime.now(UTC) + timedelta(seconds=self.max_age),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> tuple[int, str] | None:
        """Return ``(user_id, session_id)`` from a valid token, else ``None``."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug("Session token rejected: %s", e)
            return None
        sid = payload.get("sid")
        try:
            user_id = int(payload.get("sub", ""))
        except (TypeError, ValueError):
            return None
        if not sid:
            return None
        return user_id, str(sid)

    async def _open_session(self, user: User) -> str:
        session_id = await self.sessions.create(user.id)
        return self.issue_token(user.id, session_id)

    # ── Operations ───────────────────────────────────────────────────────────

    async def register(self, data: UserCreate) -> tuple[User, str]:
        """Create a user, log the registration and open a session.

        Raises:
            ConflictError: If the username or email is taken
        """
        logger.debug("Registering %s", mask_sensitive_data(data.model_dump()))
        hashed = data.model_copy(update={"password": hash_password(data.password)})
        async with self.store.atomic():
            user = await self.store.create_user(hashed)
        logger.info("Registered user id=%d username=%s", user.id, user.username)
        await self.activity.record(
            user.id, ActivityAction.REGISTERED, EntityType.USER, user.id, "User registration"
        )
        return user, await self._open_session(user)

    async def authenticate(self, username: str, password: str) -> User | None:
        user = await self.store.get_user_by_username(username)
        if user is None or not verify_password(password, user.password):
            return None
        return user

    async def login(self, username: str, password: str) -> tuple[User, str]:
        """Verify credentials and open a session.

        Raises:
            UnauthenticatedError: If the credentials do not match
        """
        user = await self.authenticate(username, password)
        if user is None:
            logger.warning("Failed login for username=%s", username)
            raise UnauthenticatedError()
        logger.info("User id=%d logged in", user.id)
        await self.activity.record(
            user.id, ActivityAction.LOGGED_IN, EntityType.USER, user.id, "User login"
        )
        return user, await self._open_session(user)

    async def logout(self, token: str | None) -> User | None:
        """Close the session behind *token*; return the user it belonged to."""
        if not token:
            return None
        user = await self.resolve(token)
        decoded = self.decode_token(token)
        if decoded is not None:
            await self.sessions.delete(decoded[1])
        if user is not None:
            logger.info("User id=%d logged out", user.id)
            await self.activity.record(
                user.id, ActivityAction.LOGGED_OUT, EntityType.USER, user.id, "User logout"
            )
        return user

    async def resolve(self, token: str | None) -> User | None:
        """Return the user a session token belongs to, or ``None``."""
        if not token:
            return None
        decoded = self.decode_token(token)
        if decoded is None:
            return None
        user_id, session_id = decoded
        if await self.sessions.get(session_id) != user_id:
            return None
        return await self.store.get_user(user_id)

    async def update_user(self, user: User, data: UserUpdate) -> User:
        """Apply a profile update for *user*.

        Raises:
            ConflictError: If the new email belongs to another user
        """
        changes = data.changes()
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])
        async with self.store.atomic():
            updated = await self.store.update_user(user.id, changes)
        if updated is None:
            raise UnauthenticatedError()
        logger.info("Updated user id=%d fields=%s", user.id, sorted(changes))
        await self.activity.record(
            user.id, ActivityAction.UPDATED, EntityType.USER, user.id, "Updated profile"
        )
        return updated


__all__ = ["AuthService"]
