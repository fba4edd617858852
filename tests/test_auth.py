"""AuthService: registration, login, logout and token resolution."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from factories import SESSION_SECRET, user_payload
from jose import jwt
import pytest

from seodesk.activity import ActivityLogger
from seodesk.auth import AuthService
from seodesk.core.exceptions import ConflictError, UnauthenticatedError
from seodesk.core.types import ActivityAction, UserUpdate
from seodesk.storage.memory import InMemoryEntityStore
from seodesk.storage.sessions import InMemorySessionStore
from seodesk.utils.security import verify_password


@pytest.fixture
def store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore(ttl=3600)


@pytest.fixture
def auth(store, sessions) -> AuthService:
    return AuthService(store, sessions, ActivityLogger(store), secret=SESSION_SECRET)


class TestConstruction:

    def test_empty_secret_rejected(self, store, sessions) -> None:
        with pytest.raises(ValueError):
            AuthService(store, sessions, ActivityLogger(store), secret="")


class TestTokens:

    def test_roundtrip(self, auth) -> None:
        token = auth.issue_token(7, "sid-1")
        assert auth.decode_token(token) == (7, "sid-1")

    def test_claims(self, auth) -> None:
        claims = jwt.decode(auth.issue_token(7, "sid-1"), SESSION_SECRET, algorithms=["HS256"])
        assert claims["sub"] == "7"
        assert claims["sid"] == "sid-1"
        assert "exp" in claims

    def test_wrong_secret(self, auth) -> None:
        forged = jwt.encode(
            {"sub": "7", "sid": "x", "exp": datetime.now(UTC) + timedelta(hours=1)},
            "another-secret-another-secret-1234",
            algorithm="HS256",
        )
        assert auth.decode_token(forged) is None

    def test_expired(self, auth) -> None:
        expired = jwt.encode(
            {"sub": "7", "sid": "x", "exp": datetime.now(UTC) - timedelta(seconds=5)},
            SESSION_SECRET,
            algorithm="HS256",
        )
        assert auth.decode_token(expired) is None

    def test_missing_claims(self, auth) -> None:
        no_sid = jwt.encode({"sub": "7"}, SESSION_SECRET, algorithm="HS256")
        bad_sub = jwt.encode({"sub": "ann", "sid": "x"}, SESSION_SECRET, algorithm="HS256")
        assert auth.decode_token(no_sid) is None
        assert auth.decode_token(bad_sub) is None

    def test_garbage(self, auth) -> None:
        assert auth.decode_token("not-a-token") is None


class TestRegister:

    @pytest.mark.asyncio
    async def test_hashes_password(self, auth, store) -> None:
        user, token = await auth.register(user_payload("ann", "s3cret-pass"))
        stored = await store.get_user(user.id)
        assert stored.password != "s3cret-pass"
        assert verify_password("s3cret-pass", stored.password)
        assert (await auth.resolve(token)).id == user.id

    @pytest.mark.asyncio
    async def test_logs_registration(self, auth, store) -> None:
        user, _ = await auth.register(user_payload("ann"))
        logs = await store.list_activity_logs_by_user(user.id)
        assert [(a.action, a.details) for a in logs] == [
            (ActivityAction.REGISTERED, "User registration")
        ]

    @pytest.mark.asyncio
    async def test_duplicate(self, auth) -> None:
        await auth.register(user_payload("ann"))
        with pytest.raises(ConflictError, match="Username already exists"):
            await auth.register(user_payload("ann"))


class TestLogin:

    @pytest.mark.asyncio
    async def test_success(self, auth, store) -> None:
        registered, _ = await auth.register(user_payload("ann", "s3cret-pass"))
        user, token = await auth.login("ann", "s3cret-pass")
        assert user.id == registered.id
        assert (await auth.resolve(token)).id == user.id
        latest = (await store.list_activity_logs_by_user(user.id, limit=1))[0]
        assert latest.action == ActivityAction.LOGGED_IN
        assert latest.details == "User login"

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth, store) -> None:
        user, _ = await auth.register(user_payload("ann", "s3cret-pass"))
        with pytest.raises(UnauthenticatedError):
            await auth.login("ann", "wrong")
        logs = await store.list_activity_logs_by_user(user.id)
        assert ActivityAction.LOGGED_IN not in {a.action for a in logs}

    @pytest.mark.asyncio
    async def test_unknown_user(self, auth) -> None:
        with pytest.raises(UnauthenticatedError):
            await auth.login("nobody", "x")

    @pytest.mark.asyncio
    async def test_sessions_independent(self, auth) -> None:
        await auth.register(user_payload("ann", "pw"))
        _, first = await auth.login("ann", "pw")
        _, second = await auth.login("ann", "pw")
        await auth.logout(first)
        assert await auth.resolve(first) is None
        assert await auth.resolve(second) is not None


class TestLogout:

    @pytest.mark.asyncio
    async def test_revokes_token(self, auth, store) -> None:
        user, token = await auth.register(user_payload("ann"))
        assert (await auth.logout(token)).id == user.id
        assert await auth.resolve(token) is None
        latest = (await store.list_activity_logs_by_user(user.id, limit=1))[0]
        assert (latest.action, latest.details) == (ActivityAction.LOGGED_OUT, "User logout")

    @pytest.mark.asyncio
    async def test_without_token(self, auth) -> None:
        assert await auth.logout(None) is None

    @pytest.mark.asyncio
    async def test_twice(self, auth, store) -> None:
        user, token = await auth.register(user_payload("ann"))
        await auth.logout(token)
        assert await auth.logout(token) is None
        logged_out = [
            a for a in await store.list_activity_logs_by_user(user.id)
            if a.action == ActivityAction.LOGGED_OUT
        ]
        assert len(logged_out) == 1


class TestResolve:

    @pytest.mark.asyncio
    async def test_session_must_match_user(self, auth, sessions) -> None:
        user, _ = await auth.register(user_payload("ann"))
        other_sid = await sessions.create(user.id + 100)
        assert await auth.resolve(auth.issue_token(user.id, other_sid)) is None

    @pytest.mark.asyncio
    async def test_deleted_user(self, auth, store) -> None:
        user, token = await auth.register(user_payload("ann"))
        store.clear()
        assert await auth.resolve(token) is None

    @pytest.mark.asyncio
    async def test_none(self, auth) -> None:
        assert await auth.resolve(None) is None
        assert await auth.resolve("") is None


class TestUpdateUser:

    @pytest.mark.asyncio
    async def test_update_profile(self, auth, store) -> None:
        user, _ = await auth.register(user_payload("ann", "old-pass"))
        updated = await auth.update_user(
            user, UserUpdate(full_name="Ann Smith", password="new-pass")
        )
        assert updated.full_name == "Ann Smith"
        assert verify_password("new-pass", updated.password)
        await auth.login("ann", "new-pass")
        with pytest.raises(UnauthenticatedError):
            await auth.login("ann", "old-pass")

    @pytest.mark.asyncio
    async def test_logs_update(self, auth, store) -> None:
        user, _ = await auth.register(user_payload("ann"))
        await auth.update_user(user, UserUpdate(full_name="Ann Smith"))
        latest = (await store.list_activity_logs_by_user(user.id, limit=1))[0]
        assert (latest.action, latest.details) == (ActivityAction.UPDATED, "Updated profile")

    @pytest.mark.asyncio
    async def test_email_taken(self, auth) -> None:
        ann, _ = await auth.register(user_payload("ann"))
        await auth.register(user_payload("bob"))
        with pytest.raises(ConflictError):
            await auth.update_user(ann, UserUpdate(email="bob@example.test"))
