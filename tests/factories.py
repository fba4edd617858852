"""Payload builders and HTTP helpers shared by the test modules."""
from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from seodesk.core.config import SeodeskConfig
from seodesk.core.types import ClientCreate, ProjectCreate, TaskCreate, UserCreate

if TYPE_CHECKING:
    from httpx import AsyncClient

SQLITE_URL = "sqlite+aiosqlite:///:memory:"
SESSION_SECRET = "test-session-secret-that-is-32-chars-long!!"
COOKIE_NAME = "seodesk_session"


def user_payload(username: str, password: str = "not-really-hashed") -> UserCreate:
    return UserCreate(
        username=username,
        password=password,
        email=f"{username}@example.test",
        full_name=username.title(),
    )


def client_payload(name: str = "Acme Co", **kwargs: Any) -> ClientCreate:
    defaults: dict[str, Any] = dict(
        name=name,
        contact_person="Ann Smith",
        email=f"{name.lower().replace(' ', '')}@example.test",
    )
    defaults.update(kwargs)
    return ClientCreate(**defaults)


def project_payload(client_id: int, name: str = "Site audit", **kwargs: Any) -> ProjectCreate:
    defaults: dict[str, Any] = dict(
        name=name,
        website="https://acme.example",
        client_id=client_id,
        start_date=datetime(2026, 1, 1, tzinfo=UTC),
    )
    defaults.update(kwargs)
    return ProjectCreate(**defaults)


def task_payload(project_id: int, title: str = "Fix meta tags", **kwargs: Any) -> TaskCreate:
    defaults: dict[str, Any] = dict(title=title, project_id=project_id)
    defaults.update(kwargs)
    return TaskCreate(**defaults)


def make_config(**kwargs: Any) -> SeodeskConfig:
    defaults: dict[str, Any] = dict(
        database_url=SQLITE_URL,
        session_secret=SESSION_SECRET,
    )
    defaults.update(kwargs)
    return SeodeskConfig(**defaults)


async def register(http: AsyncClient, username: str, password: str = "s3cret-pass") -> dict:
    """Register *username* and return Bearer headers for its session.

    The client's cookie jar is cleared so each request authenticates only
    through the headers it is given.
    """
    resp = await http.post(
        "/api/register",
        json={
            "username": username,
            "password": password,
            "email": f"{username}@example.test",
            "fullName": username.title(),
        },
    )
    assert resp.status_code == 201, resp.text
    token = resp.cookies[COOKIE_NAME]
    http.cookies.clear()
    return {"Authorization": f"Bearer {token}"}
