"""SQLAlchemy 2.0 ORM models for seodesk tables.

Pure ``Mapped[T]`` declarations with no dialect-specific column types, so the
same models run on PostgreSQL, SQLite, and MySQL.  Enum columns are plain
strings; list columns are JSON text.  ``created_at`` is set in Python so the
value is known without a round-trip after insert.
"""
from __future__ import annotations

import json
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from seodesk.core.types import (
    ActivityAction,
    ActivityLog,
    Client,
    EntityType,
    Project,
    ProjectStatus,
    Report,
    Task,
    TaskPriority,
    TaskStatus,
    User,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


class TimestampedMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )


class UserModel(TimestampedMixin, Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="user")

    def to_domain(self) -> User:
        return User.model_validate(self)


class ClientModel(TimestampedMixin, Base):
    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_person: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(100), nullable=True)
    website: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    def to_domain(self) -> Client:
        return Client.model_validate(self)


class ProjectModel(TimestampedMixin, Base):
    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    website: Mapped[str] = mapped_column(Text, nullable=False)
    # No FK constraint: deleting a client leaves its projects in place.
    client_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProjectStatus.IN_PROGRESS.value, index=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    attachments_json: Mapped[str | None] = mapped_column("attachments", Text, nullable=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    @property
    def attachments(self) -> list[str] | None:
        if self.attachments_json is None:
            return None
        try:
            return list(json.loads(self.attachments_json))
        except (json.JSONDecodeError, TypeError):
            return None

    @attachments.setter
    def attachments(self, value: list[str] | None) -> None:
        self.attachments_json = None if value is None else json.dumps(value)

    def to_domain(self) -> Project:
        return Project.model_validate(self)


class TaskModel(TimestampedMixin, Base):
    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    project_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    assigned_to: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    priority: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskPriority.MEDIUM.value
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.PENDING.value, index=True
    )
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    def to_domain(self) -> Task:
        return Task.model_validate(self)


class ReportModel(TimestampedMixin, Base):
    __tablename__ = "reports"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    project_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    def to_domain(self) -> Report:
        return Report.model_validate(self)


class ActivityLogModel(TimestampedMixin, Base):
    __tablename__ = "activity_logs"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_domain(self) -> ActivityLog:
        return ActivityLog(
            id=self.id,
            created_at=self.created_at,
            user_id=self.user_id,
            action=ActivityAction(self.action),
            entity_type=EntityType(self.entity_type),
            entity_id=self.entity_id,
            details=self.details,
        )


__all__ = [
    "ActivityLogModel",
    "Base",
    "ClientModel",
    "ProjectModel",
    "ReportModel",
    "TaskModel",
    "UserModel",
]
