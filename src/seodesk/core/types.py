"""Core types, enums, and data models for seodesk.

Domain models are frozen pydantic models; use ``model_copy(update={...})`` to
derive modified versions.  Every model serialises with camelCase aliases
(``contactPerson``, ``createdBy`` …) and accepts either camelCase or
snake_case on input.
"""
from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def as_utc(value: datetime | None) -> datetime | None:
    """Return *value* as an aware UTC datetime (naive values are taken as UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ProjectStatus(StrEnum):
    """Project lifecycle status."""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PAUSED = "paused"


class TaskStatus(StrEnum):
    """Task lifecycle status."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(StrEnum):
    """Task priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityAction(StrEnum):
    """Verb recorded on an activity log row."""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    LOGGED_IN = "logged_in"
    LOGGED_OUT = "logged_out"
    REGISTERED = "registered"


class EntityType(StrEnum):
    """Entity kind recorded on an activity log row."""
    USER = "user"
    CLIENT = "client"
    PROJECT = "project"
    TASK = "task"
    REPORT = "report"


class CamelModel(BaseModel):
    """Base for all wire-facing models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Entity(CamelModel):
    """Immutable stored entity with a server-assigned id and creation time."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="Server-assigned identifier")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Creation timestamp (UTC)",
    )

    @field_validator("created_at", mode="after")
    @classmethod
    def _created_at_utc(cls, v: datetime) -> datetime:
        return as_utc(v)  # type: ignore[return-value]


##################
# Domain models  #
##################


class UserPublic(Entity):
    """User as returned over the wire; never carries the password hash."""

    username: str
    email: str
    full_name: str
    role: str = "user"


class User(UserPublic):
    """Stored user, including the salted password hash."""

    password: str = Field(..., repr=False)

    def public(self) -> UserPublic:
        return UserPublic.model_validate(self.model_dump(exclude={"password"}))


class Client(Entity):
    name: str
    contact_person: str
    email: str
    phone: str | None = None
    website: str | None = None
    notes: str | None = None
    created_by: int


class Project(Entity):
    name: str
    website: str
    client_id: int
    start_date: datetime
    end_date: datetime | None = None
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    description: str | None = None
    attachments: list[str] | None = None
    created_by: int

    @field_validator("start_date", "end_date", mode="after")
    @classmethod
    def _dates_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class Task(Entity):
    title: str
    description: str | None = None
    project_id: int
    assigned_to: int | None = None
    due_date: datetime | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    created_by: int

    @field_validator("due_date", mode="after")
    @classmethod
    def _due_date_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class Report(Entity):
    title: str
    project_id: int
    content: str
    created_by: int


class ActivityLog(Entity):
    """Append-only audit row.  Never mutated or deleted."""

    user_id: int
    action: ActivityAction
    entity_type: EntityType
    entity_id: int
    details: str | None = None


##################
# Input payloads #
##################


class PartialUpdate(CamelModel):
    """Base for PUT payloads: every field optional, non-nullable fields reject null."""

    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_null_required(self) -> PartialUpdate:
        for name in self.model_fields_set & self.non_nullable:
            if getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} may not be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=255)
    role: str = Field(default="user", min_length=1, max_length=50)


class UserUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"email", "full_name", "password"})

    email: str | None = Field(default=None, min_length=1, max_length=255)
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    password: str | None = Field(default=None, min_length=1)


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ClientCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_person: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    phone: str | None = None
    website: str | None = None
    notes: str | None = None


class ClientUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"name", "contact_person", "email"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    contact_person: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = None
    website: str | None = None
    notes: str | None = None


class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    website: str = Field(..., min_length=1)
    client_id: int
    start_date: datetime
    end_date: datetime | None = None
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    description: str | None = None
    attachments: list[str] | None = None


class ProjectUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"name", "website", "client_id", "start_date", "status"}
    )

    name: str | None = Field(default=None, min_length=1, max_length=255)
    website: str | None = Field(default=None, min_length=1)
    client_id: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: ProjectStatus | None = None
    description: str | None = None
    attachments: list[str] | None = None


class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    project_id: int
    assigned_to: int | None = None
    due_date: datetime | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"title", "project_id", "priority", "status"}
    )

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    project_id: int | None = None
    assigned_to: int | None = None
    due_date: datetime | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None


class ReportCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=500)
    project_id: int
    content: str = ""
    include_task_stats: bool = True
    include_charts: bool = True
    include_client_info: bool = True

    def render_content(self) -> str:
        """Return ``content``, or a templated summary when it was left empty."""
        if self.content:
            return self.content
        parts = [f"Generated report for project {self.project_id}. "]
        if self.include_task_stats:
            parts.append("Includes task statistics. ")
        if self.include_charts:
            parts.append("Includes performance charts. ")
        if self.include_client_info:
            parts.append("Includes client information. ")
        return "".join(parts)


#####################
# Dashboard outputs #
#####################


class DashboardStats(CamelModel):
    active_projects: int = 0
    completed_projects: int = 0
    pending_tasks: int = 0
    active_clients: int = 0


class TaskProgress(CamelModel):
    """Task counts and percentages.

    ``overdue`` is a subset of ``pending`` and is not part of ``total``; each
    percentage is rounded independently, so the three partition percentages
    sum to 100 only approximately.
    """

    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    overdue: int = 0
    total: int = 0
    completed_percentage: int = 0
    in_progress_percentage: int = 0
    pending_percentage: int = 0
    overdue_percentage: int = 0


class DashboardSnapshot(CamelModel):
    stats: DashboardStats = Field(default_factory=DashboardStats)
    task_progress: TaskProgress = Field(default_factory=TaskProgress)
    recent_activities: list[ActivityLog] = Field(default_factory=list)
    recent_clients: list[Client] = Field(default_factory=list)
    upcoming_deadlines: list[Task] = Field(default_factory=list)


__all__ = [
    "ActivityAction",
    "ActivityLog",
    "CamelModel",
    "Client",
    "ClientCreate",
    "ClientUpdate",
    "DashboardSnapshot",
    "DashboardStats",
    "Entity",
    "EntityType",
    "LoginRequest",
    "PartialUpdate",
    "Project",
    "ProjectCreate",
    "ProjectStatus",
    "ProjectUpdate",
    "Report",
    "ReportCreate",
    "Task",
    "TaskCreate",
    "TaskPriority",
    "TaskProgress",
    "TaskStatus",
    "TaskUpdate",
    "User",
    "UserCreate",
    "UserPublic",
    "UserUpdate",
    "as_utc",
]
