"""Task model with due date, workflow status, and stored priority score."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from crm_backend.core.time import utcnow
from crm_backend.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)

TASK_STATUSES = ("todo", "in_progress", "waiting_approval", "completed", "cancelled")
TERMINAL_TASK_STATUSES = frozenset({"completed", "cancelled"})
PRIORITY_TAGS = ("low", "medium", "high", "urgent")


class Task(QueryModel, table=True):
    """Unit of work, optionally linked to a client and a project."""

    __tablename__ = "tasks"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    client_id: UUID | None = Field(default=None, foreign_key="clients.id", index=True)
    project_id: UUID | None = Field(default=None, foreign_key="projects.id", index=True)

    title: str
    description: str | None = None
    status: str = Field(default="todo", index=True)
    priority: str = Field(default="medium")
    due_date: datetime | None = None

    priority_score: int | None = Field(default=None, index=True)
    priority_label: str | None = None
    priority_calculated_at: datetime | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
