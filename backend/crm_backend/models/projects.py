"""Project model with deadline, stage, and stored priority score."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from crm_backend.core.time import utcnow
from crm_backend.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)

PROJECT_STAGES = ("planning", "development", "testing", "review", "delivery", "maintenance")
PROJECT_STATUSES = ("active", "on_hold", "completed", "cancelled")
CLOSED_PROJECT_STATUSES = frozenset({"completed", "cancelled"})


class Project(QueryModel, table=True):
    """Client engagement tracked by stage and deadline."""

    __tablename__ = "projects"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    client_id: UUID | None = Field(default=None, foreign_key="clients.id", index=True)

    name: str
    description: str | None = None
    stage: str = Field(default="planning", index=True)
    status: str = Field(default="active", index=True)
    priority: str = Field(default="medium")
    deadline: datetime | None = None
    budget: float | None = None

    priority_score: int | None = Field(default=None, index=True)
    priority_label: str | None = None
    priority_calculated_at: datetime | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
