"""Task creation payload schema."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field
from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)

TaskStatus = Literal["todo", "in_progress", "waiting_approval", "completed", "cancelled"]
TaskPriority = Literal["low", "medium", "high", "urgent"]


class TaskCreate(SQLModel):
    """Fields accepted when creating a task."""

    title: str = Field(min_length=1, examples=["Send revised proposal"])
    description: str | None = None
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"
    due_date: datetime | None = None
    client_id: UUID | None = None
    project_id: UUID | None = None
