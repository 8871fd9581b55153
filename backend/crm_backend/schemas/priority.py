"""Schemas for priority recalculation and ranking endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field
from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


class EntityFailureRead(SQLModel):
    """A task or project that could not be rescored during a run."""

    kind: Literal["task", "project"]
    entity_id: UUID
    error: str


class RecalculationResponse(SQLModel):
    """Result of a manual recalculation for the calling user."""

    tasks_updated: int = Field(examples=[12])
    projects_updated: int = Field(examples=[3])
    total_updated: int = Field(examples=[15])
    tasks_failed: int = Field(default=0, examples=[0])
    projects_failed: int = Field(default=0, examples=[0])
    failures: list[EntityFailureRead] = Field(default_factory=list)


class UserRecalculationRead(SQLModel):
    """Per-user line of a scheduled all-users recalculation."""

    user_id: UUID
    user_name: str | None = None
    user_email: str | None = None
    success: bool
    tasks_updated: int = 0
    projects_updated: int = 0
    tasks_failed: int = 0
    projects_failed: int = 0
    error: str | None = None


class BatchRecalculationResponse(SQLModel):
    """Aggregate result of a scheduled all-users recalculation."""

    total_users: int
    successful_users: int
    failed_users: int
    total_tasks_updated: int
    total_projects_updated: int
    total_items_updated: int
    started_at: datetime
    finished_at: datetime | None = None
    results: list[UserRecalculationRead] = Field(default_factory=list)


class PriorityItemRead(SQLModel):
    """One entry of the merged task/project ranking."""

    id: UUID
    kind: Literal["task", "project"]
    title: str
    score: int = Field(examples=[72])
    label: str = Field(examples=["critical"])
    reason: str = Field(
        examples=["Overdue, VIP client"],
        description="Derived at read time from the current fields, not stored with the score.",
    )
    due_or_deadline: datetime | None = None
    client_name: str | None = None
    budget: float | None = None
    created_at: datetime | None = None


class TopPriorityItemsResponse(SQLModel):
    """Highest-priority open items for the calling user."""

    items: list[PriorityItemRead] = Field(default_factory=list)
    count: int
    limit: int


class TodayPriorityItemsResponse(SQLModel):
    """Items recommended for attention today."""

    items: list[PriorityItemRead] = Field(default_factory=list)
    count: int
