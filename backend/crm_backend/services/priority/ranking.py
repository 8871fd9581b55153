"""Ranked reads over stored priority scores.

Scores and labels are read as last written by a recalculation run; nothing
here rescores or writes. The `reason` text is the one exception: it is
derived at read time from the entity's current fields, so between runs it
describes the entity as it is now while `score` and `label` still describe
it as of `priority_calculated_at`. Ordering is total and stable:

1. stored score, highest first (never-scored items count as 0);
2. items with a due date or deadline before items without one;
3. nearer date first;
4. newer `created_at` first;
5. kind, then id, ascending.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Literal

from crm_backend.core.logging import get_logger
from crm_backend.core.time import as_naive_utc, utcnow
from crm_backend.models.projects import CLOSED_PROJECT_STATUSES
from crm_backend.models.tasks import TERMINAL_TASK_STATUSES
from crm_backend.services.priority.errors import InvalidLimitError
from crm_backend.services.priority.scoring import (
    coerce_due,
    label_for_score,
    score_project,
    score_task,
)

if TYPE_CHECKING:
    from uuid import UUID

    from crm_backend.services.priority.accessor import (
        PriorityDataAccessor,
        ProjectSnapshot,
        TaskSnapshot,
    )

logger = get_logger(__name__)

MIN_TOP_ITEMS_LIMIT = 1
MAX_TOP_ITEMS_LIMIT = 50
DEFAULT_TOP_ITEMS_LIMIT = 10
TODAY_CANDIDATE_LIMIT = 5
TODAY_SCORE_THRESHOLD = 50

_EPOCH = datetime(1970, 1, 1)


@dataclass(frozen=True)
class PriorityItem:
    """One entry of a merged task/project ranking."""

    id: UUID
    kind: Literal["task", "project"]
    title: str
    score: int
    label: str
    reason: str
    due_or_deadline: datetime | None = None
    client_name: str | None = None
    budget: float | None = None
    created_at: datetime | None = None


def validate_top_items_limit(limit: int) -> int:
    """Reject limits outside 1..50 before any data is read."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidLimitError(limit, minimum=MIN_TOP_ITEMS_LIMIT, maximum=MAX_TOP_ITEMS_LIMIT)
    if limit < MIN_TOP_ITEMS_LIMIT or limit > MAX_TOP_ITEMS_LIMIT:
        raise InvalidLimitError(limit, minimum=MIN_TOP_ITEMS_LIMIT, maximum=MAX_TOP_ITEMS_LIMIT)
    return limit


def ranking_key(item: PriorityItem) -> tuple[int, int, float, float, str, str]:
    due = coerce_due(item.due_or_deadline)
    due_seconds = (due - _EPOCH).total_seconds() if due is not None else 0.0
    created = as_naive_utc(item.created_at) if item.created_at is not None else _EPOCH
    return (
        -item.score,
        0 if due is not None else 1,
        due_seconds,
        -(created - _EPOCH).total_seconds(),
        item.kind,
        str(item.id),
    )


def rank_items(items: list[PriorityItem]) -> list[PriorityItem]:
    return sorted(items, key=ranking_key)


def _stored_label(score: int, label: str | None) -> str:
    return label or label_for_score(score)


def _task_item(task: TaskSnapshot, now: datetime) -> PriorityItem:
    score = task.priority_score or 0
    return PriorityItem(
        id=task.id,
        kind="task",
        title=task.title,
        score=score,
        label=_stored_label(score, task.priority_label),
        reason=score_task(task, now).breakdown.reason,
        due_or_deadline=task.due_date,
        client_name=task.client_name,
        budget=task.budget,
        created_at=task.created_at,
    )


def _project_item(project: ProjectSnapshot, now: datetime) -> PriorityItem:
    score = project.priority_score or 0
    return PriorityItem(
        id=project.id,
        kind="project",
        title=project.name,
        score=score,
        label=_stored_label(score, project.priority_label),
        reason=score_project(project, now).breakdown.reason,
        due_or_deadline=project.deadline,
        client_name=project.client_name,
        budget=project.budget,
        created_at=project.created_at,
    )


def _is_open_task(task: TaskSnapshot) -> bool:
    return (task.status or "").strip().lower() not in TERMINAL_TASK_STATUSES


def _is_open_project(project: ProjectSnapshot) -> bool:
    return (project.status or "").strip().lower() not in CLOSED_PROJECT_STATUSES


class PriorityRankingService:
    """Read-side queries over already-scored tasks and projects."""

    def __init__(
        self,
        accessor: PriorityDataAccessor,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._accessor = accessor
        self._clock = clock

    async def get_top_priority_items(
        self,
        user_id: UUID,
        limit: int = DEFAULT_TOP_ITEMS_LIMIT,
    ) -> list[PriorityItem]:
        """Return the `limit` highest-scored open tasks and projects of one user."""
        validate_top_items_limit(limit)
        now = self._clock()
        tasks = await self._accessor.list_tasks_for_user(user_id)
        projects = await self._accessor.list_projects_for_user(user_id)

        items = [_task_item(task, now) for task in tasks if _is_open_task(task)]
        items.extend(_project_item(project, now) for project in projects if _is_open_project(project))
        ranked = rank_items(items)[:limit]
        logger.debug(
            "priority.top_items.ranked",
            extra={"user_id": str(user_id), "candidates": len(items), "returned": len(ranked)},
        )
        return ranked

    async def get_recommended_items_for_today(self, user_id: UUID) -> list[PriorityItem]:
        """Top items worth acting on today: high scores, or due today or earlier."""
        now = as_naive_utc(self._clock())
        end_of_today = datetime(now.year, now.month, now.day) + timedelta(days=1)
        top_items = await self.get_top_priority_items(user_id, TODAY_CANDIDATE_LIMIT)

        recommended: list[PriorityItem] = []
        for item in top_items:
            if item.score >= TODAY_SCORE_THRESHOLD:
                recommended.append(item)
                continue
            due = coerce_due(item.due_or_deadline)
            if due is not None and due < end_of_today:
                recommended.append(item)
        return recommended
