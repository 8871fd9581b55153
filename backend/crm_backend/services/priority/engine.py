"""Priority recalculation runs for one user or for every user.

A run is sequential: each entity is scored and written before the next one
is read from the list. Failures are isolated at two levels:

- a task or project that fails to score or persist is logged, recorded in
  `RecalculationResult.failures`, and skipped;
- in all-users mode, a user whose run raises is recorded with its error
  message and the loop moves on to the next user.

Only failures to fetch (unknown user, unreachable store, failure to list
users) propagate to the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Literal

from crm_backend.core.logging import get_logger
from crm_backend.core.time import utcnow
from crm_backend.services.priority.scoring import score_project, score_task

if TYPE_CHECKING:
    from uuid import UUID

    from crm_backend.services.priority.accessor import PriorityDataAccessor, UserRef

logger = get_logger(__name__)

EntityKind = Literal["task", "project"]


@dataclass(frozen=True)
class EntityFailure:
    """One task or project that could not be rescored."""

    kind: EntityKind
    entity_id: UUID
    error: str


@dataclass
class RecalculationResult:
    """Outcome of rescoring every task and project of one user."""

    user_id: UUID
    tasks_updated: int = 0
    projects_updated: int = 0
    failures: list[EntityFailure] = field(default_factory=list)

    @property
    def tasks_failed(self) -> int:
        return sum(1 for failure in self.failures if failure.kind == "task")

    @property
    def projects_failed(self) -> int:
        return sum(1 for failure in self.failures if failure.kind == "project")

    @property
    def total_updated(self) -> int:
        return self.tasks_updated + self.projects_updated


@dataclass
class UserRecalculationResult:
    """Per-user line of an all-users run."""

    user_id: UUID
    user_name: str | None
    user_email: str | None
    success: bool
    tasks_updated: int = 0
    projects_updated: int = 0
    tasks_failed: int = 0
    projects_failed: int = 0
    error: str | None = None


@dataclass
class BatchRecalculationSummary:
    """Aggregate outcome of an all-users run."""

    started_at: datetime
    finished_at: datetime | None = None
    results: list[UserRecalculationResult] = field(default_factory=list)

    @property
    def total_users(self) -> int:
        return len(self.results)

    @property
    def successful_users(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed_users(self) -> int:
        return sum(1 for result in self.results if not result.success)

    @property
    def total_tasks_updated(self) -> int:
        return sum(result.tasks_updated for result in self.results)

    @property
    def total_projects_updated(self) -> int:
        return sum(result.projects_updated for result in self.results)

    @property
    def total_items_updated(self) -> int:
        return self.total_tasks_updated + self.total_projects_updated


def _error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class PriorityRecalculationService:
    """Rescore and persist priority for tasks and projects."""

    def __init__(
        self,
        accessor: PriorityDataAccessor,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._accessor = accessor
        self._clock = clock

    async def recalculate_all_scores(self, user_id: UUID) -> RecalculationResult:
        """Rescore every task and project owned by `user_id`, whatever their status."""
        now = self._clock()
        tasks = await self._accessor.list_tasks_for_user(user_id)
        projects = await self._accessor.list_projects_for_user(user_id)
        result = RecalculationResult(user_id=user_id)

        for task in tasks:
            try:
                scored = score_task(task, now)
                await self._accessor.update_task_score(task.id, scored.score, scored.label, now)
            except Exception as exc:
                logger.exception(
                    "priority.recalc.entity_failed",
                    extra={"user_id": str(user_id), "kind": "task", "entity_id": str(task.id)},
                )
                result.failures.append(
                    EntityFailure(kind="task", entity_id=task.id, error=_error_message(exc)),
                )
                continue
            result.tasks_updated += 1

        for project in projects:
            try:
                scored = score_project(project, now)
                await self._accessor.update_project_score(
                    project.id,
                    scored.score,
                    scored.label,
                    now,
                )
            except Exception as exc:
                logger.exception(
                    "priority.recalc.entity_failed",
                    extra={
                        "user_id": str(user_id),
                        "kind": "project",
                        "entity_id": str(project.id),
                    },
                )
                result.failures.append(
                    EntityFailure(kind="project", entity_id=project.id, error=_error_message(exc)),
                )
                continue
            result.projects_updated += 1

        logger.info(
            "priority.recalc.user_completed",
            extra={
                "user_id": str(user_id),
                "tasks_updated": result.tasks_updated,
                "projects_updated": result.projects_updated,
                "failures": len(result.failures),
            },
        )
        return result

    async def recalculate_all_users(self) -> BatchRecalculationSummary:
        """Run `recalculate_all_scores` for every known user, isolating per-user failures."""
        summary = BatchRecalculationSummary(started_at=self._clock())
        users = await self._accessor.list_users()
        logger.info("priority.recalc.batch_started", extra={"user_count": len(users)})

        for user in users:
            summary.results.append(await self._recalculate_user_entry(user))

        summary.finished_at = self._clock()
        logger.info(
            "priority.recalc.batch_completed",
            extra={
                "total_users": summary.total_users,
                "successful_users": summary.successful_users,
                "failed_users": summary.failed_users,
                "total_items_updated": summary.total_items_updated,
            },
        )
        return summary

    async def _recalculate_user_entry(self, user: UserRef) -> UserRecalculationResult:
        try:
            result = await self.recalculate_all_scores(user.id)
        except Exception as exc:
            logger.exception("priority.recalc.user_failed", extra={"user_id": str(user.id)})
            return UserRecalculationResult(
                user_id=user.id,
                user_name=user.name,
                user_email=user.email,
                success=False,
                error=_error_message(exc),
            )
        return UserRecalculationResult(
            user_id=user.id,
            user_name=user.name,
            user_email=user.email,
            success=True,
            tasks_updated=result.tasks_updated,
            projects_updated=result.projects_updated,
            tasks_failed=result.tasks_failed,
            projects_failed=result.projects_failed,
        )
