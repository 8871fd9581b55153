"""Task creation with best-effort initial priority scoring."""

from __future__ import annotations

from typing import TYPE_CHECKING

from crm_backend.core.logging import get_logger
from crm_backend.core.time import utcnow
from crm_backend.models.tasks import Task
from crm_backend.services.priority.accessor import SqlPriorityDataAccessor
from crm_backend.services.priority.scoring import score_task

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

    from crm_backend.schemas.tasks import TaskCreate
    from crm_backend.services.priority.scoring import PriorityScore

logger = get_logger(__name__)


async def score_task_best_effort(
    session: AsyncSession,
    task_id: UUID,
    *,
    clock: Callable[[], datetime] = utcnow,
) -> PriorityScore | None:
    """Compute and store a task's first score; log and swallow any failure.

    Returns `None` when scoring failed. The task itself is left untouched and
    picks up a score on the next recalculation run.
    """
    try:
        now = clock()
        accessor = SqlPriorityDataAccessor(session)
        snapshot = await accessor.get_task_snapshot(task_id)
        scored = score_task(snapshot, now)
        await accessor.update_task_score(task_id, scored.score, scored.label, now)
    except Exception:
        logger.exception("task.create.priority_score_failed", extra={"task_id": str(task_id)})
        return None
    return scored


async def create_task(
    session: AsyncSession,
    *,
    user_id: UUID,
    payload: TaskCreate,
    clock: Callable[[], datetime] = utcnow,
) -> Task:
    """Persist a new task for `user_id`, then attempt its initial scoring."""
    now = clock()
    task = Task(user_id=user_id, created_at=now, updated_at=now, **payload.model_dump())
    session.add(task)
    await session.commit()
    await session.refresh(task)
    logger.info("task.created", extra={"task_id": str(task.id), "user_id": str(user_id)})

    await score_task_best_effort(session, task.id, clock=clock)
    await session.refresh(task)
    return task
