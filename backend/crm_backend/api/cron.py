"""Scheduler-triggered endpoints, authorized by the shared cron secret."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from crm_backend.api.deps import CRON_SECRET_DEP, PRIORITY_ACCESSOR_DEP
from crm_backend.core.logging import get_logger
from crm_backend.schemas.priority import BatchRecalculationResponse, UserRecalculationRead
from crm_backend.services.priority.engine import PriorityRecalculationService

if TYPE_CHECKING:
    from crm_backend.services.priority.accessor import PriorityDataAccessor

router = APIRouter(prefix="/cron", tags=["cron"])
logger = get_logger(__name__)


@router.post(
    "/priority-recalc",
    response_model=BatchRecalculationResponse,
    dependencies=[CRON_SECRET_DEP],
)
async def run_priority_recalculation(
    accessor: PriorityDataAccessor = PRIORITY_ACCESSOR_DEP,
) -> BatchRecalculationResponse:
    """Rescore tasks and projects for every user."""
    logger.info("cron.priority_recalc.started")
    summary = await PriorityRecalculationService(accessor).recalculate_all_users()
    return BatchRecalculationResponse(
        total_users=summary.total_users,
        successful_users=summary.successful_users,
        failed_users=summary.failed_users,
        total_tasks_updated=summary.total_tasks_updated,
        total_projects_updated=summary.total_projects_updated,
        total_items_updated=summary.total_items_updated,
        started_at=summary.started_at,
        finished_at=summary.finished_at,
        results=[
            UserRecalculationRead.model_validate(result, from_attributes=True)
            for result in summary.results
        ],
    )
