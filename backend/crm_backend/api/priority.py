"""Priority endpoints: manual recalculation and ranked reads for the caller."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Query, status

from crm_backend.api.deps import PRIORITY_ACCESSOR_DEP, USER_DEP
from crm_backend.core.config import settings
from crm_backend.core.logging import get_logger
from crm_backend.schemas.priority import (
    EntityFailureRead,
    PriorityItemRead,
    RecalculationResponse,
    TodayPriorityItemsResponse,
    TopPriorityItemsResponse,
)
from crm_backend.services.priority.engine import PriorityRecalculationService
from crm_backend.services.priority.errors import InvalidLimitError, UnknownUserError
from crm_backend.services.priority.ranking import PriorityRankingService

if TYPE_CHECKING:
    from crm_backend.models.users import User
    from crm_backend.services.priority.accessor import PriorityDataAccessor
    from crm_backend.services.priority.ranking import PriorityItem

router = APIRouter(prefix="/priority", tags=["priority"])
logger = get_logger(__name__)


def _item_read(item: PriorityItem) -> PriorityItemRead:
    return PriorityItemRead.model_validate(item, from_attributes=True)


@router.post("/recalculate", response_model=RecalculationResponse)
async def recalculate_priorities(
    user: User = USER_DEP,
    accessor: PriorityDataAccessor = PRIORITY_ACCESSOR_DEP,
) -> RecalculationResponse:
    """Rescore every task and project of the calling user."""
    logger.info("priority.recalc.manual_started", extra={"user_id": str(user.id)})
    service = PriorityRecalculationService(accessor)
    try:
        result = await service.recalculate_all_scores(user.id)
    except UnknownUserError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return RecalculationResponse(
        tasks_updated=result.tasks_updated,
        projects_updated=result.projects_updated,
        total_updated=result.total_updated,
        tasks_failed=result.tasks_failed,
        projects_failed=result.projects_failed,
        failures=[
            EntityFailureRead.model_validate(failure, from_attributes=True)
            for failure in result.failures
        ],
    )


@router.get("/top", response_model=TopPriorityItemsResponse)
async def list_top_priority_items(
    limit: int | None = Query(default=None, description="Number of items, 1-50."),
    user: User = USER_DEP,
    accessor: PriorityDataAccessor = PRIORITY_ACCESSOR_DEP,
) -> TopPriorityItemsResponse:
    """List the highest-priority open tasks and projects by stored score."""
    effective_limit = settings.priority_top_items_default_limit if limit is None else limit
    service = PriorityRankingService(accessor)
    try:
        items = await service.get_top_priority_items(user.id, effective_limit)
    except InvalidLimitError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except UnknownUserError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return TopPriorityItemsResponse(
        items=[_item_read(item) for item in items],
        count=len(items),
        limit=effective_limit,
    )


@router.get("/today", response_model=TodayPriorityItemsResponse)
async def list_today_priority_items(
    user: User = USER_DEP,
    accessor: PriorityDataAccessor = PRIORITY_ACCESSOR_DEP,
) -> TodayPriorityItemsResponse:
    """List top items that are high priority or due today or earlier."""
    service = PriorityRankingService(accessor)
    try:
        items = await service.get_recommended_items_for_today(user.id)
    except UnknownUserError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return TodayPriorityItemsResponse(
        items=[_item_read(item) for item in items],
        count=len(items),
    )
