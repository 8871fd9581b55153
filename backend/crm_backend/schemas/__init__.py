"""Public schema exports shared across API route modules."""

from crm_backend.schemas.health import HealthStatusResponse
from crm_backend.schemas.priority import (
    BatchRecalculationResponse,
    EntityFailureRead,
    PriorityItemRead,
    RecalculationResponse,
    TodayPriorityItemsResponse,
    TopPriorityItemsResponse,
    UserRecalculationRead,
)
from crm_backend.schemas.tasks import TaskCreate

__all__ = [
    "BatchRecalculationResponse",
    "EntityFailureRead",
    "HealthStatusResponse",
    "PriorityItemRead",
    "RecalculationResponse",
    "TaskCreate",
    "TodayPriorityItemsResponse",
    "TopPriorityItemsResponse",
    "UserRecalculationRead",
]
