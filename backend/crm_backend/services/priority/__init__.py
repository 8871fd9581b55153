"""Priority scoring, recalculation, and ranking for tasks and projects."""

from crm_backend.services.priority.accessor import (
    PriorityDataAccessor,
    ProjectSnapshot,
    SqlPriorityDataAccessor,
    TaskSnapshot,
    UserRef,
)
from crm_backend.services.priority.engine import (
    BatchRecalculationSummary,
    EntityFailure,
    PriorityRecalculationService,
    RecalculationResult,
    UserRecalculationResult,
)
from crm_backend.services.priority.errors import (
    EntityNotFoundError,
    InvalidLimitError,
    PriorityError,
    UnknownUserError,
)
from crm_backend.services.priority.ranking import PriorityItem, PriorityRankingService
from crm_backend.services.priority.scoring import PriorityScore, score_project, score_task

__all__ = [
    "BatchRecalculationSummary",
    "EntityFailure",
    "EntityNotFoundError",
    "InvalidLimitError",
    "PriorityDataAccessor",
    "PriorityError",
    "PriorityItem",
    "PriorityRankingService",
    "PriorityRecalculationService",
    "PriorityScore",
    "ProjectSnapshot",
    "RecalculationResult",
    "SqlPriorityDataAccessor",
    "TaskSnapshot",
    "UnknownUserError",
    "UserRecalculationResult",
    "UserRef",
    "score_project",
    "score_task",
]
