"""Pure priority scoring for tasks and projects.

Both entity kinds are mapped into one `ScoringInputs` record by thin adapters
(`task_scoring_inputs`, `project_scoring_inputs`) and scored by a single
function, `score_entity`. The score is a sum of four contributions:

- deadline proximity (0-40): overdue items get the maximum, then stepped by
  days remaining; items without a date get a small baseline.
- priority tag (0-20): urgent > high > medium > low.
- status or stage (0-10): how close the work is to needing attention.
- client (0-20): any linked client, plus a fixed bonus for VIP clients.

Completed and cancelled tasks are floored to 0 regardless of the other factors.
The stored integer score is the ranking key; the label is a display bucket.

Nothing here reads the clock: `now` is always passed in, so a given snapshot
and `now` always produce the same result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Literal

from crm_backend.core.time import as_naive_utc
from crm_backend.models.tasks import TERMINAL_TASK_STATUSES

if TYPE_CHECKING:
    from crm_backend.services.priority.accessor import ProjectSnapshot, TaskSnapshot

PriorityLabel = Literal["critical", "high", "medium", "low"]

MIN_SCORE = 0
MAX_SCORE = 100

OVERDUE_POINTS = 40
NO_DATE_POINTS = 5
# (max days remaining, points), checked in order; anything further out is FAR_FUTURE_POINTS.
DEADLINE_STEPS: tuple[tuple[int, int], ...] = (
    (1, 35),
    (3, 30),
    (7, 20),
    (14, 10),
)
FAR_FUTURE_POINTS = 5

PRIORITY_TAG_POINTS = {
    "urgent": 20,
    "high": 14,
    "medium": 8,
    "low": 2,
}

TASK_STATUS_POINTS = {
    "waiting_approval": 10,
    "in_progress": 8,
    "todo": 5,
}
PROJECT_STAGE_POINTS = {
    "review": 10,
    "delivery": 10,
    "testing": 8,
    "development": 6,
    "planning": 4,
    "maintenance": 2,
}

CLIENT_POINTS = 10
VIP_BONUS_POINTS = 10

# (minimum score, label), highest first.
LABEL_THRESHOLDS: tuple[tuple[int, PriorityLabel], ...] = (
    (70, "critical"),
    (40, "high"),
    (20, "medium"),
)
LOWEST_LABEL: PriorityLabel = "low"

REASON_OVERDUE = "Overdue"
REASON_URGENT_DEADLINE = "Urgent deadline"
REASON_NEAR_DEADLINE = "Deadline approaching"
REASON_URGENT_PRIORITY = "Urgent priority"
REASON_VIP_CLIENT = "VIP client"
REASON_AWAITING_APPROVAL = "Awaiting approval"
REASON_ADVANCED_STAGE = "Advanced stage"
REASON_CLOSED = "Closed"
REASON_NORMAL = "Normal priority"


@dataclass(frozen=True)
class ScoringInputs:
    """Kind-agnostic view of the attributes that drive a priority score."""

    due: datetime | date | str | None = None
    priority: str | None = None
    status_points: int = 0
    status_reason: str | None = None
    is_terminal: bool = False
    has_client: bool = False
    client_is_vip: bool = False


@dataclass(frozen=True)
class PriorityBreakdown:
    """Per-factor contributions behind a score, plus display reasons."""

    deadline_points: int = 0
    priority_points: int = 0
    status_points: int = 0
    client_points: int = 0
    reasons: tuple[str, ...] = field(default_factory=tuple)

    @property
    def reason(self) -> str:
        return ", ".join(self.reasons) if self.reasons else REASON_NORMAL


@dataclass(frozen=True)
class PriorityScore:
    """Result of scoring one entity."""

    score: int
    label: PriorityLabel
    breakdown: PriorityBreakdown


def label_for_score(score: float) -> PriorityLabel:
    """Map a numeric score onto its display bucket."""
    for threshold, label in LABEL_THRESHOLDS:
        if score >= threshold:
            return label
    return LOWEST_LABEL


def coerce_due(value: object) -> datetime | None:
    """Return `value` as naive UTC, or `None` when it is missing or unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return as_naive_utc(datetime.fromisoformat(value.strip()))
        except ValueError:
            return None
    return None


def days_until(due: datetime, now: datetime) -> int:
    """Whole days remaining until `due`, rounded up (negative once past)."""
    seconds = (as_naive_utc(due) - as_naive_utc(now)).total_seconds()
    return math.ceil(seconds / 86400)


def deadline_points(due: object, now: datetime) -> tuple[int, str | None]:
    parsed = coerce_due(due)
    if parsed is None:
        return NO_DATE_POINTS, None
    if parsed < as_naive_utc(now):
        return OVERDUE_POINTS, REASON_OVERDUE
    remaining = days_until(parsed, now)
    for max_days, points in DEADLINE_STEPS:
        if remaining <= max_days:
            if max_days <= 1:
                return points, REASON_URGENT_DEADLINE
            if max_days <= 3:
                return points, REASON_NEAR_DEADLINE
            return points, None
    return FAR_FUTURE_POINTS, None


def priority_tag_points(tag: str | None) -> int:
    if not isinstance(tag, str):
        return 0
    return PRIORITY_TAG_POINTS.get(tag.strip().lower(), 0)


def score_entity(inputs: ScoringInputs, now: datetime) -> PriorityScore:
    """Score one entity snapshot at the given instant."""
    if inputs.is_terminal:
        return PriorityScore(
            score=MIN_SCORE,
            label=LOWEST_LABEL,
            breakdown=PriorityBreakdown(reasons=(REASON_CLOSED,)),
        )

    reasons: list[str] = []

    time_points, time_reason = deadline_points(inputs.due, now)
    if time_reason:
        reasons.append(time_reason)

    tag_points = priority_tag_points(inputs.priority)
    if tag_points >= PRIORITY_TAG_POINTS["urgent"]:
        reasons.append(REASON_URGENT_PRIORITY)

    client_points = 0
    if inputs.has_client or inputs.client_is_vip:
        client_points = CLIENT_POINTS
    if inputs.client_is_vip:
        client_points += VIP_BONUS_POINTS
        reasons.append(REASON_VIP_CLIENT)

    status_points = max(0, inputs.status_points)
    if inputs.status_reason:
        reasons.append(inputs.status_reason)

    total = time_points + tag_points + status_points + client_points
    score = max(MIN_SCORE, min(MAX_SCORE, round(total)))
    return PriorityScore(
        score=score,
        label=label_for_score(score),
        breakdown=PriorityBreakdown(
            deadline_points=time_points,
            priority_points=tag_points,
            status_points=status_points,
            client_points=client_points,
            reasons=tuple(reasons),
        ),
    )


def _normalized(value: str | None) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def task_scoring_inputs(task: TaskSnapshot) -> ScoringInputs:
    status = _normalized(task.status)
    return ScoringInputs(
        due=task.due_date,
        priority=task.priority,
        status_points=TASK_STATUS_POINTS.get(status, 0),
        status_reason=REASON_AWAITING_APPROVAL if status == "waiting_approval" else None,
        is_terminal=status in TERMINAL_TASK_STATUSES,
        has_client=task.client_id is not None,
        client_is_vip=task.client_is_vip,
    )


def project_scoring_inputs(project: ProjectSnapshot) -> ScoringInputs:
    # Projects have no terminal floor; stage ordering alone sets their status points.
    stage = _normalized(project.stage)
    return ScoringInputs(
        due=project.deadline,
        priority=project.priority,
        status_points=PROJECT_STAGE_POINTS.get(stage, 0),
        status_reason=REASON_ADVANCED_STAGE if stage in {"review", "delivery"} else None,
        has_client=project.client_id is not None,
        client_is_vip=project.client_is_vip,
    )


def score_task(task: TaskSnapshot, now: datetime) -> PriorityScore:
    return score_entity(task_scoring_inputs(task), now)


def score_project(project: ProjectSnapshot, now: datetime) -> PriorityScore:
    return score_entity(project_scoring_inputs(project), now)
