# ruff: noqa: INP001
"""Tests for the pure priority scoring function and its entity adapters."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

import pytest

from crm_backend.services.priority import scoring
from crm_backend.services.priority.accessor import ProjectSnapshot, TaskSnapshot
from crm_backend.services.priority.scoring import (
    ScoringInputs,
    label_for_score,
    score_entity,
    score_project,
    score_task,
)

NOW = datetime(2026, 3, 10, 12, 0, 0)


def _task(**overrides: object) -> TaskSnapshot:
    values: dict[str, object] = {
        "id": uuid4(),
        "user_id": uuid4(),
        "title": "Prepare quote",
        "status": "todo",
        "priority": "medium",
        "due_date": None,
        "client_id": None,
        "client_is_vip": False,
        "created_at": NOW - timedelta(days=3),
    }
    values.update(overrides)
    return TaskSnapshot(**values)  # type: ignore[arg-type]


def _project(**overrides: object) -> ProjectSnapshot:
    values: dict[str, object] = {
        "id": uuid4(),
        "user_id": uuid4(),
        "name": "Website redesign",
        "stage": "development",
        "priority": "medium",
        "deadline": None,
        "created_at": NOW - timedelta(days=30),
    }
    values.update(overrides)
    return ProjectSnapshot(**values)  # type: ignore[arg-type]


def test_scoring_is_idempotent_for_same_snapshot_and_now() -> None:
    task = _task(due_date=NOW + timedelta(days=2), priority="high", client_id=uuid4())

    first = score_task(task, NOW)
    second = score_task(task, NOW)

    assert (first.score, first.label) == (second.score, second.label)
    assert first == second


@pytest.mark.parametrize("far_days", [8, 15, 90, 365])
def test_overdue_task_scores_at_least_as_high_as_far_future_task(far_days: int) -> None:
    overdue = _task(due_date=NOW - timedelta(days=1))
    future = replace(overdue, due_date=NOW + timedelta(days=far_days))

    assert score_task(overdue, NOW).score >= score_task(future, NOW).score


def test_deadline_urgency_is_monotonic_as_date_approaches() -> None:
    offsets = [400, 30, 14, 10, 7, 5, 3, 2, 1, 0.25, -0.25, -10]
    scores = [
        score_task(_task(due_date=NOW + timedelta(days=offset)), NOW).score for offset in offsets
    ]

    assert scores == sorted(scores)
    assert scores[-1] > scores[0]


def test_deadline_points_steps() -> None:
    assert scoring.deadline_points(None, NOW) == (scoring.NO_DATE_POINTS, None)
    assert scoring.deadline_points(NOW - timedelta(minutes=1), NOW) == (
        scoring.OVERDUE_POINTS,
        scoring.REASON_OVERDUE,
    )
    assert scoring.deadline_points(NOW + timedelta(hours=5), NOW) == (
        35,
        scoring.REASON_URGENT_DEADLINE,
    )
    assert scoring.deadline_points(NOW + timedelta(days=3), NOW) == (
        30,
        scoring.REASON_NEAR_DEADLINE,
    )
    assert scoring.deadline_points(NOW + timedelta(days=6), NOW) == (20, None)
    assert scoring.deadline_points(NOW + timedelta(days=12), NOW) == (10, None)
    assert scoring.deadline_points(NOW + timedelta(days=40), NOW) == (
        scoring.FAR_FUTURE_POINTS,
        None,
    )


@pytest.mark.parametrize("status", ["completed", "cancelled", "COMPLETED"])
def test_terminal_task_is_floored_regardless_of_other_factors(status: str) -> None:
    closed = _task(
        status=status,
        priority="urgent",
        due_date=NOW - timedelta(days=5),
        client_id=uuid4(),
        client_is_vip=True,
    )
    weakest_open = _task(status="todo", priority="low", due_date=None)

    closed_score = score_task(closed, NOW)

    assert closed_score.label == "low"
    assert closed_score.score == scoring.MIN_SCORE
    assert closed_score.score <= score_task(weakest_open, NOW).score
    assert closed_score.breakdown.reason == scoring.REASON_CLOSED


def test_vip_client_scores_strictly_higher() -> None:
    regular = _task(client_id=uuid4(), client_is_vip=False, due_date=NOW + timedelta(days=4))
    vip = replace(regular, client_is_vip=True)
    no_client = replace(regular, client_id=None)

    assert score_task(vip, NOW).score > score_task(regular, NOW).score
    assert score_task(vip, NOW).score > score_task(no_client, NOW).score
    assert scoring.REASON_VIP_CLIENT in score_task(vip, NOW).breakdown.reasons


def test_priority_tag_ordering() -> None:
    scores = {
        tag: score_task(_task(priority=tag), NOW).score
        for tag in ("low", "medium", "high", "urgent")
    }

    assert scores["urgent"] > scores["high"] > scores["medium"] > scores["low"]


def test_unknown_fields_degrade_without_raising() -> None:
    odd = _task(status="archived", priority="whenever", due_date="not-a-date")  # type: ignore[arg-type]

    result = score_task(odd, NOW)

    assert result.breakdown.priority_points == 0
    assert result.breakdown.status_points == 0
    assert result.breakdown.deadline_points == scoring.NO_DATE_POINTS
    assert result.label == "low"


def test_due_values_in_other_shapes_are_accepted() -> None:
    aware = datetime(2026, 3, 9, 12, 0, tzinfo=UTC)
    as_string = "2026-03-09T12:00:00"
    as_date = date(2026, 3, 9)

    for value in (aware, as_string, as_date):
        points, reason = scoring.deadline_points(value, NOW)
        assert points == scoring.OVERDUE_POINTS
        assert reason == scoring.REASON_OVERDUE


def test_full_breakdown_for_waiting_approval_vip_task() -> None:
    task = _task(
        status="waiting_approval",
        priority="urgent",
        due_date=NOW - timedelta(hours=2),
        client_id=uuid4(),
        client_is_vip=True,
    )

    result = score_task(task, NOW)

    assert result.breakdown.deadline_points == 40
    assert result.breakdown.priority_points == 20
    assert result.breakdown.status_points == 10
    assert result.breakdown.client_points == 20
    assert result.score == 90
    assert result.label == "critical"
    assert result.breakdown.reason == (
        "Overdue, Urgent priority, VIP client, Awaiting approval"
    )


def test_project_stage_ordering_and_reason() -> None:
    stages = ["maintenance", "planning", "development", "testing", "review"]
    scores = [score_project(_project(stage=stage), NOW).score for stage in stages]

    assert scores == sorted(scores)
    assert len(set(scores)) == len(scores)
    assert scoring.REASON_ADVANCED_STAGE in score_project(
        _project(stage="delivery"),
        NOW,
    ).breakdown.reasons


def test_project_without_signals_gets_normal_reason() -> None:
    result = score_project(_project(stage="planning", priority="low"), NOW)

    assert result.breakdown.reasons == ()
    assert result.breakdown.reason == scoring.REASON_NORMAL


@pytest.mark.parametrize(
    ("score", "label"),
    [(0, "low"), (19, "low"), (20, "medium"), (39, "medium"), (40, "high"), (70, "critical")],
)
def test_label_thresholds(score: int, label: str) -> None:
    assert label_for_score(score) == label


def test_score_entity_clamps_to_range() -> None:
    inputs = ScoringInputs(
        due=NOW - timedelta(days=1),
        priority="urgent",
        status_points=500,
        client_is_vip=True,
    )

    assert score_entity(inputs, NOW).score == scoring.MAX_SCORE
