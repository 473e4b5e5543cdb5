from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from becs_portal.errors import InvalidStateTransitionError
from becs_portal.models import ReviewDecision, Task, TaskStatus
from becs_portal.services.workflow import (
    REVIEW_EVENTS,
    TaskEvent,
    apply_transition,
    can_apply,
    event_for_manual_change,
    next_status,
)


def _task(status: TaskStatus, **values) -> Task:
    return Task(title="Draft Report", project_id=1, status=status, **values)


@pytest.mark.parametrize(
    ("status", "event", "expected"),
    [
        (TaskStatus.NOT_STARTED, TaskEvent.START, TaskStatus.IN_PROGRESS),
        (TaskStatus.NOT_STARTED, TaskEvent.SUBMIT, TaskStatus.SUBMITTED),
        (TaskStatus.NEEDS_REWORK, TaskEvent.SUBMIT, TaskStatus.SUBMITTED),
        (TaskStatus.SUBMITTED, TaskEvent.SUBMIT, TaskStatus.SUBMITTED),
        (TaskStatus.SUBMITTED, TaskEvent.OPEN_REVIEW, TaskStatus.UNDER_REVIEW),
        (TaskStatus.UNDER_REVIEW, TaskEvent.APPROVE, TaskStatus.COMPLETED),
        (TaskStatus.SUBMITTED, TaskEvent.REQUEST_REWORK, TaskStatus.NEEDS_REWORK),
        (TaskStatus.SUBMITTED, TaskEvent.REJECT, TaskStatus.IN_PROGRESS),
        (TaskStatus.NEEDS_REWORK, TaskEvent.RESUME, TaskStatus.IN_PROGRESS),
    ],
)
def test_allowed_transitions(status: TaskStatus, event: TaskEvent, expected: TaskStatus) -> None:
    assert can_apply(status, event)
    assert next_status(status, event) is expected


@pytest.mark.parametrize(
    ("status", "event"),
    [
        (TaskStatus.COMPLETED, TaskEvent.SUBMIT),
        (TaskStatus.NOT_STARTED, TaskEvent.APPROVE),
        (TaskStatus.IN_PROGRESS, TaskEvent.REQUEST_REWORK),
        (TaskStatus.COMPLETED, TaskEvent.REJECT),
        (TaskStatus.IN_PROGRESS, TaskEvent.OPEN_REVIEW),
    ],
)
def test_disallowed_transitions_raise(status: TaskStatus, event: TaskEvent) -> None:
    assert not can_apply(status, event)
    with pytest.raises(InvalidStateTransitionError) as exc_info:
        next_status(status, event)
    assert exc_info.value.status_code == 409
    assert exc_info.value.details["current_status"] == status.value


def test_every_review_decision_maps_to_an_event() -> None:
    assert set(REVIEW_EVENTS) == set(ReviewDecision)


def test_apply_transition_stamps_completion_time() -> None:
    task = _task(TaskStatus.SUBMITTED)
    moment = datetime(2024, 3, 29, 12, 0, tzinfo=timezone.utc)

    previous = apply_transition(task, TaskEvent.APPROVE, at=moment)

    assert previous is TaskStatus.SUBMITTED
    assert task.status is TaskStatus.COMPLETED
    assert task.completed_at == moment


def test_rejected_transition_leaves_task_untouched() -> None:
    task = _task(TaskStatus.COMPLETED)

    with pytest.raises(InvalidStateTransitionError):
        apply_transition(task, TaskEvent.SUBMIT)

    assert task.status is TaskStatus.COMPLETED


def test_manual_change_mapping() -> None:
    assert event_for_manual_change(TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS) is TaskEvent.START
    assert event_for_manual_change(TaskStatus.NEEDS_REWORK, TaskStatus.IN_PROGRESS) is TaskEvent.RESUME
    assert event_for_manual_change(TaskStatus.SUBMITTED, TaskStatus.UNDER_REVIEW) is TaskEvent.OPEN_REVIEW
    assert event_for_manual_change(TaskStatus.IN_PROGRESS, TaskStatus.IN_PROGRESS) is None
    with pytest.raises(InvalidStateTransitionError):
        event_for_manual_change(TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED)


def test_rework_aliases_normalise() -> None:
    assert TaskStatus("rework_required") is TaskStatus.NEEDS_REWORK
    assert TaskStatus("IN_PROGRESS") is TaskStatus.IN_PROGRESS
    assert ReviewDecision("Rework_Required") is ReviewDecision.NEEDS_REWORK


def test_overdue_is_derived_not_stored() -> None:
    task = _task(TaskStatus.IN_PROGRESS, target_completion_date=date(2024, 3, 1))

    assert task.is_overdue(date(2024, 3, 2))
    assert task.effective_status(date(2024, 3, 2)) == "overdue"
    assert not task.is_overdue(date(2024, 3, 1))
    assert task.status is TaskStatus.IN_PROGRESS

    task.status = TaskStatus.COMPLETED
    assert task.effective_status(date(2024, 3, 2)) == "completed"
