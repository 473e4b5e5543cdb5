"""Task/review state machine.

Every status change of a task goes through :func:`apply_transition`, which
looks the ``(current status, event)`` pair up in a single table. Pairs that
are not in the table are rejected with :class:`InvalidStateTransitionError`
before anything on the task is touched.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from ..errors import InvalidStateTransitionError
from ..models import ReviewDecision, Task, TaskStatus, utcnow


class TaskEvent(str, Enum):
    """Things that can happen to a task."""

    START = "start"
    SUBMIT = "submit"
    OPEN_REVIEW = "open_review"
    APPROVE = "approve"
    REQUEST_REWORK = "request_rework"
    REJECT = "reject"
    RESUME = "resume"


_REVIEWABLE = (TaskStatus.SUBMITTED, TaskStatus.UNDER_REVIEW)

TRANSITIONS: dict[tuple[TaskStatus, TaskEvent], TaskStatus] = {
    (TaskStatus.NOT_STARTED, TaskEvent.START): TaskStatus.IN_PROGRESS,
    (TaskStatus.NEEDS_REWORK, TaskEvent.RESUME): TaskStatus.IN_PROGRESS,
    (TaskStatus.SUBMITTED, TaskEvent.OPEN_REVIEW): TaskStatus.UNDER_REVIEW,
    **{
        (status, TaskEvent.SUBMIT): TaskStatus.SUBMITTED
        for status in TaskStatus
        if status is not TaskStatus.COMPLETED
    },
    **{(status, TaskEvent.APPROVE): TaskStatus.COMPLETED for status in _REVIEWABLE},
    **{(status, TaskEvent.REQUEST_REWORK): TaskStatus.NEEDS_REWORK for status in _REVIEWABLE},
    **{(status, TaskEvent.REJECT): TaskStatus.IN_PROGRESS for status in _REVIEWABLE},
}

REVIEW_EVENTS: dict[ReviewDecision, TaskEvent] = {
    ReviewDecision.APPROVED: TaskEvent.APPROVE,
    ReviewDecision.NEEDS_REWORK: TaskEvent.REQUEST_REWORK,
    ReviewDecision.REJECTED: TaskEvent.REJECT,
}

# Status changes a user may request directly through the status endpoint.
MANUAL_EVENTS: dict[tuple[TaskStatus, TaskStatus], TaskEvent] = {
    (TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS): TaskEvent.START,
    (TaskStatus.NEEDS_REWORK, TaskStatus.IN_PROGRESS): TaskEvent.RESUME,
    (TaskStatus.SUBMITTED, TaskStatus.UNDER_REVIEW): TaskEvent.OPEN_REVIEW,
}

# Events performed on behalf of the reviewer rather than the assignee.
REVIEWER_EVENTS = frozenset({TaskEvent.OPEN_REVIEW, *REVIEW_EVENTS.values()})


def can_apply(status: TaskStatus, event: TaskEvent) -> bool:
    return (status, event) in TRANSITIONS


def next_status(status: TaskStatus, event: TaskEvent) -> TaskStatus:
    """Return the state reached from ``status`` through ``event``."""

    try:
        return TRANSITIONS[(status, event)]
    except KeyError:
        raise InvalidStateTransitionError(status.value, event=event.value) from None


def event_for_manual_change(current: TaskStatus, target: TaskStatus) -> TaskEvent | None:
    """Map a requested status to its event; ``None`` means nothing to do."""

    if current is target:
        return None
    event = MANUAL_EVENTS.get((current, target))
    if event is None:
        raise InvalidStateTransitionError(current.value, target.value)
    return event


def apply_transition(task: Task, event: TaskEvent, *, at: datetime | None = None) -> TaskStatus:
    """Move ``task`` through ``event`` and return the previous status."""

    previous = task.status
    task.status = next_status(previous, event)
    if task.status is TaskStatus.COMPLETED:
        task.completed_at = at or utcnow()
    return previous


__all__ = [
    "MANUAL_EVENTS",
    "REVIEWER_EVENTS",
    "REVIEW_EVENTS",
    "TRANSITIONS",
    "TaskEvent",
    "apply_transition",
    "can_apply",
    "event_for_manual_change",
    "next_status",
]
