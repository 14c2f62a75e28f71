# src/overlord/tasks/task_lifecycle.py

from __future__ import annotations

"""
Task lifecycle.

The transition table is static data. transition() validates first, computes
the new time-accounting values, and only then assigns them, so a rejected
request leaves the task exactly as it was.

Time accounting:
- entering IN_PROGRESS stamps 'started'
- leaving IN_PROGRESS adds (now - started) to 'worked' and clears 'started'
- any other move leaves both alone
"""

from collections.abc import Mapping
from datetime import datetime, timedelta
from types import MappingProxyType

from ..core.ports import Clock
from .errors import InvalidPriorityError, InvalidTransitionError
from .task_models import Task, TaskState

PRIORITY_MIN = 0
PRIORITY_MAX = 9


class SystemClock:
    """Aware local wall-clock time."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


SYSTEM_CLOCK: Clock = SystemClock()

ALLOWED_TRANSITIONS: Mapping[TaskState, frozenset[TaskState]] = MappingProxyType(
    {
        TaskState.ASSIGNED: frozenset(
            {TaskState.IN_PROGRESS, TaskState.BLOCKED, TaskState.DEFERRED, TaskState.DELETED}
        ),
        TaskState.IN_PROGRESS: frozenset(
            {TaskState.ASSIGNED, TaskState.BLOCKED, TaskState.COMPLETED, TaskState.DEFERRED}
        ),
        TaskState.BLOCKED: frozenset(
            {TaskState.IN_PROGRESS, TaskState.DEFERRED, TaskState.DELETED}
        ),
        TaskState.DEFERRED: frozenset(
            {TaskState.IN_PROGRESS, TaskState.BLOCKED, TaskState.DELETED}
        ),
        TaskState.COMPLETED: frozenset(),
        TaskState.DELETED: frozenset(),
    }
)


def allowed_transitions(current: TaskState) -> frozenset[TaskState]:
    return ALLOWED_TRANSITIONS.get(current, frozenset())


def can_transition(current: TaskState, new_state: TaskState) -> bool:
    return new_state in allowed_transitions(current)


def is_terminal(state: TaskState) -> bool:
    return not allowed_transitions(state)


def transition(task: Task, new_state: TaskState, *, clock: Clock = SYSTEM_CLOCK) -> None:
    """Move task to new_state or raise InvalidTransitionError without touching it."""
    current = task.state
    if not can_transition(current, new_state):
        raise InvalidTransitionError(current, new_state)

    target = TaskState(new_state)
    started = task.started
    worked = task.worked
    now = clock.now()

    if target is TaskState.IN_PROGRESS:
        started = now
    elif current == TaskState.IN_PROGRESS:
        if started is not None:
            # Naive values are local time, same as task_identity.format_rfc3339.
            if started.tzinfo is None:
                started = started.astimezone()
            if now.tzinfo is None:
                now = now.astimezone()
            # A clock stepping backwards must not shrink 'worked'.
            worked = worked + max(now - started, timedelta(0))
        started = None

    task.started = started
    task.worked = worked
    task.state = target


def parse_priority(raw: str) -> int:
    try:
        priority = int(str(raw).strip())
    except ValueError:
        raise InvalidPriorityError(raw) from None
    if priority < PRIORITY_MIN or priority > PRIORITY_MAX:
        raise InvalidPriorityError(raw)
    return priority
