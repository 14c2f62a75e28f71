# src/overlord/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import IntEnum
from pathlib import Path

from .errors import InvalidStateError

TASK_MODULE = "task"


class TaskState(IntEnum):
    """
    Task lifecycle state.

    Notes:
    - numeric values are what the record body stores, keep them stable
    - COMPLETED and DELETED are terminal (see task_lifecycle.ALLOWED_TRANSITIONS)
    """

    IN_PROGRESS = 0
    ASSIGNED = 1
    BLOCKED = 2
    DEFERRED = 3
    COMPLETED = 4
    DELETED = 5

    def __str__(self) -> str:
        return _LABELS[self]

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_label(cls, raw: str) -> TaskState:
        """Accept a rendered label ("in-progress", "obsolete") or a member name."""
        key = (raw or "").strip().lower()
        for state, label in _LABELS.items():
            if key in (label, state.name.lower(), state.name.lower().replace("_", "-")):
                return state
        raise InvalidStateError(raw)


_LABELS: dict[TaskState, str] = {
    TaskState.ASSIGNED: "assigned",
    TaskState.IN_PROGRESS: "in-progress",
    TaskState.BLOCKED: "blocked",
    TaskState.DEFERRED: "deferred",
    TaskState.COMPLETED: "complete",
    TaskState.DELETED: "obsolete",
}


def state_label(value: int) -> str:
    """Render a raw state value; unknown numbers show up as State(n) for debugging."""
    try:
        return _LABELS[TaskState(value)]
    except ValueError:
        return f"State({int(value)})"


@dataclass(slots=True)
class Task:
    created: datetime
    state: TaskState = TaskState.IN_PROGRESS
    due: datetime | None = None
    priority: int = 5
    description: str = ""
    notes: str = ""

    # Time accounting, owned by task_lifecycle.transition().
    started: datetime | None = None
    worked: timedelta = field(default_factory=timedelta)

    # Derived, never part of the record body.
    id: str = ""
    path: Path | None = None
