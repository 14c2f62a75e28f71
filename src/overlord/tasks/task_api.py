# src/overlord/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from ..core.ports import Clock, DirectoryResolver
from .errors import DuplicateTaskIdError, InvalidTransitionError
from .task_identity import update_id, update_path
from .task_lifecycle import SYSTEM_CLOCK, is_terminal, parse_priority, transition
from .task_models import Task, TaskState

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 5


def new_task(
    description: str,
    *,
    priority: int | str = DEFAULT_PRIORITY,
    due: datetime | None = None,
    notes: str = "",
    state: TaskState = TaskState.IN_PROGRESS,
    clock: Clock = SYSTEM_CLOCK,
    resolver: DirectoryResolver | None = None,
) -> Task:
    """
    Convenience helper: build a fresh task with its ID (and path, when a
    resolver is given) already derived.

    A task created IN_PROGRESS is stamped as started at its creation time.
    """
    if is_terminal(state):
        raise InvalidTransitionError("new", state)

    created = clock.now().replace(microsecond=0)
    task = Task(
        created=created,
        state=state,
        due=due,
        priority=parse_priority(str(priority)),
        description=description.strip(),
        notes=notes,
        started=created if state is TaskState.IN_PROGRESS else None,
    )
    update_id(task)
    if resolver is not None:
        update_path(task, resolver)

    logger.debug("Task created id=%s state=%s", task.id, task.state)
    return task


def set_priority(task: Task, raw: str) -> int:
    task.priority = parse_priority(raw)
    return task.priority


def change_state(task: Task, label: str, *, clock: Clock = SYSTEM_CLOCK) -> TaskState:
    new_state = TaskState.from_label(label)
    transition(task, new_state, clock=clock)
    return new_state


def ensure_unique_id(task: Task, existing: Iterable[Task]) -> None:
    """Reject a task whose truncated ID already belongs to a different record."""
    for other in existing:
        if other is task or other.id != task.id:
            continue
        if other.created != task.created:
            raise DuplicateTaskIdError(task.id)
