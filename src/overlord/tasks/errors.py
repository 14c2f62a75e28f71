# src/overlord/tasks/errors.py

from __future__ import annotations

from typing import Any


class TaskError(Exception):
    """Base class for every error raised by the task subsystem."""


class InvalidTransitionError(TaskError, ValueError):
    """Requested state change is not in the transition table."""

    def __init__(self, current: Any, requested: Any) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition task from {current} to {requested}")


class InvalidPriorityError(TaskError, ValueError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Priority must be between 0 and 9, got '{value}'")


class InvalidStateError(TaskError, ValueError):
    def __init__(self, label: object) -> None:
        self.label = label
        super().__init__(f"Unknown task state '{label}'")


class PathResolutionError(TaskError, OSError):
    """The module directory for a record could not be produced or created."""


class TaskRecordError(TaskError):
    """A stored record body could not be decoded."""


class TaskNotFoundError(TaskError, LookupError):
    pass


class AmbiguousTaskIdError(TaskError, LookupError):
    def __init__(self, prefix: str, matches: list[str]) -> None:
        self.prefix = prefix
        self.matches = matches
        super().__init__(f"Task ID '{prefix}' is ambiguous: {', '.join(sorted(matches))}")


class DuplicateTaskIdError(TaskError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task ID {task_id} is already in use")
