# src/overlord/tasks/task_store.py

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from ..config import ModuleDirResolver
from ..core.ports import DirectoryResolver
from .errors import AmbiguousTaskIdError, TaskNotFoundError, TaskRecordError
from .task_identity import RECORD_SUFFIX, format_rfc3339, update_id, update_path
from .task_models import TASK_MODULE, Task, TaskState

logger = logging.getLogger(__name__)

# Records written by older tools store unset timestamps as the zero time.
_ZERO_TIME_PREFIX = "0001-01-01T00:00:00"
_NS_PER_US = 1000


class TaskStore:
    """
    JSON task store: one file per task at data_dir/task/<year>/<MMDD-HHMMSS>.task

    The record body holds the mutable fields only; 'id' and 'path' are
    derived again on every load.
    """

    def __init__(
        self,
        data_dir: str | Path,
        resolver: DirectoryResolver | None = None,
        module: str = TASK_MODULE,
    ) -> None:
        self._data_dir = Path(data_dir).expanduser()
        self._module = module
        self._resolver: DirectoryResolver = resolver or ModuleDirResolver(self._data_dir)
        logger.info("TaskStore ready root=%s", self.module_root)

    @property
    def module_root(self) -> Path:
        return self._data_dir / self._module

    @property
    def resolver(self) -> DirectoryResolver:
        return self._resolver

    # ---- encoding ----

    @staticmethod
    def _ts_to_str(ts: datetime | None) -> str | None:
        if ts is None:
            return None
        text = format_rfc3339(ts)
        if ts.microsecond:
            # keep sub-second precision for 'started'
            text = f"{text[:19]}.{ts.microsecond:06d}{text[19:]}"
        return text

    @staticmethod
    def _str_to_ts(raw: Any, key: str) -> datetime | None:
        if raw is None or raw == "":
            return None
        if not isinstance(raw, str):
            raise TaskRecordError(f"{key}: expected timestamp string, got {raw!r}")
        if raw.startswith(_ZERO_TIME_PREFIX):
            return None
        text = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise TaskRecordError(f"{key}: bad timestamp {raw!r}") from e

    @classmethod
    def encode(cls, task: Task) -> dict[str, Any]:
        body: dict[str, Any] = {
            "created": cls._ts_to_str(task.created),
            "state": int(task.state),
            "due": cls._ts_to_str(task.due),
            "priority": int(task.priority),
            "description": task.description,
        }
        if task.notes:
            body["notes"] = task.notes
        if task.started is not None:
            body["started"] = cls._ts_to_str(task.started)
        worked_ns = (task.worked // timedelta(microseconds=1)) * _NS_PER_US
        if worked_ns:
            body["worked"] = worked_ns
        return body

    @classmethod
    def decode(cls, body: Any) -> Task:
        if not isinstance(body, dict):
            raise TaskRecordError("record body must be a JSON object")

        created = cls._str_to_ts(body.get("created"), "created")
        if created is None:
            raise TaskRecordError("record has no creation time")

        try:
            state = TaskState(int(body.get("state", TaskState.IN_PROGRESS)))
            priority = int(body.get("priority", 0))
            worked_ns = int(body.get("worked", 0) or 0)
        except (TypeError, ValueError) as e:
            raise TaskRecordError(f"bad record field: {e}") from e

        task = Task(
            created=created,
            state=state,
            due=cls._str_to_ts(body.get("due"), "due"),
            priority=priority,
            description=str(body.get("description") or ""),
            notes=str(body.get("notes") or ""),
            started=cls._str_to_ts(body.get("started"), "started"),
            worked=timedelta(microseconds=max(0, worked_ns) // _NS_PER_US),
        )
        update_id(task)
        return task

    # ---- public API ----

    def save(self, task: Task) -> Path:
        if task.path is None:
            update_path(task, self._resolver)
        if not task.id:
            update_id(task)

        path = Path(task.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(self.encode(task), ensure_ascii=False, indent=2) + "\n", "utf-8")
        os.replace(tmp, path)

        logger.debug("Task saved id=%s state=%s path=%s", task.id, task.state, path)
        return path

    def load(self, path: str | Path) -> Task:
        path = Path(path)
        try:
            body = json.loads(path.read_text("utf-8"))
        except json.JSONDecodeError as e:
            raise TaskRecordError(f"{path}: {e}") from e

        try:
            task = self.decode(body)
        except TaskRecordError as e:
            raise TaskRecordError(f"{path}: {e}") from e
        task.path = path
        return task

    def iter_tasks(self, year: str | None = None) -> Iterator[Task]:
        """Yield every stored task (optionally one year only), oldest first."""
        root = self.module_root
        if year is not None:
            root = root / year
        if not root.is_dir():
            return iter(())

        paths = sorted(root.rglob(f"*{RECORD_SUFFIX}"))
        tasks = [self.load(p) for p in paths]
        tasks.sort(key=lambda t: t.created)
        return iter(tasks)

    def find(self, id_prefix: str) -> Task:
        prefix = (id_prefix or "").strip().lower()
        if not prefix:
            raise TaskNotFoundError("empty task ID")

        matches = [t for t in self.iter_tasks() if t.id.startswith(prefix)]
        if not matches:
            raise TaskNotFoundError(f"No task with ID '{id_prefix}'")
        if len(matches) > 1:
            raise AmbiguousTaskIdError(id_prefix, [t.id for t in matches])
        return matches[0]

    def delete(self, task: Task) -> None:
        if task.path is None:
            update_path(task, self._resolver)
        Path(task.path).unlink()
        logger.info("Task deleted id=%s path=%s", task.id, task.path)
