# src/overlord/tasks/task_identity.py

"""
Derived task attributes.

Both the ID and the record path come from the creation time only, so editing
the description, due date or any other field never renames a task.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta
from pathlib import Path

from ..core.ports import DirectoryResolver
from .task_models import TASK_MODULE, Task

ID_LENGTH = 10
RECORD_SUFFIX = ".task"


def format_rfc3339(ts: datetime) -> str:
    """Second-precision RFC 3339 ("Z" for UTC). Naive values are taken as local time."""
    if ts.tzinfo is None:
        ts = ts.astimezone()
    offset = ts.utcoffset() or timedelta(0)
    base = ts.strftime("%Y-%m-%dT%H:%M:%S")
    if not offset:
        return base + "Z"

    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{base}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def derive_id(created: datetime) -> str:
    digest = hashlib.sha256(format_rfc3339(created).encode("utf-8")).hexdigest()
    return digest[:ID_LENGTH]


def record_filename(created: datetime) -> str:
    return created.strftime("%m%d-%H%M%S") + RECORD_SUFFIX


def derive_path(
    created: datetime,
    resolver: DirectoryResolver,
    module: str = TASK_MODULE,
) -> Path:
    """
    Base directory comes from the resolver (module, year); any error it raises
    goes straight to the caller.
    """
    base = resolver(module, created.strftime("%Y"))
    return Path(base) / record_filename(created)


def update_id(task: Task) -> str:
    task.id = derive_id(task.created)
    return task.id


def update_path(task: Task, resolver: DirectoryResolver) -> Path:
    path = derive_path(task.created, resolver)
    task.path = path
    return path
