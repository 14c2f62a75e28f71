# tests/test_task_store.py

from __future__ import annotations

import hashlib
import json
from collections import Counter
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from overlord.tasks.errors import AmbiguousTaskIdError, TaskNotFoundError, TaskRecordError
from overlord.tasks.task_api import new_task
from overlord.tasks.task_identity import derive_id
from overlord.tasks.task_lifecycle import transition
from overlord.tasks.task_models import TaskState
from overlord.tasks.task_store import TaskStore

from .fakes import FakeClock


def test_save_writes_body_without_derived_fields(store: TaskStore, clock: FakeClock, data_dir: Path) -> None:
    task = new_task("write report", priority="3", notes="draft first", clock=clock)
    clock.advance(minutes=90)
    transition(task, TaskState.BLOCKED, clock=clock)

    path = store.save(task)

    assert path == data_dir / "task" / "2024" / "0305-070809.task"
    body = json.loads(path.read_text("utf-8"))
    assert body == {
        "created": "2024-03-05T07:08:09Z",
        "state": int(TaskState.BLOCKED),
        "due": None,
        "priority": 3,
        "description": "write report",
        "notes": "draft first",
        "worked": 90 * 60 * 1_000_000_000,
    }
    assert "id" not in body
    assert "path" not in body


def test_load_restores_fields_and_recomputes_id(store: TaskStore, clock: FakeClock) -> None:
    due = datetime(2024, 4, 1, 17, 0, tzinfo=UTC)
    task = new_task("ship it", priority=1, due=due, clock=clock)
    clock.advance(seconds=1.5)
    task.started = clock.current
    path = store.save(task)

    loaded = store.load(path)

    assert loaded.id == task.id
    assert loaded.path == path
    assert loaded.created == task.created
    assert loaded.state is TaskState.IN_PROGRESS
    assert loaded.due == due
    assert loaded.priority == 1
    assert loaded.started == task.started
    assert loaded.worked == timedelta(0)


def test_load_accepts_zero_time_and_nanosecond_records(store: TaskStore, tmp_path: Path) -> None:
    path = tmp_path / "0102-030405.task"
    path.write_text(
        json.dumps(
            {
                "created": "2023-01-02T03:04:05+01:00",
                "state": 1,
                "due": "0001-01-01T00:00:00Z",
                "priority": 2,
                "description": "legacy",
                "started": "0001-01-01T00:00:00Z",
                "worked": 1_500_000_001,
            }
        ),
        "utf-8",
    )

    task = store.load(path)

    assert task.state is TaskState.ASSIGNED
    assert task.due is None
    assert task.started is None
    assert task.worked == timedelta(seconds=1, microseconds=500000)
    assert task.created.utcoffset() == timedelta(hours=1)


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[]",
        json.dumps({"state": 1}),
        json.dumps({"created": "yesterday"}),
        json.dumps({"created": "2023-01-02T03:04:05Z", "state": 17}),
    ],
)
def test_load_rejects_malformed_records(store: TaskStore, tmp_path: Path, content: str) -> None:
    path = tmp_path / "bad.task"
    path.write_text(content, "utf-8")

    with pytest.raises(TaskRecordError):
        store.load(path)


def test_iter_and_find(store: TaskStore, clock: FakeClock) -> None:
    first = new_task("first", clock=clock)
    clock.advance(days=400)
    second = new_task("second", state=TaskState.ASSIGNED, clock=clock)
    store.save(second)
    store.save(first)

    assert [t.description for t in store.iter_tasks()] == ["first", "second"]
    assert [t.description for t in store.iter_tasks("2025")] == ["second"]
    assert list(store.iter_tasks("1999")) == []

    assert store.find(first.id).description == "first"
    assert store.find(second.id[:6].upper()).description == "second"

    with pytest.raises(TaskNotFoundError):
        store.find("zzzz")
    with pytest.raises(TaskNotFoundError):
        store.find("  ")


def test_find_rejects_ambiguous_prefix(store: TaskStore, clock: FakeClock) -> None:
    # 17 IDs over 16 hex digits: at least two share a first character.
    tasks = []
    for _ in range(17):
        tasks.append(new_task("t", clock=clock))
        store.save(tasks[-1])
        clock.advance(seconds=1)

    counts = Counter(t.id[0] for t in tasks)
    prefix = next(c for c, n in counts.items() if n > 1)

    with pytest.raises(AmbiguousTaskIdError) as exc_info:
        store.find(prefix)
    assert len(exc_info.value.matches) == counts[prefix]


def test_delete_removes_record(store: TaskStore, clock: FakeClock) -> None:
    task = new_task("temp", clock=clock)
    path = store.save(task)
    transition(task, TaskState.COMPLETED, clock=clock)
    store.save(task)

    store.delete(task)

    assert not path.exists()
    assert list(store.iter_tasks()) == []


def test_load_sub_second_created_keeps_second_precision_id(store: TaskStore, tmp_path: Path) -> None:
    path = tmp_path / "0305-070809.task"
    path.write_text(
        json.dumps(
            {
                "created": "2024-03-05T07:08:09.123456789-08:00",
                "state": 0,
                "due": "0001-01-01T00:00:00Z",
                "priority": 5,
                "description": "written elsewhere",
                "started": "2024-03-05T07:08:09.123456789-08:00",
            }
        ),
        "utf-8",
    )

    task = store.load(path)

    assert task.created.microsecond == 123456
    assert task.created.utcoffset() == timedelta(hours=-8)
    assert task.started == task.created
    assert task.id == derive_id(task.created.replace(microsecond=0))
    assert task.id == hashlib.sha256(b"2024-03-05T07:08:09-08:00").hexdigest()[:10]
