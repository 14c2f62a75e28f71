# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from overlord.config import ModuleDirResolver
from overlord.tasks.task_store import TaskStore

from .fakes import FakeClock, StubResolver


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 5, 7, 8, 9, tzinfo=UTC))


@pytest.fixture()
def stub_resolver() -> StubResolver:
    return StubResolver()


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture()
def resolver(data_dir: Path) -> ModuleDirResolver:
    return ModuleDirResolver(data_dir)


@pytest.fixture()
def store(data_dir: Path, resolver: ModuleDirResolver) -> TaskStore:
    """Real JSON store rooted in a per-test tmp directory."""
    return TaskStore(data_dir, resolver=resolver)
