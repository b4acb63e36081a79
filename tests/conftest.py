"""
Pytest configuration and shared fixtures.

Provides fixtures for an isolated working directory, a task file path, a
loaded task store and a factory for tasks with fixed timestamps.
"""

from datetime import datetime, timedelta, timezone

import pytest

from tasktally.core.config import clear_cache
from tasktally.core.tasks.models import Task, TaskStatus
from tasktally.core.tasks.store import TaskStore

BASE_TIME = datetime(2026, 10, 19, 8, 0, 0, 123456, tzinfo=timezone.utc)


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """
    Run every test in its own directory with no user config or env overrides.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    for var in ("TASKTALLY_FILE", "TASKTALLY_NO_COLOR", "NO_COLOR"):
        monkeypatch.delenv(var, raising=False)
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def task_file(tmp_path):
    """Path to a (not yet existing) task file."""
    return tmp_path / "todos.json"


@pytest.fixture
def store(task_file):
    """An empty, loaded task store bound to task_file."""
    return TaskStore.open(task_file)


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def make_task():
    """
    Factory for tasks with deterministic timestamps.

    ``offset`` shifts created_at by that many seconds from BASE_TIME.
    """

    def _make(
        task_id: str,
        content: str = "Sample task",
        status: TaskStatus = TaskStatus.HOLD,
        offset: int = 0,
        updated_offset: int | None = None,
    ) -> Task:
        created = BASE_TIME + timedelta(seconds=offset)
        updated = BASE_TIME + timedelta(
            seconds=offset if updated_offset is None else updated_offset
        )
        return Task(
            id=task_id,
            content=content,
            status=status,
            created_at=created,
            updated_at=updated,
        )

    return _make


@pytest.fixture
def populated_store(store, make_task):
    """A store holding one task per status, saved to disk."""
    for task in (
        make_task("AAA111", "Buy milk", TaskStatus.HOLD, offset=0),
        make_task("BBB222", "buy bread", TaskStatus.DOING, offset=10, updated_offset=20),
        make_task("CCC333", "Clean house", TaskStatus.DONE, offset=5, updated_offset=30),
    ):
        store._tasks[task.id] = task
    store.save()
    return store
