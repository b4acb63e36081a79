"""
JSON file task store.

Tasks live in memory as a dict keyed by ID and are persisted to a single
JSON file holding an array of task records. Every mutating operation
rewrites the whole file before returning.

File format:
    [
      {
        "id": "K3Q9ZB",
        "content": "write tests",
        "status": "DOING",
        "created_at": "2026-10-19T08:15:02.123456Z",
        "updated_at": "2026-10-19T08:20:11.654321Z"
      }
    ]
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .errors import TaskFileCorruptedError, TaskFileReadError, TaskFileWriteError
from .models import Task, TaskStatus, parse_status
from .query import filter_by_status, parse_sort_field, search_tasks, sort_tasks

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "todos.json"


def _parse_status_filter(status_filter: str | None) -> TaskStatus | None:
    if status_filter is None:
        return None
    return parse_status(status_filter)


class TaskStore:
    """
    Owner of all tasks and of the backing file.

    Example:
        >>> store = TaskStore.open(Path("todos.json"))
        >>> task = store.add("write tests")
        >>> store.update_status(task.id, TaskStatus.DOING).status
        <TaskStatus.DOING: 'DOING'>
        >>> [t.content for t in store.show("doing")]
        ['write tests']
    """

    def __init__(self, data_file: Path | str | None = None):
        """
        Initialize an empty store bound to a backing file.

        Args:
            data_file: Path to the JSON task file (defaults to todos.json
                in the current directory)
        """
        self.data_file = Path(data_file) if data_file else Path.cwd() / DEFAULT_DATA_FILE
        self._tasks: dict[str, Task] = {}

    @classmethod
    def open(cls, data_file: Path | str | None = None) -> "TaskStore":
        """Create a store and load it from its backing file."""
        store = cls(data_file)
        store.load()
        return store

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> list[Task]:
        """All tasks in store order."""
        return list(self._tasks.values())

    @property
    def ids(self) -> set[str]:
        return set(self._tasks)

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def is_empty(self) -> bool:
        return not self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """
        Replace the in-memory tasks with the contents of the backing file.

        A missing file yields an empty store.

        Raises:
            TaskFileReadError: If the file exists but cannot be read
            TaskFileCorruptedError: If the content is not a valid task list
        """
        if not self.data_file.exists():
            logger.debug(f"No task file at {self.data_file}, starting empty")
            self._tasks = {}
            return

        try:
            text = self.data_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TaskFileReadError(f"Failed to read {self.data_file}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise TaskFileCorruptedError(f"Failed to parse {self.data_file}: {e}") from e

        if not isinstance(data, list):
            raise TaskFileCorruptedError(f"{self.data_file} must contain a JSON array of tasks")

        tasks: dict[str, Task] = {}
        for index, raw_task in enumerate(data):
            try:
                task = Task.model_validate(raw_task)
            except ValidationError as e:
                raise TaskFileCorruptedError(
                    f"Invalid task record #{index} in {self.data_file}: {e}"
                ) from e
            if task.id in tasks:
                logger.warning(f"Duplicate task ID {task.id} in {self.data_file}, keeping the last")
            tasks[task.id] = task

        self._tasks = tasks
        logger.debug(f"Loaded {len(tasks)} tasks from {self.data_file}")

    def save(self) -> None:
        """
        Write every task to the backing file, replacing its contents.

        Raises:
            TaskFileWriteError: If the file cannot be written
        """
        self._write(self.data_file)
        logger.debug(f"Saved {len(self._tasks)} tasks to {self.data_file}")

    def export(self, path: Path | str) -> int:
        """
        Write every task to ``path`` in the backing file format.

        The backing file itself is not touched.

        Args:
            path: Target file path

        Returns:
            Number of tasks exported

        Raises:
            TaskFileWriteError: If the target cannot be written
        """
        target = Path(path)
        self._write(target)
        logger.debug(f"Exported {len(self._tasks)} tasks to {target}")
        return len(self._tasks)

    def _records(self) -> list[dict[str, Any]]:
        return [task.model_dump(mode="json") for task in self._tasks.values()]

    def _write(self, path: Path) -> None:
        """
        Save the task list to ``path`` atomically.

        Uses a temporary file and atomic rename so a failed write leaves any
        previous file intact.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise TaskFileWriteError(f"Failed to write {path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._records(), f, indent=2, ensure_ascii=False)
                f.write("\n")

            # Atomic rename (replaces existing file)
            os.replace(temp_path, path)
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise TaskFileWriteError(f"Failed to write {path}: {e}") from e

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, content: str) -> Task:
        """
        Create a new HOLD task and save.

        Args:
            content: Task text

        Returns:
            The created task
        """
        task = Task.create(content, existing_ids=self._tasks.keys())
        self._tasks[task.id] = task
        self.save()
        logger.debug(f"Added task {task.id}")
        return task

    def update_status(self, task_id: str, status: TaskStatus) -> Task | None:
        """
        Change a task's status and save.

        Returns:
            The updated task, or None if no task has this ID (nothing is
            written in that case)
        """
        task = self._tasks.get(task_id)
        if task is None:
            return None

        task.transition(status)
        self.save()
        logger.debug(f"Task {task_id} is now {status.value}")
        return task

    def delete(self, task_id: str) -> Task | None:
        """
        Remove a task and save.

        Returns:
            The removed task, or None if no task has this ID
        """
        task = self._tasks.pop(task_id, None)
        if task is None:
            return None

        self.save()
        logger.debug(f"Deleted task {task_id}")
        return task

    def clear(self, status_filter: str | None = None) -> list[Task]:
        """
        Remove all tasks, or only those with the given status, and save.

        The filter name is validated before anything is removed.

        Args:
            status_filter: Status name (case-insensitive), or None for all

        Returns:
            The removed tasks

        Raises:
            InvalidStatusError: If the filter is not a valid status name
        """
        status = _parse_status_filter(status_filter)
        removed = filter_by_status(self._tasks.values(), status)
        for task in removed:
            del self._tasks[task.id]

        self.save()
        logger.debug(f"Cleared {len(removed)} tasks")
        return removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def show(self, status_filter: str | None = None) -> list[Task]:
        """
        List tasks in creation order, optionally restricted to one status.

        Raises:
            InvalidStatusError: If the filter is not a valid status name
        """
        status = _parse_status_filter(status_filter)
        return sort_tasks(filter_by_status(self._tasks.values(), status))

    def search(
        self,
        pattern: str,
        use_regex: bool = False,
        status_filter: str | None = None,
    ) -> list[Task]:
        """
        List tasks whose content matches ``pattern``, in creation order.

        Args:
            pattern: Case-insensitive substring, or a regular expression
                when ``use_regex`` is set
            use_regex: Treat ``pattern`` as a regular expression
            status_filter: Optional status name

        Raises:
            InvalidStatusError: If the filter is not a valid status name
            InvalidPatternError: If ``pattern`` is not a valid expression
        """
        status = _parse_status_filter(status_filter)
        matches = search_tasks(filter_by_status(self._tasks.values(), status), pattern, use_regex)
        return sort_tasks(matches)

    def sort(
        self,
        field: str,
        descending: bool = False,
        status_filter: str | None = None,
    ) -> list[Task]:
        """
        List tasks ordered by ``field``.

        Args:
            field: One of id, content, status, created_at, updated_at
            descending: Sort in descending order
            status_filter: Optional status name

        Raises:
            InvalidSortFieldError: If ``field`` is not a known sort field
            InvalidStatusError: If the filter is not a valid status name
        """
        sort_field = parse_sort_field(field)
        status = _parse_status_filter(status_filter)
        return sort_tasks(
            filter_by_status(self._tasks.values(), status), sort_field, descending
        )
