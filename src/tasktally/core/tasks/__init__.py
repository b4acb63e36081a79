"""
Task models, query helpers and the JSON file task store.
"""

from .errors import (
    IdGenerationError,
    InvalidPatternError,
    InvalidQueryError,
    InvalidSortFieldError,
    InvalidStatusError,
    TaskFileCorruptedError,
    TaskFileReadError,
    TaskFileWriteError,
    TaskStoreError,
)
from .ids import generate_task_id
from .models import Task, TaskStatus, parse_status, status_names
from .query import SortField, filter_by_status, parse_sort_field, search_tasks, sort_tasks
from .store import DEFAULT_DATA_FILE, TaskStore

__all__ = [
    # Models
    "Task",
    "TaskStatus",
    "parse_status",
    "status_names",
    "generate_task_id",
    # Queries
    "SortField",
    "filter_by_status",
    "parse_sort_field",
    "search_tasks",
    "sort_tasks",
    # Store
    "DEFAULT_DATA_FILE",
    "TaskStore",
    # Errors
    "TaskStoreError",
    "TaskFileReadError",
    "TaskFileCorruptedError",
    "TaskFileWriteError",
    "InvalidQueryError",
    "InvalidStatusError",
    "InvalidSortFieldError",
    "InvalidPatternError",
    "IdGenerationError",
]
