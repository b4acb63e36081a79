"""
Query helpers for task lists: status filtering, text search and sorting.

All functions are pure: they take a sequence of tasks and return a new
list, never modifying the tasks themselves.
"""

import re
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

from .errors import InvalidPatternError, InvalidSortFieldError
from .models import Task, TaskStatus


class SortField(str, Enum):
    """Fields a task list can be sorted by."""

    ID = "id"
    CONTENT = "content"
    STATUS = "status"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


_SORT_KEYS: dict[SortField, Callable[[Task], Any]] = {
    SortField.ID: lambda t: t.id,
    SortField.CONTENT: lambda t: t.content,
    SortField.STATUS: lambda t: t.status.rank,
    SortField.CREATED_AT: lambda t: t.created_at,
    SortField.UPDATED_AT: lambda t: t.updated_at,
}


def parse_sort_field(name: str) -> SortField:
    """
    Look up a sort field by name.

    Matching ignores case and accepts "-" in place of "_"
    (so "created-at" works on the command line).

    Raises:
        InvalidSortFieldError: If the name is not a known field
    """
    normalized = name.strip().lower().replace("-", "_")
    try:
        return SortField(normalized)
    except ValueError:
        raise InvalidSortFieldError(name, [f.value for f in SortField]) from None


def filter_by_status(tasks: Iterable[Task], status: TaskStatus | None = None) -> list[Task]:
    """Return the tasks whose status equals ``status`` (all tasks if None)."""
    if status is None:
        return list(tasks)
    return [t for t in tasks if t.status == status]


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """
    Compile a user-supplied regular expression.

    Raises:
        InvalidPatternError: If the expression does not compile
    """
    try:
        return re.compile(pattern)
    except (re.error, OverflowError, RecursionError) as e:
        raise InvalidPatternError(pattern, str(e)) from e


def search_tasks(tasks: Iterable[Task], pattern: str, use_regex: bool = False) -> list[Task]:
    """
    Return the tasks whose content matches ``pattern``.

    Args:
        tasks: Tasks to search
        pattern: Substring (plain mode) or regular expression (regex mode)
        use_regex: If True, ``pattern`` is a regular expression searched
            anywhere in the content; otherwise a case-insensitive substring

    Raises:
        InvalidPatternError: If regex mode is used with an invalid expression
    """
    if use_regex:
        regex = compile_pattern(pattern)
        return [t for t in tasks if regex.search(t.content)]

    needle = pattern.casefold()
    return [t for t in tasks if needle in t.content.casefold()]


def sort_tasks(
    tasks: Iterable[Task],
    field: SortField | None = None,
    descending: bool = False,
) -> list[Task]:
    """
    Sort tasks for display.

    Tasks are always ordered by creation time first (ties broken by ID).
    When ``field`` is given, a stable sort on that field is applied on top,
    so tasks with equal values keep their creation order.

    Args:
        tasks: Tasks to sort
        field: Explicit sort field, or None for creation order only
        descending: Reverse the explicit sort field

    Returns:
        New sorted list
    """
    ordered = sorted(tasks, key=lambda t: (t.created_at, t.id))
    if field is not None:
        ordered.sort(key=_SORT_KEYS[field], reverse=descending)
    return ordered
