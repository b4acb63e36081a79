"""
tasktally task commands.

Each command opens the task store (a full load of the task file), runs one
store operation and renders the result. Lookup misses and invalid argument
values are reported and exit 0; task file errors exit 1.
"""

import json
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from tasktally.cli.errors import (
    ExitCode,
    print_invalid_query_error,
    print_task_file_error,
    print_task_not_found_error,
)
from tasktally.cli.render import render_tasks
from tasktally.core.tasks.errors import (
    IdGenerationError,
    InvalidQueryError,
    InvalidStatusError,
    TaskStoreError,
)
from tasktally.core.tasks.models import Task, TaskStatus, parse_status
from tasktally.core.tasks.store import TaskStore

logger = logging.getLogger(__name__)

console = Console()


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


@contextmanager
def handle_store_errors() -> Iterator[None]:
    """Turn task file failures into an error message and exit code 1."""
    try:
        yield
    except (TaskStoreError, IdGenerationError) as e:
        logger.debug("Task file operation failed", exc_info=True)
        print_task_file_error(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e


def _settings(ctx: typer.Context) -> dict:
    return ctx.obj or {}


def open_store(ctx: typer.Context) -> TaskStore:
    """Load the task store configured for this invocation."""
    data_file: Path | None = _settings(ctx).get("data_file")
    with handle_store_errors():
        return TaskStore.open(data_file)


def show_tasks(ctx: typer.Context, tasks: Sequence[Task]) -> None:
    settings = _settings(ctx)
    render_tasks(
        console,
        tasks,
        time_format=settings.get("time_format", "%m-%d %H:%M"),
        color=settings.get("color", True),
    )


def print_json(tasks: Sequence[Task]) -> None:
    typer.echo(json.dumps([t.model_dump(mode="json") for t in tasks], indent=2, ensure_ascii=False))


def report_empty(store: TaskStore, status_filter: str | None) -> None:
    """Explain an empty listing: no tasks at all, or none with this status."""
    if store.is_empty():
        console.print("No tasks yet")
    elif status_filter:
        console.print(f"No tasks with status {escape(status_filter.upper())}")
    else:
        console.print("No tasks found")


def add(
    ctx: typer.Context,
    content: str = typer.Argument(..., help="Task text"),
) -> None:
    """
    Add a new task (status HOLD) and show the task list.

    Examples:
        tasktally add "write tests"
    """
    store = open_store(ctx)
    with handle_store_errors():
        task = store.add(content)

    console.print(f"[green]Created:[/green] {task.id}")
    show_tasks(ctx, store.show())


def _set_status(ctx: typer.Context, task_id: str, status: TaskStatus) -> None:
    store = open_store(ctx)
    with handle_store_errors():
        task = store.update_status(task_id, status)

    if task is None:
        print_task_not_found_error(task_id)
        return

    console.print(f"[green]Updated:[/green] {task.id} is now {status.value}")


def done(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
) -> None:
    """Mark a task as DONE."""
    _set_status(ctx, task_id, TaskStatus.DONE)


def doing(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
) -> None:
    """Mark a task as DOING."""
    _set_status(ctx, task_id, TaskStatus.DOING)


def undone(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
) -> None:
    """Put a task back on HOLD."""
    _set_status(ctx, task_id, TaskStatus.HOLD)


def set_status(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
    status: str = typer.Argument(..., help="New status: HOLD, DOING or DONE"),
) -> None:
    """
    Set a task's status by name.

    Examples:
        tasktally set-status K3Q9ZB doing
    """
    try:
        new_status = parse_status(status)
    except InvalidStatusError as e:
        print_invalid_query_error(e)
        return

    _set_status(ctx, task_id, new_status)


def show(
    ctx: typer.Context,
    status: str | None = typer.Argument(None, help="Only show tasks with this status"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    Show tasks in creation order.

    Examples:
        tasktally show
        tasktally show doing
    """
    store = open_store(ctx)
    try:
        tasks = store.show(status)
    except InvalidQueryError as e:
        print_invalid_query_error(e)
        return

    if json_output:
        print_json(tasks)
        return

    if not tasks:
        report_empty(store, status)
        return

    show_tasks(ctx, tasks)


def clear(
    ctx: typer.Context,
    status: str | None = typer.Argument(None, help="Only remove tasks with this status"),
) -> None:
    """
    Remove all tasks, or all tasks with a given status.

    Examples:
        tasktally clear
        tasktally clear done
    """
    store = open_store(ctx)
    try:
        with handle_store_errors():
            removed = store.clear(status)
    except InvalidQueryError as e:
        print_invalid_query_error(e)
        return

    if status:
        console.print(
            f"[green]Cleared:[/green] {len(removed)} tasks with status {escape(status.upper())}"
        )
    else:
        console.print(f"[green]Cleared:[/green] {len(removed)} tasks")


def delete(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
) -> None:
    """Delete a task."""
    store = open_store(ctx)
    with handle_store_errors():
        task = store.delete(task_id)

    if task is None:
        print_task_not_found_error(task_id)
        return

    console.print(f"[green]Deleted:[/green] {task.id} - {escape(task.content)}")


def search(
    ctx: typer.Context,
    pattern: str = typer.Argument(..., help="Text to look for in task content"),
    regex: bool = typer.Option(
        False,
        "--regex",
        "-r",
        help="Treat PATTERN as a regular expression",
    ),
    status: str | None = typer.Option(
        None,
        "--status",
        "-s",
        help="Only search tasks with this status",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    Search task content (case-insensitive substring, or regex with --regex).

    Examples:
        tasktally search milk
        tasktally search "^Buy" --regex
    """
    store = open_store(ctx)
    try:
        tasks = store.search(pattern, use_regex=regex, status_filter=status)
    except InvalidQueryError as e:
        print_invalid_query_error(e)
        return

    if json_output:
        print_json(tasks)
        return

    if not tasks:
        console.print(f"No tasks match '{escape(pattern)}'")
        return

    show_tasks(ctx, tasks)


def sort(
    ctx: typer.Context,
    field: str = typer.Argument(
        ..., help="Sort field: id, content, status, created_at, updated_at"
    ),
    order: SortOrder = typer.Argument(SortOrder.ASC, case_sensitive=False, help="asc or desc"),
    status: str | None = typer.Option(
        None,
        "--status",
        "-s",
        help="Only show tasks with this status",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    Show tasks sorted by a field.

    Examples:
        tasktally sort status
        tasktally sort updated_at desc
    """
    store = open_store(ctx)
    try:
        tasks = store.sort(field, descending=order == SortOrder.DESC, status_filter=status)
    except InvalidQueryError as e:
        print_invalid_query_error(e)
        return

    if json_output:
        print_json(tasks)
        return

    if not tasks:
        report_empty(store, status)
        return

    show_tasks(ctx, tasks)


def export(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="File to write the tasks to"),
) -> None:
    """
    Export all tasks to another JSON file.

    Examples:
        tasktally export backup.json
    """
    store = open_store(ctx)
    with handle_store_errors():
        count = store.export(path)

    console.print(f"[green]Exported:[/green] {count} tasks to {escape(str(path))}")
