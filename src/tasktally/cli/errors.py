"""
Standardized error messages and exit codes for the tasktally CLI.

Lookup misses and bad argument values are reported with these helpers and
the command still exits with SUCCESS. Only task file failures exit with
GENERAL_ERROR.
"""

from enum import IntEnum

from rich.console import Console
from rich.markup import escape

from tasktally.core.tasks.errors import InvalidQueryError

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for tasktally CLI operations."""

    SUCCESS = 0
    """Operation completed (including reported not-found / invalid values)."""

    GENERAL_ERROR = 1
    """Task file could not be read, parsed or written."""

    USER_ERROR = 2
    """Command-line usage error (raised by the argument parser)."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Task not found: K3Q9ZB",
        ...     solution="tasktally show",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_task_not_found_error(task_id: str) -> None:
    """Print error when a specific task is not found."""
    print_error(
        f"Task not found: {task_id}",
        reason="The task ID may be incorrect or the task may have been deleted",
        solution="tasktally show  # to see available tasks",
    )


def print_invalid_query_error(error: InvalidQueryError) -> None:
    """Print error for an invalid status name, sort field or pattern."""
    if error.valid_options:
        print_error(
            error.describe(),
            reason=f"Valid options are: {', '.join(error.valid_options)}",
        )
    else:
        print_error(error.describe())


def print_task_file_error(error: Exception) -> None:
    """Print error when the task file cannot be read or written."""
    print_error(
        "Task file error",
        reason=str(error),
        solution="Check the file path and permissions, or fix the JSON by hand",
    )


__all__ = [
    "ExitCode",
    "print_error",
    "print_task_not_found_error",
    "print_invalid_query_error",
    "print_task_file_error",
]
