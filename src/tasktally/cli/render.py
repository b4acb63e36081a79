"""
Table rendering for task lists.

Rendering never changes the tasks it is given; long content is shortened
only in the printed table.
"""

from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from tasktally.core.tasks.models import Task, TaskStatus

MAX_CONTENT_LENGTH = 38
TRUNCATED_LENGTH = 35

STATUS_COLORS = {
    TaskStatus.HOLD: "white",
    TaskStatus.DOING: "green",
    TaskStatus.DONE: "red",
}


def truncate_content(content: str) -> str:
    """Shorten content longer than 38 characters to 35 characters plus '...'."""
    if len(content) > MAX_CONTENT_LENGTH:
        return content[:TRUNCATED_LENGTH] + "..."
    return content


def format_status(status: TaskStatus, color: bool = True) -> Text:
    if not color:
        return Text(status.value)
    return Text(status.value, style=STATUS_COLORS.get(status, "white"))


def build_task_table(
    tasks: Sequence[Task],
    time_format: str = "%m-%d %H:%M",
    color: bool = True,
) -> Table:
    """
    Build a rich Table for a task list.

    Args:
        tasks: Tasks in display order
        time_format: strftime format for the timestamp columns
        color: Colorize status labels

    Returns:
        Table ready to print
    """
    table = Table(
        show_header=True,
        header_style="bold cyan" if color else None,
        box=box.SIMPLE_HEAD,
    )
    table.add_column("ID", style="dim" if color else None, no_wrap=True)
    table.add_column("Created", no_wrap=True)
    table.add_column("Updated", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Content", overflow="fold")

    for task in tasks:
        table.add_row(
            task.id,
            task.created_at.strftime(time_format),
            task.updated_at.strftime(time_format),
            format_status(task.status, color),
            Text(truncate_content(task.content)),
        )

    return table


def render_tasks(
    console: Console,
    tasks: Sequence[Task],
    time_format: str = "%m-%d %H:%M",
    color: bool = True,
) -> None:
    """Print a task table followed by the task count."""
    console.print(build_task_table(tasks, time_format, color))
    console.print(f"Total: {len(tasks)} tasks", style="dim" if color else None)
