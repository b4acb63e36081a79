"""
tasktally CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from tasktally import __version__
from tasktally.cli import commands
from tasktally.cli.errors import ExitCode, print_error
from tasktally.core.config import load_config, load_layered_env, resolve_data_file

# Help panel names for command grouping
PANEL_TASKS = "Work with Tasks"
PANEL_QUERY = "Find Tasks"
PANEL_FILES = "Files"

app = typer.Typer(
    name="tasktally",
    help="A small local task tracker: add tasks, move them through HOLD/DOING/DONE",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    data_file: Path | None = typer.Option(
        None,
        "--file",
        "-f",
        help="Task file to use (default: todos.json, or TASKTALLY_FILE)",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored status labels",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    tasktally - a local command-line task tracker.

    Tasks are stored in a JSON file in the current directory and move
    between HOLD, DOING and DONE.

    Quick Start:
        tasktally add "write tests"      # Create a task (status HOLD)
        tasktally doing K3Q9ZB           # Start working on it
        tasktally done K3Q9ZB            # Finish it
        tasktally show                   # List all tasks
    """
    setup_logging(debug)

    # .env files may set TASKTALLY_FILE / TASKTALLY_NO_COLOR
    load_layered_env()
    try:
        config = load_config()
    except ValidationError as e:
        print_error("Invalid configuration", reason=str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    ctx.obj = {
        "debug": debug,
        "data_file": data_file or resolve_data_file(config),
        "time_format": config.display.time_format,
        "color": config.display.color and not no_color,
    }


# =============================================================================
# Work with Tasks
# =============================================================================

app.command(name="add", rich_help_panel=PANEL_TASKS)(commands.add)
app.command(name="done", rich_help_panel=PANEL_TASKS)(commands.done)
app.command(name="doing", rich_help_panel=PANEL_TASKS)(commands.doing)
app.command(name="undone", rich_help_panel=PANEL_TASKS)(commands.undone)
app.command(name="set-status", rich_help_panel=PANEL_TASKS)(commands.set_status)
app.command(name="delete", rich_help_panel=PANEL_TASKS)(commands.delete)
app.command(name="clear", rich_help_panel=PANEL_TASKS)(commands.clear)

# =============================================================================
# Find Tasks
# =============================================================================

app.command(name="show", rich_help_panel=PANEL_QUERY)(commands.show)
app.command(name="search", rich_help_panel=PANEL_QUERY)(commands.search)
app.command(name="sort", rich_help_panel=PANEL_QUERY)(commands.sort)

# =============================================================================
# Files
# =============================================================================

app.command(name="export", rich_help_panel=PANEL_FILES)(commands.export)


@app.command(rich_help_panel=PANEL_FILES)
def version() -> None:
    """Show tasktally version and exit."""
    console.print(f"tasktally version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()
