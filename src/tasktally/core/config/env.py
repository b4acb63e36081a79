"""
.env file support.

Only the variables tasktally itself reads are taken from .env files:

    TASKTALLY_FILE, TASKTALLY_NO_COLOR, NO_COLOR

Anything else in those files is ignored and never reaches os.environ.

Precedence (highest first):
    process environment > project .env.local > project .env > user .env
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from dotenv import dotenv_values

from .loader import get_xdg_config_home

logger = logging.getLogger(__name__)

ENV_KEYS = ("TASKTALLY_FILE", "TASKTALLY_NO_COLOR", "NO_COLOR")


def get_user_env_path() -> Path:
    """Get the user-level .env file path."""
    return get_xdg_config_home() / "tasktally" / ".env"


def get_project_env_paths(project_dir: Path | None = None) -> list[Path]:
    """Get the project .env files, lowest precedence first."""
    if project_dir is None:
        project_dir = Path.cwd()
    return [project_dir / ".env", project_dir / ".env.local"]


def read_env_settings(paths: Iterable[Path]) -> dict[str, str]:
    """
    Collect tasktally settings from .env files.

    Later files override earlier ones. Missing files are skipped, as are
    keys tasktally does not read and keys declared without a value.

    Args:
        paths: .env files, lowest precedence first

    Returns:
        Mapping of setting name to value
    """
    settings: dict[str, str] = {}
    for path in paths:
        if not path.exists():
            continue
        for key, value in dotenv_values(path).items():
            if key in ENV_KEYS and value is not None:
                settings[key] = value
                logger.debug(f"{key} taken from {path}")
    return settings


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """
    Export tasktally settings from user and project .env files.

    Settings already present in the process environment are left alone.

    Args:
        project_dir: Base directory for the project .env files (defaults to cwd)
        user_env_paths: Override the user .env file list
        project_env_paths: Override the project .env file list

    Returns:
        The settings that were exported
    """
    if user_env_paths is None:
        user_env_paths = [get_user_env_path()]
    if project_env_paths is None:
        project_env_paths = get_project_env_paths(project_dir)

    settings = read_env_settings([*user_env_paths, *project_env_paths])
    exported = {k: v for k, v in settings.items() if k not in os.environ}
    os.environ.update(exported)
    return exported
