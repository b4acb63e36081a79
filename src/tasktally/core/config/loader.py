"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import os
from pathlib import Path
from typing import Any

from .models import TallyConfig

# Global cache to avoid reloading config multiple times per invocation
_config_cache: TallyConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/tasktally/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "tasktally" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .tasktally.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".tasktally.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 20}})
        {'a': 1, 'b': {'x': 10, 'y': 20}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            print(f"Warning: Ignoring config at {path}: expected a JSON object")
            return None
    except (json.JSONDecodeError, OSError) as e:
        # Config problems must not stop the task store from working
        print(f"Warning: Failed to parse config at {path}: {e}")
        return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        TASKTALLY_FILE - overrides storage.data_file
        TASKTALLY_NO_COLOR - disables display.color when set to a true value
        NO_COLOR - same as TASKTALLY_NO_COLOR (any non-empty value)

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if data_file := os.environ.get("TASKTALLY_FILE"):
        # Replaces either the storage section or its bare-string shorthand
        storage = result.get("storage")
        storage = storage.copy() if isinstance(storage, dict) else {}
        storage["data_file"] = data_file
        result["storage"] = storage

    no_color = os.environ.get("TASKTALLY_NO_COLOR", "")
    if no_color.lower() not in ("false", "0", "") or os.environ.get("NO_COLOR"):
        display = result.get("display")
        display = display.copy() if isinstance(display, dict) else {}
        display["color"] = False
        result["display"] = display

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "storage": {"data_file": "todos.json"},
        "display": {"time_format": "%m-%d %H:%M", "color": True},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> TallyConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (TASKTALLY_*)
        2. Project config (.tasktally.json)
        3. User config (~/.config/tasktally/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .tasktally.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated TallyConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = TallyConfig(**merged)
    _config_cache = config

    return config


def resolve_data_file(config: TallyConfig, project_dir: Path | None = None) -> Path:
    """
    Resolve the configured task file against the project directory.

    Args:
        config: Loaded configuration
        project_dir: Base for relative paths (defaults to cwd)

    Returns:
        Absolute path to the task file
    """
    path = Path(config.storage.data_file).expanduser()
    if path.is_absolute():
        return path
    return (project_dir or Path.cwd()) / path


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
