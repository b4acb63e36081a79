"""
Configuration models and loading.

Pydantic models for tasktally configuration with multi-layer merging:
defaults < user < project < env vars.
"""

from .env import load_layered_env
from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
    resolve_data_file,
)
from .models import DisplayConfig, StorageConfig, TallyConfig

__all__ = [
    # Models
    "DisplayConfig",
    "StorageConfig",
    "TallyConfig",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "load_layered_env",
    "resolve_data_file",
]
