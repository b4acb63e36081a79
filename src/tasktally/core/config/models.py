"""
Configuration data models for tasktally.

These models define the structure of .tasktally.json and
~/.config/tasktally/config.json files, with validation via Pydantic.
"""

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StorageConfig(BaseModel):
    """
    Where tasks are persisted.
    """
    data_file: str = Field(
        default="todos.json",
        min_length=1,
        description="Task file path (relative paths resolve against the project directory)"
    )


class DisplayConfig(BaseModel):
    """
    Console rendering options.
    """
    time_format: str = Field(
        default="%m-%d %H:%M",
        min_length=1,
        description="strftime format for the Created/Updated columns"
    )
    color: bool = Field(
        default=True,
        description="Colorize status labels"
    )


class TallyConfig(BaseModel):
    """
    Top-level tasktally configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = TallyConfig(storage={"data_file": "work.json"})
        >>> config.storage.data_file
        'work.json'
    """
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Task file settings"
    )
    display: DisplayConfig = Field(
        default_factory=DisplayConfig,
        description="Console rendering settings"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,
    )

    @field_validator('storage', mode='before')
    @classmethod
    def validate_storage(cls, v: Union[str, dict, StorageConfig]) -> Union[dict, StorageConfig]:
        """Allow a bare path string as shorthand for storage.data_file."""
        if isinstance(v, str):
            return {"data_file": v}
        return v
