"""
Task data models for tasktally.

Defines the Task model and the TaskStatus enum. Tasks are stored in the
backing file with these exact field names and status tags, so renaming
either is a file format change.
"""

import re
from collections.abc import Collection
from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from .errors import InvalidStatusError
from .ids import generate_task_id

# Timestamps written by older tools may carry nanoseconds
_EXTRA_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Task status values.

    Status is a flat label: any status may follow any other.
    """

    HOLD = "HOLD"
    DOING = "DOING"
    DONE = "DONE"

    @property
    def rank(self) -> int:
        """Ordinal used for sorting (HOLD < DOING < DONE)."""
        return _STATUS_RANK[self]


_STATUS_RANK = {TaskStatus.HOLD: 0, TaskStatus.DOING: 1, TaskStatus.DONE: 2}

# Canonical name -> status; input is upper-cased before lookup
_STATUS_BY_NAME = {status.value: status for status in TaskStatus}


def status_names() -> list[str]:
    """Canonical status names in sort order."""
    return [status.value for status in TaskStatus]


def parse_status(name: str) -> TaskStatus:
    """
    Look up a status by name, ignoring case and surrounding whitespace.

    Args:
        name: Status name such as "hold", "Doing" or "DONE"

    Returns:
        Matching TaskStatus

    Raises:
        InvalidStatusError: If the name is not one of HOLD, DOING, DONE
    """
    status = _STATUS_BY_NAME.get(name.strip().upper())
    if status is None:
        raise InvalidStatusError(name, status_names())
    return status


class Task(BaseModel):
    """
    A single to-do item.

    Example:
        >>> task = Task.create("write tests")
        >>> task.status
        <TaskStatus.HOLD: 'HOLD'>
        >>> task.transition(TaskStatus.DOING)
        >>> task.updated_at > task.created_at
        True
    """

    id: str = Field(..., min_length=1, description="Short unique task identifier")
    content: str = Field(..., description="Task text")
    status: TaskStatus = Field(default=TaskStatus.HOLD, description="Current task status")
    created_at: datetime = Field(..., description="When the task was created (UTC)")
    updated_at: datetime = Field(..., description="When the status last changed (UTC)")

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def trim_fraction(cls, v: object) -> object:
        """Truncate sub-microsecond digits so pydantic can parse the value."""
        if isinstance(v, str):
            return _EXTRA_FRACTION_RE.sub(r"\1", v)
        return v

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC and normalize aware ones to UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def check_timestamps(self) -> "Task":
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not be earlier than created_at")
        return self

    @classmethod
    def create(cls, content: str, existing_ids: Collection[str] = ()) -> "Task":
        """
        Build a new HOLD task with a fresh ID and both timestamps set to now.

        Args:
            content: Task text
            existing_ids: IDs the new ID must not collide with

        Returns:
            New Task instance
        """
        now = utc_now()
        return cls(
            id=generate_task_id(existing_ids),
            content=content,
            status=TaskStatus.HOLD,
            created_at=now,
            updated_at=now,
        )

    def transition(self, status: TaskStatus) -> None:
        """
        Set a new status and refresh updated_at.

        updated_at always moves forward, even if the clock has not advanced
        since the last change.
        """
        now = utc_now()
        if now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        self.status = status
        self.updated_at = now
