"""
Exceptions raised by the task store and query engine.

Two families:

- TaskStoreError: persistence failures (reading, parsing or writing the
  backing file). These abort the current command.
- InvalidQueryError: bad argument values supplied by the user (unknown
  status name, sort field or regular expression). Callers report these and
  carry on; the store is left unchanged.
"""


class TaskStoreError(Exception):
    """Base class for fatal task file errors."""

    pass


class TaskFileReadError(TaskStoreError):
    """Raised when the task file exists but cannot be read."""

    pass


class TaskFileCorruptedError(TaskStoreError):
    """Raised when the task file is not a valid list of task records."""

    pass


class TaskFileWriteError(TaskStoreError):
    """Raised when the task file (or an export target) cannot be written."""

    pass


class InvalidQueryError(ValueError):
    """Base class for invalid user-supplied query arguments."""

    def __init__(self, value: str, valid_options: list[str]):
        self.value = value
        self.valid_options = valid_options
        super().__init__(self.describe())

    def describe(self) -> str:
        return f"Invalid value: {self.value}"


class InvalidStatusError(InvalidQueryError):
    """Raised for a status name other than HOLD, DOING or DONE."""

    def describe(self) -> str:
        return f"Invalid status: {self.value}"


class InvalidSortFieldError(InvalidQueryError):
    """Raised for an unknown sort field."""

    def describe(self) -> str:
        return f"Invalid sort field: {self.value}"


class InvalidPatternError(InvalidQueryError):
    """Raised when a search pattern is not a valid regular expression."""

    def __init__(self, value: str, reason: str):
        self.reason = reason
        super().__init__(value, [])

    def describe(self) -> str:
        return f"Invalid regular expression '{self.value}': {self.reason}"


class IdGenerationError(RuntimeError):
    """Raised when no unused task ID could be generated."""

    pass
