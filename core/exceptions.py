class TodoError(Exception):
    """Base class for application errors."""


class StoreError(TodoError):
    """Any failure talking to the remote task store."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidTimestamp(TodoError, ValueError):
    """A deadline could not be parsed as a date-time."""


class ValidationError(TodoError, ValueError):
    """User input rejected before it reaches the store."""
