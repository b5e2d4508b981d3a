"""Exception hierarchy.

Configuration errors are fatal to the calling operation, backend errors name
the operation that failed, validation errors name the offending value.
"""

from typing import Any


class RegtrackError(Exception):
    """Base class for all regtrack errors.

    Attributes:
        message: Human-readable error description
        context: Additional context for diagnostics
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = dict(context) if context is not None else {}


class ConfigurationError(RegtrackError):
    """Missing or invalid environment-derived path or credential."""


class BackendError(RegtrackError):
    """A create/label/comment/close/reopen/list call failed."""

    def __init__(self, operation: str, cause: BaseException | None = None, **context: Any) -> None:
        message = f"failed {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, context)
        self.operation = operation


class InvalidCommitIDError(RegtrackError, ValueError):
    def __init__(self, value: str) -> None:
        super().__init__(f"{value!r} is not a valid commit ID", {"value": value})
        self.value = value
