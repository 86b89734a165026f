"""Custom exception hierarchy for Strato.

All strato-specific exceptions inherit from StratoError, enabling
users to catch all strato exceptions with a single except clause.
"""

from __future__ import annotations


class StratoError(Exception):
    """Base exception for all Strato errors."""


class ConfigurationError(StratoError):
    """Raised for invalid configuration or missing required settings."""


class ValidationError(StratoError):
    """Raised when a desired-state object is missing a required field."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"The '{field}' field is required")


class StratoAPIError(StratoError):
    """Raised when a Strato API call fails or returns an unusable body."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class ConvergenceError(StratoError):
    """Raised when a resource reaches an error or unrecognized status."""

    def __init__(self, action: str, reason: str, status: str | None = None) -> None:
        self.action = action
        self.reason = reason
        self.status = status
        super().__init__(f"Unable to {action}: {reason}")


class ConvergenceTimeoutError(StratoError):
    """Raised when the attempt budget runs out while the resource is still pending.

    The resource may still converge later; this only means we stopped looking.
    """

    def __init__(self, action: str, attempts: int, status: str | None = None) -> None:
        self.action = action
        self.attempts = attempts
        self.status = status
        super().__init__(
            f"Unable to {action}: still {status or 'pending'} after {attempts} attempts"
        )


class OperationCancelledError(StratoError):
    """Raised when the caller cancels a convergence wait."""

    def __init__(self, action: str, attempts: int) -> None:
        self.action = action
        self.attempts = attempts
        super().__init__(f"Unable to {action}: cancelled after {attempts} attempts")
