from strato.core.exceptions import (
    ConfigurationError,
    ConvergenceError,
    ConvergenceTimeoutError,
    OperationCancelledError,
    StratoAPIError,
    StratoError,
    ValidationError,
)

__all__ = [
    "ConfigurationError",
    "ConvergenceError",
    "ConvergenceTimeoutError",
    "OperationCancelledError",
    "StratoAPIError",
    "StratoError",
    "ValidationError",
]
