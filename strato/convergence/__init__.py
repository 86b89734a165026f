"""Convergence engine: status classification and the polling loop."""

from strato.convergence.budget import (
    BASE_ATTEMPTS,
    DELETE_ATTEMPTS,
    LARGE_POOL_THRESHOLD,
    POLL_INTERVAL,
    attempts_for,
    budget_seconds,
)
from strato.convergence.loop import (
    Cancelled,
    ConvergenceFailed,
    ConvergenceMode,
    ConvergenceOutcome,
    ConvergenceRequest,
    Converged,
    Observation,
    TimedOut,
    converge,
    raise_for_outcome,
)
from strato.convergence.status import (
    ClusterStatus,
    NodePoolStatus,
    ResourceKind,
    StatusClass,
    classify,
    describe,
    is_teardown,
)

__all__ = [
    "BASE_ATTEMPTS",
    "DELETE_ATTEMPTS",
    "LARGE_POOL_THRESHOLD",
    "POLL_INTERVAL",
    "Cancelled",
    "ClusterStatus",
    "ConvergenceFailed",
    "ConvergenceMode",
    "ConvergenceOutcome",
    "ConvergenceRequest",
    "Converged",
    "NodePoolStatus",
    "Observation",
    "ResourceKind",
    "StatusClass",
    "TimedOut",
    "attempts_for",
    "budget_seconds",
    "classify",
    "converge",
    "describe",
    "is_teardown",
    "raise_for_outcome",
]
