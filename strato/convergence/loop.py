"""Poll-until-converged loop for asynchronous server-side mutations.

A create, resize or delete call returns immediately with the resource in a
transitional status. ``converge`` then observes the resource through a
caller-supplied fetch coroutine until it reaches a terminal status, the
attempt budget runs out, or the caller cancels.

Only a PENDING observation is retried. Errors, unknown statuses and fetch
failures end the loop on the spot.

Example:
    request = ConvergenceRequest(
        kind=ResourceKind.CLUSTER,
        fetch=lambda: observe_cluster(client, cluster_id),
        attempts=attempts_for(node_count),
    )
    outcome = await converge(request, ConvergenceMode.CREATE_OR_UPDATE)
    match outcome:
        case Converged(observation=obs):
            ...
        case TimedOut() | Cancelled() | ConvergenceFailed():
            ...
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    stop_when_event_set,
    wait_fixed,
)

from strato.convergence.budget import POLL_INTERVAL
from strato.convergence.status import (
    ResourceKind,
    StatusClass,
    classify,
    describe,
    is_teardown,
)
from strato.core.exceptions import (
    ConvergenceError,
    ConvergenceTimeoutError,
    OperationCancelledError,
)

# =============================================================================
# Request
# =============================================================================


@dataclass(frozen=True, slots=True)
class Observation:
    """One look at a remote resource.

    ``found=False`` means the API answered 404. ``payload`` carries the raw
    body so callers can build their model without another round trip.
    """

    status: str | None
    found: bool = True
    deleted: bool = False
    payload: Any = None


type Fetch = Callable[[], Awaitable[Observation]]
type Sleep = Callable[[float], Awaitable[None]]


class ConvergenceMode(Enum):
    CREATE_OR_UPDATE = auto()
    DELETE = auto()


@dataclass(frozen=True, slots=True)
class ConvergenceRequest:
    """Parameters of a single convergence wait.

    Args:
        kind: Resource kind, selects the status vocabulary.
        fetch: Coroutine function returning the current Observation.
            Transport failures are raised; not-found is ``found=False``.
        attempts: Maximum number of observations. Fixed for the whole wait.
        delay: Seconds between observations.
        cancel: Setting this event stops the wait at the next check,
            including in the middle of a delay.
        description: Used in log lines, e.g. ``"cluster 8f2c..."``.
        retry_on: Fetch exceptions that should be retried like a pending
            status instead of ending the wait. Empty by default.
    """

    kind: ResourceKind
    fetch: Fetch
    attempts: int
    delay: float = POLL_INTERVAL
    cancel: asyncio.Event = field(default_factory=asyncio.Event)
    description: str = ""
    retry_on: tuple[type[Exception], ...] = ()

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError(f"attempts must be positive, got {self.attempts}")
        if self.delay < 0:
            raise ValueError(f"delay must not be negative, got {self.delay}")


# =============================================================================
# Outcomes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Converged:
    attempts: int
    observation: Observation


@dataclass(frozen=True, slots=True)
class ConvergenceFailed:
    reason: str
    attempts: int
    status: str | None = None
    error: Exception | None = None


@dataclass(frozen=True, slots=True)
class TimedOut:
    attempts: int
    status: str | None


@dataclass(frozen=True, slots=True)
class Cancelled:
    attempts: int


type ConvergenceOutcome = Converged | ConvergenceFailed | TimedOut | Cancelled


# =============================================================================
# Loop
# =============================================================================


class _StillPending(Exception):
    """Resource is still converging - retry."""

    def __init__(self, observation: Observation) -> None:
        self.observation = observation
        super().__init__(observation.status)


def evaluate(
    kind: ResourceKind,
    mode: ConvergenceMode,
    observation: Observation,
    attempts: int,
) -> Converged | ConvergenceFailed | None:
    """Decide what a single observation means. None means keep waiting."""
    if mode is ConvergenceMode.DELETE and (not observation.found or observation.deleted):
        return Converged(attempts, observation)

    if not observation.found:
        return ConvergenceFailed(f"{kind.value} not found", attempts)

    status = observation.status
    if mode is ConvergenceMode.CREATE_OR_UPDATE and is_teardown(kind, status):
        return ConvergenceFailed(describe(kind, status), attempts, status)

    match classify(kind, status):
        case StatusClass.READY:
            return Converged(attempts, observation)
        case StatusClass.PENDING:
            return None
        case StatusClass.FAILED | StatusClass.UNKNOWN:
            return ConvergenceFailed(describe(kind, status), attempts, status)


def interruptible_sleep(cancel: asyncio.Event) -> Sleep:
    """asyncio.sleep that returns early once cancel is set."""

    async def sleep(seconds: float) -> None:
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(cancel.wait(), timeout=seconds)

    return sleep


async def converge(
    request: ConvergenceRequest,
    mode: ConvergenceMode,
    *,
    sleep: Sleep | None = None,
) -> ConvergenceOutcome:
    """Poll request.fetch until the resource converges.

    Never raises for resource or fetch problems; every ending is reported
    as an outcome. ``asyncio.CancelledError`` from the enclosing task is
    not intercepted.
    """
    log = logger.bind(
        component="convergence",
        kind=request.kind.value,
        resource=request.description,
    )
    attempts = 0

    async def attempt() -> ConvergenceOutcome:
        nonlocal attempts
        if request.cancel.is_set():
            return Cancelled(attempts)

        attempts += 1
        try:
            observation = await request.fetch()
        except Exception as e:
            if isinstance(e, request.retry_on):
                log.debug(
                    "Fetch failed ({n}/{total}), retrying: {error}",
                    n=attempts, total=request.attempts, error=e,
                )
                raise
            return ConvergenceFailed(str(e) or type(e).__name__, attempts, error=e)

        outcome = evaluate(request.kind, mode, observation, attempts)
        if outcome is None:
            log.debug(
                "{what} ({n}/{total})",
                what=describe(request.kind, observation.status),
                n=attempts, total=request.attempts,
            )
            raise _StillPending(observation)
        return outcome

    retrying = AsyncRetrying(
        stop=stop_after_attempt(request.attempts) | stop_when_event_set(request.cancel),
        wait=wait_fixed(request.delay),
        retry=retry_if_exception_type((_StillPending, *request.retry_on)),
        sleep=sleep or interruptible_sleep(request.cancel),
    )

    try:
        outcome = await retrying(attempt)
    except RetryError as e:
        if request.cancel.is_set():
            outcome = Cancelled(attempts)
        else:
            last = e.last_attempt.exception()
            match last:
                case _StillPending(observation=observation):
                    outcome = TimedOut(attempts, observation.status)
                case Exception():
                    outcome = ConvergenceFailed(
                        str(last) or type(last).__name__, attempts, error=last,
                    )
                case _:
                    outcome = TimedOut(attempts, None)

    _log_outcome(log, outcome)
    return outcome


def _log_outcome(log: Any, outcome: ConvergenceOutcome) -> None:
    match outcome:
        case Converged(attempts=n):
            log.info("Converged after {n} attempt(s)", n=n)
        case ConvergenceFailed(reason=reason, attempts=n):
            log.error("Convergence failed after {n} attempt(s): {reason}", n=n, reason=reason)
        case TimedOut(attempts=n, status=status):
            log.warning("Timed out after {n} attempt(s), last status {status}", n=n, status=status)
        case Cancelled(attempts=n):
            log.warning("Cancelled after {n} attempt(s)", n=n)


def raise_for_outcome(outcome: ConvergenceOutcome, *, action: str) -> Converged:
    """Return the Converged outcome or raise the matching StratoError.

    Args:
        outcome: Result of ``converge``.
        action: What the caller was doing, e.g. ``"create cluster"``.
    """
    match outcome:
        case Converged():
            return outcome
        case ConvergenceFailed(reason=reason, status=status, error=error):
            raise ConvergenceError(action, reason, status) from error
        case TimedOut(attempts=n, status=status):
            raise ConvergenceTimeoutError(action, n, status)
        case Cancelled(attempts=n):
            raise OperationCancelledError(action, n)


__all__ = [
    "Cancelled",
    "ConvergenceFailed",
    "ConvergenceMode",
    "ConvergenceOutcome",
    "ConvergenceRequest",
    "Converged",
    "Fetch",
    "Observation",
    "Sleep",
    "TimedOut",
    "converge",
    "evaluate",
    "interruptible_sleep",
    "raise_for_outcome",
]
