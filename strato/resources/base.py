"""Shared plumbing for resource managers."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from strato.convergence import (
    Converged,
    ConvergenceMode,
    ConvergenceRequest,
    Observation,
    ResourceKind,
    converge,
    raise_for_outcome,
)
from strato.convergence.loop import Fetch, Sleep
from strato.core.exceptions import StratoAPIError

NOT_FOUND = 404


def observer(get: Callable[[], Awaitable[Any]]) -> Fetch:
    """Wrap a ``get_*`` call as a convergence fetch.

    A 404 becomes ``Observation(found=False)``; any other API error is
    raised unchanged.
    """

    async def fetch() -> Observation:
        try:
            data = await get()
        except StratoAPIError as e:
            if e.status == NOT_FOUND:
                return Observation(status=None, found=False)
            raise
        return Observation(
            status=data.get("status"),
            deleted=bool(data.get("deleted", False)),
            payload=data,
        )

    return fetch


class ConvergingResource:
    """Base for resources whose mutations settle asynchronously.

    Args:
        interval: Seconds between polls.
        sleep: Override for the delay between polls (tests).
    """

    def __init__(self, *, interval: float, sleep: Sleep | None = None) -> None:
        self._interval = interval
        self._sleep = sleep

    async def _wait(
        self,
        *,
        kind: ResourceKind,
        fetch: Fetch,
        attempts: int,
        mode: ConvergenceMode,
        action: str,
        description: str,
        cancel: asyncio.Event | None,
    ) -> Converged:
        request = ConvergenceRequest(
            kind=kind,
            fetch=fetch,
            attempts=attempts,
            delay=self._interval,
            cancel=cancel if cancel is not None else asyncio.Event(),
            description=description,
        )
        outcome = await converge(request, mode, sleep=self._sleep)
        return raise_for_outcome(outcome, action=action)
