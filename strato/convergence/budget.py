"""Attempt budgets for convergence waits.

Polls are spaced by a fixed POLL_INTERVAL, so the budget is expressed as a
number of attempts: 60 attempts is ten minutes of waiting. Provisioning
more than LARGE_POOL_THRESHOLD nodes gets twice that. Deletion always gets
the base budget, whatever the pool size.
"""

from __future__ import annotations

from typing import Final

POLL_INTERVAL: Final = 10.0
BASE_ATTEMPTS: Final = 60
LARGE_POOL_THRESHOLD: Final = 3
DELETE_ATTEMPTS: Final = BASE_ATTEMPTS


def attempts_for(node_count: int) -> int:
    """Number of polls allowed for a create or resize targeting node_count nodes."""
    if node_count > LARGE_POOL_THRESHOLD:
        return BASE_ATTEMPTS * 2
    return BASE_ATTEMPTS


def budget_seconds(attempts: int, interval: float = POLL_INTERVAL) -> float:
    return attempts * interval
