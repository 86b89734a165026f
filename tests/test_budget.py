from __future__ import annotations

import pytest

from strato.convergence.budget import (
    BASE_ATTEMPTS,
    DELETE_ATTEMPTS,
    POLL_INTERVAL,
    attempts_for,
    budget_seconds,
)

pytestmark = [pytest.mark.unit]


@pytest.mark.parametrize("node_count", [0, 1, 2, 3])
def test_small_pools_get_ten_minutes(node_count: int):
    assert attempts_for(node_count) == 60
    assert budget_seconds(attempts_for(node_count)) == 600


@pytest.mark.parametrize("node_count", [4, 5, 10, 100])
def test_large_pools_get_twenty_minutes(node_count: int):
    assert attempts_for(node_count) == 120
    assert budget_seconds(attempts_for(node_count)) == 1200


def test_negative_count_still_positive_budget():
    assert attempts_for(-1) == BASE_ATTEMPTS


def test_budget_is_always_positive():
    assert all(attempts_for(n) > 0 for n in range(-5, 50))


def test_delete_budget_is_fixed():
    assert DELETE_ATTEMPTS == 60


def test_poll_interval():
    assert POLL_INTERVAL == 10.0
    assert budget_seconds(3, interval=0.5) == 1.5
