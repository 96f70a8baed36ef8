"""
Shared fixtures.

Every test gets a fresh in-memory wallet whose clock is pinned to
Wednesday 2024-06-05 12:00 UTC. The clock advances one second per
now() call so transaction timestamps are strictly increasing.
"""

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from weekly_allowance.orchestrator import AllowanceWallet, create_app_components


WEDNESDAY = date(2024, 6, 5)


class FixedClock:
    """Deterministic stand-in for SystemClock."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self._current = start
        self._step = step

    def now(self) -> datetime:
        current = self._current
        self._current += self._step
        return current

    def today(self) -> date:
        return self._current.date()

    def move_to(self, day: date) -> None:
        self._current = datetime.combine(day, self._current.timetz())


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 6, 5, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def wallet(clock) -> AllowanceWallet:
    return create_app_components(clock=clock)


@pytest.fixture
def child(wallet):
    """A child of user 1 named Tom, balance 0."""
    return asyncio.run(wallet.create_child(1, "Tom"))


@pytest.fixture
def funded_child(wallet, child):
    """Tom with an initial deposit of 100."""
    asyncio.run(wallet.deposit(child.id, 100.0, "Initial deposit"))
    return child
