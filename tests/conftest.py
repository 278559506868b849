"""Mini README: Shared fixtures for the SolarFlow test-suite.

Structure:
    * SteppingClock - deterministic clock advancing one minute per reading.
    * clock - fixture returning a fresh SteppingClock.
    * ledger - empty LedgerService (no demo data) driven by ``clock``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from solarflow.ledger import LedgerService

START = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class SteppingClock:
    """Return ``start``, ``start + step``, ... on successive calls."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(minutes=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        reading = self.current
        self.current += self.step
        return reading


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def ledger(clock: SteppingClock) -> LedgerService:
    return LedgerService(devices=[], clock=clock)
