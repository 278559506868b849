"""Mini README: Energy-to-currency conversion rates.

Structure:
    * RateTable - holds the standard and peak prices per kWh.
    * RateTable.price_energy - convert an energy quantity into a payable amount.
    * price_at - the same conversion at an explicit rate.

Rate changes only affect future pricing; settled transactions keep the
amount they were recorded with.
"""

from __future__ import annotations

import threading
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .models import ledger_arithmetic, to_decimal
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

PRICE_QUANTUM = Decimal("0.01")


class RateTable:
    """Standard and peak price per kWh."""

    def __init__(
        self,
        standard: object = "0.10",
        peak: object = "0.15",
        *,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._lock = lock if lock is not None else threading.RLock()
        self._standard = to_decimal(standard, field_name="standard_rate")
        self._peak = to_decimal(peak, field_name="peak_rate")

    def get_rate(self, peak: bool = False) -> Decimal:
        with self._lock:
            return self._peak if peak else self._standard

    def set_rate(self, value: object, peak: bool = False) -> None:
        rate = to_decimal(value, field_name="rate")
        with self._lock:
            if peak:
                self._peak = rate
            else:
                self._standard = rate
        LOGGER.info("%s energy rate set to %s", "Peak" if peak else "Standard", rate)

    def price_energy(self, energy_amount: object, peak: bool = False) -> Decimal:
        """Price ``energy_amount`` kWh at the live rate, rounded to cents."""

        return price_at(to_decimal(energy_amount, field_name="energy_amount"), self.get_rate(peak))


def price_at(energy: Decimal, rate: Decimal) -> Decimal:
    """Value ``energy`` kWh at ``rate``, rounded half-up to cents."""

    with ledger_arithmetic("Energy price"):
        return (energy * rate).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)
