"""Mini README: Read-side queries over the registry and transaction log.

Structure:
    * QueryService.summary - totals recomputed from fresh snapshots, with
      energy valued at the live standard rate.
    * QueryService.query - filtered transactions, newest first.

Both operations work on copies taken under the ledger lock, so they see a
consistent state without blocking writers for longer than the copy.
"""

from __future__ import annotations

import threading
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from .log import TransactionLog
from .models import (
    SummaryStats,
    Transaction,
    TransactionFilter,
    TransactionType,
    ledger_arithmetic,
)
from .rates import RateTable, price_at
from .registry import DeviceRegistry
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


def build_filter(
    address: Optional[str] = None,
    transaction_type: Optional[TransactionType | str] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
) -> TransactionFilter:
    """Normalise loose filter arguments into a ``TransactionFilter``."""

    return TransactionFilter(
        address=address or None,
        transaction_type=transaction_type or None,
        from_date=from_date,
        to_date=to_date,
    )


class QueryService:
    """Aggregate and filter ledger state for reporting."""

    def __init__(
        self,
        registry: DeviceRegistry,
        log: TransactionLog,
        rates: RateTable,
        *,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._registry = registry
        self._log = log
        self._rates = rates
        self._lock = lock if lock is not None else threading.RLock()

    def summary(self) -> SummaryStats:
        with self._lock:
            devices = self._registry.list()
            transaction_count = len(self._log)
            rate = self._rates.get_rate()

        zero = Decimal("0")
        with ledger_arithmetic("Summary totals"):
            total_balance = sum((device.balance for device in devices), zero)
            produced = sum(
                (device.energy_produced for device in devices if device.energy_produced is not None),
                zero,
            )
            consumed = sum(
                (device.energy_consumed for device in devices if device.energy_consumed is not None),
                zero,
            )
        stats = SummaryStats(
            total_devices=len(devices),
            active_devices=sum(1 for device in devices if device.is_active),
            total_balance=total_balance,
            total_transactions=transaction_count,
            total_energy_produced=produced,
            total_energy_consumed=consumed,
            energy_rate=rate,
            energy_produced_value=price_at(produced, rate),
            energy_consumed_value=price_at(consumed, rate),
        )
        LOGGER.debug("Summary computed: %s", stats)
        return stats

    def query(self, transaction_filter: Optional[TransactionFilter] = None) -> List[Transaction]:
        """Return matching transactions sorted by timestamp, newest first.

        Entries sharing a timestamp are returned most recently appended first.
        """

        transaction_filter = transaction_filter or TransactionFilter()
        indexed = [
            (position, transaction)
            for position, transaction in enumerate(self._log.all())
            if transaction_filter.matches(transaction)
        ]
        indexed.sort(key=lambda pair: (pair[1].timestamp, pair[0]), reverse=True)
        LOGGER.debug("Query %s matched %s transactions", transaction_filter, len(indexed))
        return [transaction for _, transaction in indexed]
