"""Mini README: Transfer engine moving value between two devices.

Structure:
    * TransactionIdGenerator - collision-free identifiers (counter + random suffix).
    * TransferEngine - atomic debit, credit and log append.

A transfer runs under the shared ledger lock from the first balance read to
the log append, so concurrent transfers touching the same device never
interleave. Either side may be an unregistered counterparty (an external
market, say); that side's balance update is skipped. An underfunded source
is debited down to zero while the log still records the requested amount.
"""

from __future__ import annotations

import itertools
import secrets
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from .log import TransactionLog
from .models import Transaction, TransactionType, ensure_utc, to_decimal
from .registry import DeviceRegistry
from ..errors import ValidationError
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TransactionIdGenerator:
    """Produce ``txn_<sequence>_<random>`` identifiers that are never reused."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            sequence = next(self._counter)
        return f"txn_{sequence:06d}_{secrets.token_hex(4)}"


class TransferEngine:
    """Apply transfers to the registry and record them in the log."""

    def __init__(
        self,
        registry: DeviceRegistry,
        log: TransactionLog,
        *,
        lock: Optional[threading.RLock] = None,
        clock: Optional[Clock] = None,
        id_generator: Optional[Callable[[], str]] = None,
    ) -> None:
        self._registry = registry
        self._log = log
        self._lock = lock if lock is not None else threading.RLock()
        self._clock = clock or utc_now
        self._next_id = id_generator or TransactionIdGenerator()

    def transfer(
        self,
        from_address: str,
        to_address: str,
        amount: object,
        transaction_type: TransactionType | str = TransactionType.PAYMENT,
        energy_amount: Optional[object] = None,
    ) -> Transaction:
        """Move ``amount`` from one address to another and return the record."""

        value = to_decimal(amount)
        transaction_type = TransactionType.from_str(transaction_type)
        energy = None if energy_amount is None else to_decimal(energy_amount, field_name="energy_amount")

        with self._lock:
            transaction_id = self._next_id()
            if transaction_id in self._log:
                raise ValidationError(f"Transaction id {transaction_id} was already issued")
            timestamp = ensure_utc(self._clock())
            debit_source = from_address in self._registry
            credit_target = to_address in self._registry
            # Both sides are computed before either is written.
            if debit_source:
                self._registry.projected_balance(from_address, value.copy_negate())
            if credit_target:
                self._registry.projected_balance(to_address, value)

            if debit_source:
                available = self._registry.get(from_address).balance
                self._registry.adjust_balance(from_address, value.copy_negate())
                if available < value:
                    LOGGER.warning(
                        "Device %s debited %s of requested %s (insufficient balance)",
                        from_address,
                        available,
                        value,
                    )
            if credit_target:
                self._registry.adjust_balance(to_address, value)
            transaction = Transaction(
                transaction_id=transaction_id,
                from_address=from_address,
                to_address=to_address,
                amount=value,
                timestamp=timestamp,
                transaction_type=transaction_type,
                energy_amount=energy,
            )
            self._log.append(transaction)

        LOGGER.info(
            "Recorded %s %s: %s -> %s amount=%s",
            transaction.transaction_type.value,
            transaction.transaction_id,
            from_address,
            to_address,
            value,
        )
        return transaction


__all__ = ["Clock", "TransactionIdGenerator", "TransferEngine", "utc_now"]
