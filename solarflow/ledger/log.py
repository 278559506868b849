"""Mini README: Append-only transaction log.

Structure:
    * TransactionLog - ordered record of completed transfers.

Entries are kept in append order. Sorting for display happens in the
query service, never here.
"""

from __future__ import annotations

import threading
from typing import Iterable, List, Optional, Set

from .models import Transaction
from ..errors import ValidationError


class TransactionLog:
    """Insertion-ordered list of immutable transactions."""

    def __init__(
        self,
        transactions: Optional[Iterable[Transaction]] = None,
        *,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._lock = lock if lock is not None else threading.RLock()
        self._entries: List[Transaction] = []
        self._ids: Set[str] = set()
        for transaction in transactions or ():
            self.append(transaction)

    def append(self, transaction: Transaction) -> None:
        with self._lock:
            if transaction.transaction_id in self._ids:
                raise ValidationError(f"Transaction {transaction.transaction_id} already exists.")
            self._ids.add(transaction.transaction_id)
            self._entries.append(transaction)

    def all(self) -> List[Transaction]:
        """Return a snapshot of every entry in append order."""

        with self._lock:
            return list(self._entries)

    def __contains__(self, transaction_id: object) -> bool:
        with self._lock:
            return transaction_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
