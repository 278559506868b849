"""Mini README: Ledger and transaction engine for peer-to-peer energy trading.

The package is divided into ``models`` for shared records, ``registry``,
``rates`` and ``log`` for the owned state, ``engine`` and ``distribution``
for value movement, ``query`` for reporting, and ``service`` for the facade
consumers talk to.
"""

from .distribution import DistributionEngine, DistributionMode, split_amount
from .engine import TransactionIdGenerator, TransferEngine
from .log import TransactionLog
from .models import (
    Device,
    DeviceStatus,
    DeviceType,
    SummaryStats,
    Transaction,
    TransactionFilter,
    TransactionType,
    User,
    UserRole,
)
from .query import QueryService
from .rates import RateTable
from .registry import DeviceRegistry
from .service import LedgerService

__all__ = [
    "Device",
    "DeviceRegistry",
    "DeviceStatus",
    "DeviceType",
    "DistributionEngine",
    "DistributionMode",
    "LedgerService",
    "QueryService",
    "RateTable",
    "SummaryStats",
    "Transaction",
    "TransactionFilter",
    "TransactionIdGenerator",
    "TransactionLog",
    "TransactionType",
    "TransferEngine",
    "User",
    "UserRole",
    "split_amount",
]
