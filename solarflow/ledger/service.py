"""Mini README: LedgerService, the single entry point for ledger consumers.

Structure:
    * LedgerService - owns one registry, rate table, log and lock, and wires
      the transfer, distribution and query engines on top of them.
    * DEFAULT_OWNER - user assigned to devices added without an owner.

Each service instance is an isolated ledger; there is no module level
state, so tests and applications construct (or inject) their own handle.
Constructing a service without explicit devices seeds the demo dataset,
mirroring how the dashboard previews behave out of the box.
"""

from __future__ import annotations

import threading
from datetime import timedelta
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Sequence

from .distribution import DistributionEngine, DistributionMode
from .engine import Clock, TransactionIdGenerator, TransferEngine, utc_now
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
    ensure_utc,
)
from .query import QueryService, build_filter
from .rates import RateTable
from .registry import DeviceRegistry
from ..configuration import SolarFlowSettings
from ..errors import DeviceNotFound, UserNotFound, ValidationError
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

DEFAULT_OWNER = "user1"


class LedgerService:
    """Facade exposing the ledger operations to the interface layer."""

    def __init__(
        self,
        devices: Optional[Iterable[Device]] = None,
        transactions: Optional[Iterable[Transaction]] = None,
        users: Optional[Iterable[User]] = None,
        *,
        rates: Optional[RateTable] = None,
        clock: Optional[Clock] = None,
        id_generator: Optional[Callable[[], str]] = None,
        currency_symbol: str = "KRNL",
    ) -> None:
        self._lock = threading.RLock()
        self._clock = clock or utc_now
        self._next_id = id_generator or TransactionIdGenerator()
        self.currency_symbol = currency_symbol

        self.rates = rates or RateTable(lock=self._lock)
        self.registry = DeviceRegistry(devices, lock=self._lock)
        self.log = TransactionLog(transactions, lock=self._lock)
        self._users = {user.user_id: user for user in (users if users is not None else _demo_users())}

        self.transfers = TransferEngine(
            self.registry,
            self.log,
            lock=self._lock,
            clock=self._clock,
            id_generator=self._next_id,
        )
        self.distributions = DistributionEngine(self.transfers)
        self.queries = QueryService(self.registry, self.log, self.rates, lock=self._lock)

        if devices is None:
            self._seed_demo_data(include_transactions=transactions is None)
        LOGGER.debug(
            "Ledger service initialised with %s devices and %s transactions",
            len(self.registry),
            len(self.log),
        )

    @classmethod
    def from_settings(cls, settings: SolarFlowSettings) -> "LedgerService":
        """Build a service using configured rates and demo seeding preference."""

        return cls(
            devices=None if settings.seed_demo_data else [],
            rates=RateTable(settings.standard_rate, settings.peak_rate),
            currency_symbol=settings.currency_symbol,
        )

    def _seed_demo_data(self, *, include_transactions: bool) -> None:
        """Populate the ledger with the deterministic demo devices."""

        for device in _demo_devices():
            self.registry.register(device)
        if include_transactions:
            self.log.append(
                Transaction(
                    transaction_id=self._next_id(),
                    from_address="0x1234...5678",
                    to_address="0x8765...4321",
                    amount=Decimal("25"),
                    timestamp=ensure_utc(self._clock()) - timedelta(days=1),
                    transaction_type=TransactionType.ENERGY_SALE,
                    energy_amount=Decimal("50"),
                )
            )

    # Devices

    def add_device(
        self,
        address: str,
        name: str,
        device_type: DeviceType | str,
        initial_balance: object,
        owner: Optional[str] = None,
    ) -> Device:
        return self.registry.add_device(address, name, device_type, initial_balance, owner or DEFAULT_OWNER)

    def set_device_status(self, address: str, status: DeviceStatus | str) -> None:
        self.registry.set_status(address, status)

    def list_devices(self, status: Optional[DeviceStatus | str] = None) -> List[Device]:
        """Return devices in registration order, optionally filtered by status."""

        devices = self.registry.list()
        if status is None:
            return devices
        wanted = DeviceStatus.from_str(status)
        return [device for device in devices if device.status is wanted]

    def get_device(self, address: str) -> Device:
        device = self.registry.get(address)
        if device is None:
            raise DeviceNotFound(address)
        return device

    def get_device_balance(self, address: str) -> Decimal:
        """Balance of ``address``; unregistered counterparties hold nothing."""

        device = self.registry.get(address)
        return device.balance if device is not None else Decimal("0")

    def format_balance(self, address: str) -> str:
        return f"{self.get_device_balance(address)} {self.currency_symbol}"

    # Transfers

    def send_payment(
        self,
        from_address: str,
        to_address: str,
        amount: object,
        transaction_type: TransactionType | str = TransactionType.PAYMENT,
        energy_amount: Optional[object] = None,
    ) -> str:
        """Transfer value and return the new transaction id."""

        transaction = self.transfers.transfer(
            from_address, to_address, amount, transaction_type, energy_amount
        )
        return transaction.transaction_id

    def sell_energy(
        self,
        buyer_address: str,
        seller_address: str,
        energy_amount: object,
        peak: bool = False,
    ) -> Transaction:
        """Charge the buyer for ``energy_amount`` kWh at the live rate and pay the seller."""

        amount = self.rates.price_energy(energy_amount, peak)
        return self.transfers.transfer(
            buyer_address,
            seller_address,
            amount,
            TransactionType.ENERGY_SALE,
            energy_amount,
        )

    def distribute_revenue(
        self,
        from_address: str,
        to_addresses: Sequence[str],
        total_amount: object,
        mode: DistributionMode | str = DistributionMode.EQUAL,
        weights: Optional[Sequence[object]] = None,
    ) -> List[str]:
        transactions = self.distributions.distribute(
            from_address, to_addresses, total_amount, mode, weights
        )
        return [transaction.transaction_id for transaction in transactions]

    # Queries

    def get_transactions(
        self,
        transaction_filter: Optional[TransactionFilter] = None,
        **criteria: object,
    ) -> List[Transaction]:
        """Filter the log, newest first.

        Accepts either a ``TransactionFilter`` or the keyword criteria
        ``address``, ``transaction_type``, ``from_date`` and ``to_date``,
        not both.
        """

        if transaction_filter is not None and criteria:
            raise ValidationError(
                "Pass either a TransactionFilter or keyword criteria, not both: "
                + ", ".join(sorted(criteria))
            )
        if transaction_filter is None:
            transaction_filter = build_filter(**criteria)
        return self.queries.query(transaction_filter)

    def get_summary(self) -> SummaryStats:
        return self.queries.summary()

    def get_rate(self, peak: bool = False) -> Decimal:
        return self.rates.get_rate(peak)

    def set_rate(self, value: object, peak: bool = False) -> None:
        self.rates.set_rate(value, peak)

    # Users

    def list_users(self) -> List[User]:
        return list(self._users.values())

    def get_user(self, user_id: str) -> User:
        try:
            return self._users[user_id]
        except KeyError as error:
            raise UserNotFound(user_id) from error


def _demo_devices() -> List[Device]:
    return [
        Device(
            address="0x1234...5678",
            name="Home Solar Panel",
            device_type=DeviceType.SOLAR_PANEL,
            balance=Decimal("100"),
            owner="user1",
            status=DeviceStatus.ACTIVE,
            energy_produced=Decimal("250"),
        ),
        Device(
            address="0x8765...4321",
            name="EV Charger",
            device_type=DeviceType.EV_CHARGER,
            balance=Decimal("50"),
            owner="user1",
            status=DeviceStatus.ACTIVE,
            energy_consumed=Decimal("120"),
        ),
        Device(
            address="0xabcd...efgh",
            name="Grid Buyback",
            device_type=DeviceType.GRID,
            balance=Decimal("0"),
            owner="user2",
            status=DeviceStatus.INACTIVE,
        ),
    ]


def _demo_users() -> List[User]:
    return [
        User(user_id="user1", name="Admin User", role=UserRole.ADMIN),
        User(user_id="user2", name="Viewer User", role=UserRole.VIEWER),
    ]
