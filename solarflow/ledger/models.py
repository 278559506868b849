"""Mini README: Data models shared by the SolarFlow ledger components.

Structure:
    * DeviceType / DeviceStatus / TransactionType / UserRole - vocabularies.
    * Device - registered participant holding a balance.
    * Transaction - immutable record of one value movement.
    * User - static reference data describing device owners.
    * TransactionFilter - conjunction of optional query predicates.
    * SummaryStats - aggregate totals for dashboards.
    * to_decimal - coerce user supplied amounts into ``Decimal`` values.
    * ledger_arithmetic - run arithmetic in ``LEDGER_CONTEXT``.

Every model exposes ``as_dict`` so the interface layer can return JSON
without knowing about ``Decimal`` or ``datetime`` values.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import (
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DecimalException,
    DivisionByZero,
    InvalidOperation,
    Overflow,
    localcontext,
)
from enum import Enum
from typing import Dict, Iterator, Optional, Type, TypeVar

from ..errors import AmountOverflow, InvalidAmount, InvalidChoice

# Context for all balance, share and price arithmetic; overflow always traps.
LEDGER_CONTEXT = Context(
    prec=28,
    rounding=ROUND_HALF_EVEN,
    Emax=999_999,
    Emin=-999_999,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

_E = TypeVar("_E", bound="ChoiceEnum")


class ChoiceEnum(str, Enum):
    """String enum accepting arbitrary casing when parsed."""

    @classmethod
    def from_str(cls: Type[_E], value: object) -> _E:
        """Coerce a raw value into a member, raising ``InvalidChoice`` otherwise."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as error:
            raise InvalidChoice(f"Unsupported {cls.__name__}: {value}") from error


class DeviceType(ChoiceEnum):
    SOLAR_PANEL = "solar_panel"
    BATTERY = "battery"
    EV_CHARGER = "ev_charger"
    HOME = "home"
    GRID = "grid"

    @property
    def tracks_production(self) -> bool:
        return self is DeviceType.SOLAR_PANEL

    @property
    def tracks_consumption(self) -> bool:
        return self in (DeviceType.EV_CHARGER, DeviceType.HOME)


class DeviceStatus(ChoiceEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class TransactionType(ChoiceEnum):
    PAYMENT = "payment"
    ENERGY_SALE = "energy_sale"
    DISTRIBUTION = "distribution"
    SUBSIDY = "subsidy"


class UserRole(ChoiceEnum):
    ADMIN = "admin"
    VIEWER = "viewer"


def to_decimal(value: object, *, field_name: str = "amount") -> Decimal:
    """Parse ``value`` into a finite, non-negative ``Decimal``.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.
    """

    if isinstance(value, bool) or value is None:
        raise InvalidAmount(f"{field_name} must be a decimal number, got {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        parsed = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as error:
        raise InvalidAmount(f"{field_name} must be a decimal number, got {value!r}") from error
    if not parsed.is_finite():
        raise InvalidAmount(f"{field_name} must be finite, got {value!r}")
    if parsed < 0:
        raise InvalidAmount(f"{field_name} must not be negative, got {value!r}")
    if parsed and parsed.adjusted() > LEDGER_CONTEXT.Emax:
        raise InvalidAmount(f"{field_name} is too large, got {value!r}")
    return parsed


@contextmanager
def ledger_arithmetic(operation: str) -> Iterator[None]:
    """Run decimal arithmetic in ``LEDGER_CONTEXT``, reporting traps as ``AmountOverflow``."""

    try:
        with localcontext(LEDGER_CONTEXT):
            yield
    except DecimalException as error:
        raise AmountOverflow(f"{operation} is outside the supported decimal range") from error


@dataclass(slots=True)
class Device:
    """A registered producer, consumer, storage unit or grid interface."""

    address: str
    name: str
    device_type: DeviceType
    balance: Decimal
    owner: str
    status: DeviceStatus = DeviceStatus.ACTIVE
    energy_produced: Optional[Decimal] = None
    energy_consumed: Optional[Decimal] = None

    @property
    def is_active(self) -> bool:
        return self.status is DeviceStatus.ACTIVE

    def as_dict(self) -> Dict[str, object]:
        """Export the device with serialisable values."""

        payload: Dict[str, object] = {
            "address": self.address,
            "name": self.name,
            "type": self.device_type.value,
            "balance": str(self.balance),
            "status": self.status.value,
            "owner": self.owner,
        }
        if self.energy_produced is not None:
            payload["energy_produced"] = str(self.energy_produced)
        if self.energy_consumed is not None:
            payload["energy_consumed"] = str(self.energy_consumed)
        return payload


@dataclass(frozen=True, slots=True)
class Transaction:
    """Immutable record of a transfer; ``amount`` is the requested value."""

    transaction_id: str
    from_address: str
    to_address: str
    amount: Decimal
    timestamp: datetime
    transaction_type: TransactionType
    energy_amount: Optional[Decimal] = None

    def involves(self, address: str) -> bool:
        return address in (self.from_address, self.to_address)

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "id": self.transaction_id,
            "from_address": self.from_address,
            "to_address": self.to_address,
            "amount": str(self.amount),
            "timestamp": self.timestamp.isoformat(),
            "type": self.transaction_type.value,
        }
        if self.energy_amount is not None:
            payload["energy_amount"] = str(self.energy_amount)
        return payload


@dataclass(frozen=True, slots=True)
class User:
    """Device owner. Roles are descriptive only and never enforced."""

    user_id: str
    name: str
    role: UserRole

    def as_dict(self) -> Dict[str, object]:
        return {"id": self.user_id, "name": self.name, "role": self.role.value}


@dataclass(frozen=True, slots=True)
class TransactionFilter:
    """Optional predicates combined with logical AND; bounds are inclusive."""

    address: Optional[str] = None
    transaction_type: Optional[TransactionType] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.transaction_type is not None:
            object.__setattr__(self, "transaction_type", TransactionType.from_str(self.transaction_type))
        for bound in ("from_date", "to_date"):
            value = getattr(self, bound)
            if value is not None:
                object.__setattr__(self, bound, ensure_utc(value))

    def matches(self, transaction: Transaction) -> bool:
        if self.address is not None and not transaction.involves(self.address):
            return False
        if self.transaction_type is not None and transaction.transaction_type is not self.transaction_type:
            return False
        if self.from_date is not None and transaction.timestamp < self.from_date:
            return False
        if self.to_date is not None and transaction.timestamp > self.to_date:
            return False
        return True


@dataclass(frozen=True, slots=True)
class SummaryStats:
    """Aggregate snapshot of registry and log totals, energy valued at the standard rate."""

    total_devices: int
    active_devices: int
    total_balance: Decimal
    total_transactions: int
    total_energy_produced: Decimal
    total_energy_consumed: Decimal
    energy_rate: Decimal
    energy_produced_value: Decimal
    energy_consumed_value: Decimal

    def as_dict(self) -> Dict[str, object]:
        return {
            "total_devices": self.total_devices,
            "active_devices": self.active_devices,
            "total_balance": str(self.total_balance),
            "total_transactions": self.total_transactions,
            "total_energy_produced": str(self.total_energy_produced),
            "total_energy_consumed": str(self.total_energy_consumed),
            "energy_rate": str(self.energy_rate),
            "energy_produced_value": str(self.energy_produced_value),
            "energy_consumed_value": str(self.energy_consumed_value),
        }


def ensure_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix awareness."""

    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
