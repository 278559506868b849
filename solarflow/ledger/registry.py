"""Mini README: Device registry owning devices, balances and statuses.

Structure:
    * DeviceRegistry - insertion-ordered store keyed by unique address.

Devices are never removed. Balances change only through ``adjust_balance``
(called by the transfer engine) and statuses only through ``set_status``.
Readers receive detached copies so they never observe a half-applied
update.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .models import Device, DeviceStatus, DeviceType, ledger_arithmetic, to_decimal
from ..errors import DeviceNotFound, DuplicateAddress, ValidationError
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

_ZERO = Decimal("0")


class DeviceRegistry:
    """Mapping of address to device guarded by the ledger lock."""

    def __init__(
        self,
        devices: Optional[Iterable[Device]] = None,
        *,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._lock = lock if lock is not None else threading.RLock()
        self._devices: Dict[str, Device] = {}
        for device in devices or ():
            self.register(device)
        LOGGER.debug("Device registry initialised with %s devices", len(self._devices))

    def register(self, device: Device) -> None:
        """Validate and store a copy of ``device`` ensuring addresses remain unique."""

        stored = _normalise(device)
        with self._lock:
            if stored.address in self._devices:
                raise DuplicateAddress(stored.address)
            self._devices[stored.address] = stored

    def add_device(
        self,
        address: str,
        name: str,
        device_type: DeviceType | str,
        initial_balance: object,
        owner: str,
    ) -> Device:
        """Register a new active device and return a copy of it."""

        device_type = DeviceType.from_str(device_type)
        device = Device(
            address=address,
            name=name,
            device_type=device_type,
            balance=to_decimal(initial_balance, field_name="initial_balance"),
            owner=owner,
            status=DeviceStatus.ACTIVE,
            energy_produced=_ZERO if device_type.tracks_production else None,
            energy_consumed=_ZERO if device_type.tracks_consumption else None,
        )
        self.register(device)
        LOGGER.info("Registered %s device %s (%s)", device_type.value, address, name)
        return replace(device)

    def set_status(self, address: str, status: DeviceStatus | str) -> None:
        status = DeviceStatus.from_str(status)
        with self._lock:
            device = self._devices.get(address)
            if device is None:
                raise DeviceNotFound(address)
            device.status = status
        LOGGER.info("Device %s is now %s", address, status.value)

    def get(self, address: str) -> Optional[Device]:
        with self._lock:
            device = self._devices.get(address)
            return replace(device) if device is not None else None

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._devices

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)

    def list(self) -> List[Device]:
        """Return copies of all devices in registration order."""

        with self._lock:
            return [replace(device) for device in self._devices.values()]

    def projected_balance(self, address: str, delta: Decimal) -> Decimal:
        """Balance ``adjust_balance`` would produce, without changing anything."""

        with self._lock:
            device = self._devices.get(address)
            if device is None:
                raise DeviceNotFound(address)
            return _clamped_sum(device.balance, delta)

    def adjust_balance(self, address: str, delta: Decimal) -> Decimal:
        """Apply ``delta`` to a balance, clamping the result at zero."""

        with self._lock:
            device = self._devices.get(address)
            if device is None:
                raise DeviceNotFound(address)
            device.balance = _clamped_sum(device.balance, delta)
            return device.balance


def _clamped_sum(balance: Decimal, delta: Decimal) -> Decimal:
    with ledger_arithmetic("Balance"):
        return max(_ZERO, balance + delta)


def _normalise(device: Device) -> Device:
    """Return a detached copy of ``device`` with validated fields."""

    if not device.address or not str(device.address).strip():
        raise ValidationError("Device address is required")
    if not device.name or not str(device.name).strip():
        raise ValidationError("Device name is required")
    return replace(
        device,
        device_type=DeviceType.from_str(device.device_type),
        status=DeviceStatus.from_str(device.status),
        balance=to_decimal(device.balance, field_name="balance"),
        energy_produced=_optional_decimal(device.energy_produced, "energy_produced"),
        energy_consumed=_optional_decimal(device.energy_consumed, "energy_consumed"),
    )


def _optional_decimal(value: object, field_name: str) -> Optional[Decimal]:
    return None if value is None else to_decimal(value, field_name=field_name)
