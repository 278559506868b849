"""Mini README: Error taxonomy raised by the SolarFlow ledger.

Structure:
    * LedgerError - base class for every engine failure.
    * NotFoundError - a required device or user could not be resolved.
    * ValidationError - malformed input rejected before any state changes.
    * LedgerArithmeticError - arithmetic failures such as zero weight sums or
      results too large to represent.
    * PartialDistributionError - a distribution stopped after paying some recipients.

The concrete classes also derive from the matching builtin exceptions
(``KeyError``, ``ValueError``, ``ArithmeticError``) so callers written
against plain Python errors keep working.
"""

from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .ledger.models import Transaction


class LedgerError(Exception):
    """Base class for ledger failures."""


class NotFoundError(LedgerError, KeyError):
    """A resource required by the operation does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep messages readable instead.
        return str(self.args[0]) if self.args else ""


class DeviceNotFound(NotFoundError):
    def __init__(self, address: str) -> None:
        super().__init__(f"Device {address} not found")
        self.address = address


class UserNotFound(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class ValidationError(LedgerError, ValueError):
    """Input was missing or malformed; nothing was changed."""


class DuplicateAddress(ValidationError):
    def __init__(self, address: str) -> None:
        super().__init__(f"Device {address} is already registered")
        self.address = address


class InvalidAmount(ValidationError):
    """Amounts must be finite, non-negative decimals."""


class InvalidChoice(ValidationError):
    """A value fell outside one of the enumerated vocabularies."""


class EmptyRecipientList(ValidationError):
    def __init__(self) -> None:
        super().__init__("A distribution needs at least one recipient")


class WeightCountMismatch(ValidationError):
    def __init__(self, recipients: int, weights: int) -> None:
        super().__init__(
            f"Weighted distribution expects {recipients} weights, received {weights}"
        )
        self.recipients = recipients
        self.weights = weights


class LedgerArithmeticError(LedgerError, ArithmeticError):
    """Arithmetic on the supplied values is undefined."""


class ZeroWeightSum(LedgerArithmeticError):
    def __init__(self) -> None:
        super().__init__("Distribution weights sum to zero")


class AmountOverflow(LedgerArithmeticError):
    """A balance, share or price falls outside the supported decimal range."""


class PartialDistributionError(LedgerError):
    """A distribution failed part way; earlier transfers remain committed."""

    def __init__(self, message: str, committed: Sequence["Transaction"]) -> None:
        super().__init__(message)
        self.committed = list(committed)
