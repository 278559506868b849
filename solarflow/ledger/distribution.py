"""Mini README: Revenue distribution across several recipients.

Structure:
    * DistributionMode - equal or weighted splitting.
    * split_amount - pure share computation, validated up front.
    * DistributionEngine - issues one ``distribution`` transfer per recipient.

Distributions are best effort rather than all-or-nothing. Every input
check (recipients, weights, zero weight sum, amount) runs before the first
transfer. If a transfer still fails part way, the transfers already made
stay committed and ``PartialDistributionError`` reports them.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Sequence

from .engine import TransferEngine
from .models import ChoiceEnum, Transaction, TransactionType, ledger_arithmetic, to_decimal
from ..errors import (
    EmptyRecipientList,
    LedgerError,
    PartialDistributionError,
    WeightCountMismatch,
    ZeroWeightSum,
)
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class DistributionMode(ChoiceEnum):
    EQUAL = "equal"
    WEIGHTED = "weighted"


def split_amount(
    total_amount: object,
    recipients: int,
    mode: DistributionMode | str = DistributionMode.EQUAL,
    weights: Optional[Sequence[object]] = None,
) -> List[Decimal]:
    """Return the share owed to each recipient.

    Shares are plain decimal quotients and may not sum exactly to the total
    when the division does not terminate (100 / 3, for example).
    """

    total = to_decimal(total_amount, field_name="total_amount")
    mode = DistributionMode.from_str(mode)
    if recipients == 0:
        raise EmptyRecipientList()

    if mode is DistributionMode.EQUAL:
        with ledger_arithmetic("Distribution share"):
            share = total / recipients
        return [share] * recipients

    weights = list(weights or ())
    if len(weights) != recipients:
        raise WeightCountMismatch(recipients, len(weights))
    parsed = [to_decimal(weight, field_name="weight") for weight in weights]
    with ledger_arithmetic("Distribution weights"):
        weight_sum = sum(parsed, Decimal("0"))
    if weight_sum == 0:
        raise ZeroWeightSum()
    with ledger_arithmetic("Distribution share"):
        return [total * weight / weight_sum for weight in parsed]


class DistributionEngine:
    """Split a payout into independent transfers."""

    def __init__(self, transfers: TransferEngine) -> None:
        self._transfers = transfers

    def distribute(
        self,
        from_address: str,
        to_addresses: Sequence[str],
        total_amount: object,
        mode: DistributionMode | str = DistributionMode.EQUAL,
        weights: Optional[Sequence[object]] = None,
    ) -> List[Transaction]:
        recipients = list(to_addresses)
        shares = split_amount(total_amount, len(recipients), mode, weights)

        committed: List[Transaction] = []
        for to_address, share in zip(recipients, shares):
            try:
                transaction = self._transfers.transfer(
                    from_address, to_address, share, TransactionType.DISTRIBUTION
                )
            except (LedgerError, ArithmeticError) as error:
                LOGGER.error(
                    "Distribution from %s stopped after %s of %s transfers: %s",
                    from_address,
                    len(committed),
                    len(recipients),
                    error,
                )
                raise PartialDistributionError(
                    f"Distribution stopped at recipient {to_address}: {error}", committed
                ) from error
            committed.append(transaction)

        LOGGER.info(
            "Distributed %s from %s across %s recipients",
            total_amount,
            from_address,
            len(recipients),
        )
        return committed
