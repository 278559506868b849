"""Mini README: Tests for equal and weighted revenue distribution.

Structure:
    * test_equal_split_pays_each_recipient_the_same - equal mode shares.
    * test_weighted_split_follows_weights - weighted mode shares.
    * test_zero_weight_sum_commits_nothing - zero weights fail before any transfer.
    * test_structural_errors_are_raised_up_front - empty lists, mismatched
      weights and unknown modes.
    * test_equal_split_of_non_terminating_division_is_approximate - 100 / 3.
    * test_failure_part_way_keeps_committed_transfers - best effort semantics.
    * test_overflowing_weighted_shares_commit_nothing - share overflow is caught
      while splitting.
    * test_overflowing_credit_stops_distribution_with_committed_transfers - a
      transfer overflow surfaces as a partial distribution.
"""

from __future__ import annotations

from decimal import Decimal
from itertools import chain, count

import pytest

from solarflow.errors import (
    AmountOverflow,
    EmptyRecipientList,
    PartialDistributionError,
    WeightCountMismatch,
    ZeroWeightSum,
)
from solarflow.ledger import LedgerService, TransactionType, split_amount


@pytest.fixture
def funded(ledger):
    ledger.add_device("0xpool", "Community Pool", "battery", 100)
    for address in ("0xw", "0xx", "0xy", "0xz"):
        ledger.add_device(address, address, "home", 0)
    return ledger


def test_equal_split_pays_each_recipient_the_same(funded) -> None:
    ids = funded.distribute_revenue("0xpool", ["0xw", "0xx", "0xy", "0xz"], "100")

    transactions = funded.get_transactions(transaction_type="distribution")
    assert len(ids) == 4
    assert {transaction.transaction_id for transaction in transactions} == set(ids)
    assert all(transaction.amount == Decimal("25.00") for transaction in transactions)
    assert all(transaction.transaction_type is TransactionType.DISTRIBUTION for transaction in transactions)
    assert funded.get_device_balance("0xpool") == Decimal("0")
    assert funded.get_device_balance("0xz") == Decimal("25")


def test_weighted_split_follows_weights(funded) -> None:
    funded.distribute_revenue("0xpool", ["0xx", "0xy"], 100, "weighted", [1, 3])

    assert funded.get_device_balance("0xx") == Decimal("25.00")
    assert funded.get_device_balance("0xy") == Decimal("75.00")


def test_zero_weight_sum_commits_nothing(funded) -> None:
    with pytest.raises(ZeroWeightSum):
        funded.distribute_revenue("0xpool", ["0xx", "0xy"], 100, "weighted", [0, 0])
    with pytest.raises(ArithmeticError):
        funded.distribute_revenue("0xpool", ["0xx", "0xy"], 100, "weighted", ["0", "0.0"])

    assert funded.get_transactions() == []
    assert funded.get_device_balance("0xpool") == Decimal("100")


def test_structural_errors_are_raised_up_front(funded) -> None:
    with pytest.raises(EmptyRecipientList):
        funded.distribute_revenue("0xpool", [], 100)
    with pytest.raises(WeightCountMismatch):
        funded.distribute_revenue("0xpool", ["0xx", "0xy"], 100, "weighted", [1])
    with pytest.raises(WeightCountMismatch):
        funded.distribute_revenue("0xpool", ["0xx"], 100, "weighted")
    with pytest.raises(ValueError):
        funded.distribute_revenue("0xpool", ["0xx"], 100, "lottery")

    assert funded.get_transactions() == []


def test_equal_split_of_non_terminating_division_is_approximate() -> None:
    shares = split_amount("100", 3)

    assert len(shares) == 3
    assert shares[0] == shares[1] == shares[2]
    assert abs(sum(shares) - Decimal("100")) < Decimal("1e-20")


def test_failure_part_way_keeps_committed_transfers(clock) -> None:
    ids = chain(["txn_a", "txn_b", "txn_a"], (f"txn_{n}" for n in count()))
    service = LedgerService(devices=[], clock=clock, id_generator=lambda: next(ids))
    service.add_device("0xpool", "Pool", "battery", 90)
    for address in ("0xx", "0xy", "0xz"):
        service.add_device(address, address, "home", 0)

    with pytest.raises(PartialDistributionError) as excinfo:
        service.distribute_revenue("0xpool", ["0xx", "0xy", "0xz"], 90)

    assert [transaction.transaction_id for transaction in excinfo.value.committed] == ["txn_a", "txn_b"]
    assert service.get_device_balance("0xx") == Decimal("30")
    assert service.get_device_balance("0xy") == Decimal("30")
    assert service.get_device_balance("0xz") == Decimal("0")
    assert service.get_device_balance("0xpool") == Decimal("30")


def test_overflowing_weighted_shares_commit_nothing(funded) -> None:
    with pytest.raises(AmountOverflow):
        funded.distribute_revenue("0xpool", ["0xx", "0xy"], "9e999999", "weighted", ["9e999999", "1"])

    assert funded.get_transactions() == []
    assert funded.get_device_balance("0xpool") == Decimal("100")


def test_overflowing_credit_stops_distribution_with_committed_transfers(ledger) -> None:
    ledger.add_device("0xpool", "Pool", "battery", 100)
    ledger.add_device("0xx", "Small", "home", 0)
    ledger.add_device("0xy", "Vault", "battery", "9e999999")

    with pytest.raises(PartialDistributionError) as excinfo:
        ledger.distribute_revenue("0xpool", ["0xx", "0xy"], "9e999999")

    assert [transaction.to_address for transaction in excinfo.value.committed] == ["0xx"]
    assert isinstance(excinfo.value.__cause__, AmountOverflow)
    assert ledger.get_device_balance("0xx") == Decimal("4.5e999999")
    assert ledger.get_device_balance("0xy") == Decimal("9e999999")
    assert ledger.get_device_balance("0xpool") == Decimal("0")
    assert len(ledger.get_transactions()) == 1
