"""Mini README: Tests for transaction queries and dashboard summaries.

Structure:
    * test_no_filter_returns_everything_newest_first - default ordering.
    * test_type_filter_returns_only_that_type - type predicate.
    * test_address_filter_matches_either_side - sender or recipient.
    * test_date_bounds_are_inclusive - both bounds included.
    * test_filters_compose_as_conjunction - predicates combine with AND.
    * test_naive_bounds_are_treated_as_utc - naive datetimes read as UTC.
    * test_unknown_type_filter_is_rejected - unsupported types raise.
    * test_equal_timestamps_list_latest_append_first - tie break on append order.
    * test_summary_totals - counts and balance totals.
    * test_summary_reflects_later_transfers - summaries are never cached.
    * test_summary_values_energy_at_live_standard_rate - energy valuation follows
      the current standard rate.
    * test_filter_object_and_keyword_criteria_are_exclusive - mixing both raises.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from solarflow.errors import InvalidChoice, ValidationError
from solarflow.ledger import LedgerService, TransactionFilter, TransactionType

from conftest import START


@pytest.fixture
def history(ledger):
    ledger.add_device("0xa", "Roof", "solar_panel", 100)
    ledger.add_device("0xb", "Charger", "ev_charger", 50)
    ledger.add_device("0xc", "Grid", "grid", 0)
    ledger.send_payment("0xa", "0xb", 10, "energy_sale", energy_amount=100)  # 12:00
    ledger.send_payment("0xb", "0xc", 5)  # 12:01
    ledger.send_payment("0xc", "0xa", 1, "subsidy")  # 12:02
    ledger.send_payment("0xa", "0xc", 2, "energy_sale", energy_amount=20)  # 12:03
    return ledger


def test_no_filter_returns_everything_newest_first(history) -> None:
    transactions = history.get_transactions()

    assert len(transactions) == 4
    timestamps = [transaction.timestamp for transaction in transactions]
    assert timestamps == sorted(timestamps, reverse=True)
    assert transactions[0].amount == Decimal("2")


def test_type_filter_returns_only_that_type(history) -> None:
    sales = history.get_transactions(transaction_type="energy_sale")

    assert [transaction.amount for transaction in sales] == [Decimal("2"), Decimal("10")]
    assert all(transaction.transaction_type is TransactionType.ENERGY_SALE for transaction in sales)


def test_address_filter_matches_either_side(history) -> None:
    involving_b = history.get_transactions(address="0xb")

    assert [transaction.amount for transaction in involving_b] == [Decimal("5"), Decimal("10")]


def test_date_bounds_are_inclusive(history) -> None:
    window = history.get_transactions(
        from_date=START + timedelta(minutes=1),
        to_date=START + timedelta(minutes=2),
    )

    assert [transaction.timestamp for transaction in window] == [
        START + timedelta(minutes=2),
        START + timedelta(minutes=1),
    ]


def test_filters_compose_as_conjunction(history) -> None:
    combined = TransactionFilter(
        address="0xc",
        transaction_type=TransactionType.ENERGY_SALE,
        from_date=START,
    )

    results = history.get_transactions(combined)

    assert len(results) == 1
    assert results[0].to_address == "0xc"
    assert results[0].energy_amount == Decimal("20")


def test_naive_bounds_are_treated_as_utc(history) -> None:
    naive_start = START.replace(tzinfo=None) + timedelta(minutes=3)

    results = history.get_transactions(from_date=naive_start)

    assert len(results) == 1
    assert results[0].timestamp == datetime(2024, 6, 1, 12, 3, tzinfo=timezone.utc)


def test_unknown_type_filter_is_rejected(history) -> None:
    with pytest.raises(InvalidChoice):
        history.get_transactions(transaction_type="refund")


def test_equal_timestamps_list_latest_append_first() -> None:
    ledger = LedgerService(devices=[], clock=lambda: START)
    first = ledger.send_payment("ext", "ext2", 1)
    second = ledger.send_payment("ext", "ext2", 2)

    assert [transaction.transaction_id for transaction in ledger.get_transactions()] == [second, first]


def test_summary_totals(ledger) -> None:
    ledger.add_device("0xa", "Roof", "solar_panel", 100)
    ledger.add_device("0xb", "Charger", "ev_charger", 50)
    ledger.add_device("0xc", "Grid", "grid", 0)
    ledger.set_device_status("0xc", "inactive")

    summary = ledger.get_summary()

    assert summary.total_devices == 3
    assert summary.active_devices == 2
    assert summary.total_balance == Decimal("150")
    assert summary.as_dict()["total_balance"] == "150"
    assert summary.total_transactions == 0
    assert summary.total_energy_produced == Decimal("0")


def test_summary_reflects_later_transfers(history) -> None:
    before = history.get_summary()
    history.send_payment("0xa", "outside", 40)
    after = history.get_summary()

    assert after.total_transactions == before.total_transactions + 1
    assert after.total_balance == before.total_balance - Decimal("40")


def test_summary_values_energy_at_live_standard_rate(clock) -> None:
    service = LedgerService(clock=clock)

    summary = service.get_summary()
    assert summary.energy_rate == Decimal("0.10")
    assert summary.as_dict()["energy_produced_value"] == "25.00"
    assert summary.as_dict()["energy_consumed_value"] == "12.00"

    service.set_rate("0.25")
    service.set_rate("0.40", peak=True)
    repriced = service.get_summary()
    assert repriced.energy_rate == Decimal("0.25")
    assert repriced.energy_produced_value == Decimal("62.50")
    assert repriced.energy_consumed_value == Decimal("30.00")


def test_filter_object_and_keyword_criteria_are_exclusive(history) -> None:
    with pytest.raises(ValidationError):
        history.get_transactions(TransactionFilter(address="0xa"), transaction_type="payment")
    with pytest.raises(ValueError):
        history.get_transactions(TransactionFilter(), address="0xb")
