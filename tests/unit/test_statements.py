"""Unit tests for statement windows and FIFO payment reconciliation"""

import uuid
import pytest
from datetime import datetime, time
from conftest import make_transaction
from ledger_lite.domain.exceptions import ValidationError
from ledger_lite.domain.models import PaymentMethod, StatementWindow
from ledger_lite.domain.statements import (
    EPOCH,
    current_statement_window,
    reconcile_payment,
    summarize_cards,
)


def test_statement_window_after_closing_day():
    """Test now past the 10th: 11th of this month to 10th of next"""
    window = current_statement_window(datetime(2024, 3, 15, 9, 30), 10)

    assert window.start == datetime(2024, 3, 11)
    assert window.end == datetime.combine(datetime(2024, 4, 10).date(), time.max)


def test_statement_window_on_closing_day():
    """Test now on the 10th: 11th of last month to 10th of this month"""
    window = current_statement_window(datetime(2024, 3, 10, 23, 0), 10)

    assert window.start == datetime(2024, 2, 11)
    assert window.end == datetime.combine(datetime(2024, 3, 10).date(), time.max)


def test_statement_window_before_closing_day_crosses_year():
    window = current_statement_window(datetime(2024, 1, 5), 10)

    assert window.start == datetime(2023, 12, 11)
    assert window.end.date() == datetime(2024, 1, 10).date()


def test_statement_window_after_closing_day_crosses_year():
    window = current_statement_window(datetime(2023, 12, 20), 10)

    assert window.start == datetime(2023, 12, 11)
    assert window.end.date() == datetime(2024, 1, 10).date()


def test_statement_window_clamps_short_months():
    """Test closing day 31 in February closes on the last day"""
    window = current_statement_window(datetime(2024, 2, 15), 31)
    assert window.start == datetime(2024, 2, 1)
    assert window.end.date() == datetime(2024, 2, 29).date()

    # Next window starts right after the clamped close
    window = current_statement_window(datetime(2024, 3, 2), 31)
    assert window.start == datetime(2024, 3, 1)
    assert window.end.date() == datetime(2024, 3, 31).date()


def test_statement_window_without_closing_day():
    """Test card without closing day is always open"""
    now = datetime(2024, 3, 15, 12, 0)
    window = current_statement_window(now, None)

    assert window.start == EPOCH
    assert window.end == now


@pytest.mark.parametrize("closing_day", [0, -1, 32])
def test_statement_window_invalid_closing_day(closing_day):
    """Test out-of-range closing days are rejected, not treated as missing"""
    with pytest.raises(ValidationError):
        current_statement_window(datetime(2024, 3, 15), closing_day)


def test_reconcile_payment_stops_at_first_uncovered_charge():
    """Test [100, 200, 50] with 150: only the 100 charge is settled"""
    charges = [
        make_transaction(10000, datetime(2024, 3, 1)),
        make_transaction(20000, datetime(2024, 3, 2)),
        make_transaction(5000, datetime(2024, 3, 3)),
    ]

    allocation = reconcile_payment(charges, 15000)

    assert allocation.settled_ids == [charges[0].id]
    assert allocation.settled_cents == 10000
    assert allocation.unapplied_cents == 5000


def test_reconcile_payment_orders_oldest_first():
    newest = make_transaction(5000, datetime(2024, 3, 20))
    oldest = make_transaction(5000, datetime(2024, 3, 1))

    allocation = reconcile_payment([newest, oldest], 5000)

    assert allocation.settled_ids == [oldest.id]


def test_reconcile_payment_overpayment_left_unapplied():
    charges = [make_transaction(10000, datetime(2024, 3, 1)), make_transaction(5000, datetime(2024, 3, 2))]

    allocation = reconcile_payment(charges, 20000)

    assert len(allocation.settled_ids) == 2
    assert allocation.settled_cents == 15000
    assert allocation.unapplied_cents == 5000


def test_reconcile_payment_too_small_settles_nothing():
    allocation = reconcile_payment([make_transaction(10000, datetime(2024, 3, 1))], 9999)

    assert allocation.settled_ids == []
    assert allocation.unapplied_cents == 9999


def test_summarize_cards_sorted_and_empty_cards_dropped():
    window = StatementWindow(start=datetime(2024, 3, 11), end=datetime(2024, 4, 10))
    visa = PaymentMethod(id=uuid.uuid4(), user_id="user_123", name="Visa", type="Credit Card")
    amex = PaymentMethod(id=uuid.uuid4(), user_id="user_123", name="Amex", type="Credit Card")
    idle = PaymentMethod(id=uuid.uuid4(), user_id="user_123", name="Idle", type="Credit Card")

    summaries = summarize_cards(
        [
            (visa, window, [make_transaction(1000, datetime(2024, 3, 12))]),
            (amex, window, [make_transaction(4000, datetime(2024, 3, 13)), make_transaction(500, datetime(2024, 3, 12))]),
            (idle, window, []),
        ]
    )

    assert [s.card_name for s in summaries] == ["Amex", "Visa"]
    assert summaries[0].total_cents == 4500
    assert summaries[0].transactions[0].date == datetime(2024, 3, 12)
