"""Unit tests for date helpers"""

from datetime import datetime, time
from ledger_lite.utils.date_utils import (
    add_months,
    clamped_day,
    end_of_month,
    month_key,
    start_of_month,
)


def test_add_months_clamps_day():
    assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
    assert add_months(datetime(2024, 3, 15), -3) == datetime(2023, 12, 15)


def test_month_bounds():
    moment = datetime(2023, 2, 14, 8, 30)
    assert start_of_month(moment) == datetime(2023, 2, 1)
    assert end_of_month(moment) == datetime.combine(datetime(2023, 2, 28).date(), time.max)


def test_clamped_day():
    assert clamped_day(2023, 4, 31) == datetime(2023, 4, 30)
    assert clamped_day(2023, 4, 10) == datetime(2023, 4, 10)


def test_month_key():
    assert month_key(datetime(2024, 7, 3)) == "2024-07"
