"""Unit tests for legacy period-key assignment"""

import uuid
from datetime import datetime
from ledger_lite.domain.models import RecurringCharge
from ledger_lite.domain.periods import assign_period_keys, next_period

NOW = datetime(2024, 6, 1)


def legacy_charge(name: str, date: datetime | None) -> RecurringCharge:
    return RecurringCharge(
        id=uuid.uuid4(),
        user_id="user_123",
        name=name,
        amount_cents=5000,
        month=None,
        year=None,
        date=date,
    )


def test_next_period_rolls_year():
    assert next_period(4, 2024) == (5, 2024)
    assert next_period(11, 2024) == (0, 2025)


def test_assign_period_keys_from_legacy_date():
    charge = legacy_charge("Property", datetime(2024, 3, 15))

    [assignment] = assign_period_keys([charge], [], NOW)

    assert assignment.charge_id == charge.id
    assert (assignment.month, assignment.year) == (2, 2024)


def test_assign_period_keys_skips_occupied_slots():
    """Test collision advances month, across December"""
    charge = legacy_charge("Property", datetime(2023, 11, 2))
    occupied = [("Property", 10, 2023), ("Property", 11, 2023)]

    [assignment] = assign_period_keys([charge], occupied, NOW)

    assert (assignment.month, assignment.year) == (0, 2024)


def test_assign_period_keys_other_names_do_not_collide():
    charge = legacy_charge("Water", datetime(2024, 3, 15))

    [assignment] = assign_period_keys([charge], [("Property", 2, 2024)], NOW)

    assert (assignment.month, assignment.year) == (2, 2024)


def test_assign_period_keys_unique_within_batch():
    """Test legacy rows sharing a period spread out instead of colliding"""
    charges = [legacy_charge("Property", datetime(2024, 3, day)) for day in (1, 10, 20)]

    assignments = assign_period_keys(charges, [("Property", 3, 2024)], NOW)

    keys = [(a.month, a.year) for a in assignments]
    assert keys == [(2, 2024), (4, 2024), (5, 2024)]
    assert len(set(keys)) == len(keys)


def test_assign_period_keys_missing_date_uses_now():
    [assignment] = assign_period_keys([legacy_charge("Misc", None)], [], NOW)
    assert (assignment.month, assignment.year) == (5, 2024)
