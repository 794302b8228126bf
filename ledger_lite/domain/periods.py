"""Period-key migration for legacy recurring charges"""

from datetime import datetime
from typing import Iterable, List, Set, Tuple
from ledger_lite.domain.models import PeriodAssignment, RecurringCharge

PeriodKey = Tuple[str, int, int]  # (name, month, year)


def next_period(month: int, year: int) -> Tuple[int, int]:
    """Advance one month, rolling the year past December (month 11)"""
    if month >= 11:
        return 0, year + 1
    return month + 1, year


def assign_period_keys(
    legacy: Iterable[RecurringCharge],
    occupied: Iterable[PeriodKey],
    now: datetime,
) -> List[PeriodAssignment]:
    """
    Derive (month, year) for charges that lack them.

    The period comes from the legacy date (UTC). When the key is already used,
    by an existing record or by an earlier assignment in this batch, the month
    moves forward until a free slot is found. Records are never dropped; a
    collision shifts the record's nominal period instead.
    """
    taken: Set[PeriodKey] = set(occupied)
    assignments = []

    for charge in legacy:
        source = charge.date or now
        month, year = source.month - 1, source.year

        while (charge.name, month, year) in taken:
            month, year = next_period(month, year)

        taken.add((charge.name, month, year))
        assignments.append(PeriodAssignment(charge_id=charge.id, month=month, year=year))

    return assignments
