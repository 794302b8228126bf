"""Unit tests for billing cycle rules"""

import uuid
import pytest
from datetime import datetime, timedelta
from ledger_lite.domain.cycles import plan_new_cycle, resolve_open_cycles
from ledger_lite.domain.exceptions import ValidationError
from ledger_lite.domain.models import BillingCycle
from ledger_lite.utils.date_utils import CYCLE_BOUNDARY


def make_cycle(start: datetime, end: datetime | None = None) -> BillingCycle:
    return BillingCycle(id=uuid.uuid4(), user_id="user_123", start_date=start, end_date=end)


def test_resolve_open_cycles_none():
    assert resolve_open_cycles([]) == (None, [])


def test_resolve_open_cycles_single():
    cycle = make_cycle(datetime(2024, 1, 1))
    canonical, stale = resolve_open_cycles([cycle])

    assert canonical is cycle
    assert stale == []


def test_resolve_open_cycles_repairs_duplicates():
    """Test latest start stays open, others end just before it"""
    oldest = make_cycle(datetime(2024, 1, 1))
    latest = make_cycle(datetime(2024, 3, 1))
    middle = make_cycle(datetime(2024, 2, 1))

    canonical, stale = resolve_open_cycles([oldest, latest, middle])

    assert canonical is latest
    assert {c.id for c in stale} == {oldest.id, middle.id}
    assert all(c.end_date == latest.start_date - CYCLE_BOUNDARY for c in stale)
    # Inputs are left untouched
    assert oldest.end_date is None


def test_plan_new_cycle_closes_open_cycles():
    current = make_cycle(datetime(2024, 1, 1))
    start = datetime(2024, 2, 1)

    closures = plan_new_cycle([current], start)

    assert len(closures) == 1
    assert closures[0].id == current.id
    assert closures[0].end_date == start - CYCLE_BOUNDARY


def test_plan_new_cycle_without_open_cycles():
    assert plan_new_cycle([], datetime(2024, 2, 1)) == []


@pytest.mark.parametrize(
    "offset",
    [timedelta(0), -timedelta(days=1), CYCLE_BOUNDARY],
)
def test_plan_new_cycle_rejects_non_following_start(offset):
    """Test start on, before, or one unit after the open cycle is rejected"""
    current = make_cycle(datetime(2024, 1, 1))

    with pytest.raises(ValidationError):
        plan_new_cycle([current], current.start_date + offset)

    assert current.end_date is None


def test_plan_new_cycle_checks_every_open_cycle():
    early = make_cycle(datetime(2024, 1, 1))
    late = make_cycle(datetime(2024, 3, 1))

    with pytest.raises(ValidationError):
        plan_new_cycle([early, late], datetime(2024, 2, 1))
