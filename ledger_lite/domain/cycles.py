"""Billing cycle rules - opening, closing and repairing a user's periods"""

from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Tuple
from ledger_lite.domain.models import BillingCycle
from ledger_lite.domain.exceptions import ValidationError
from ledger_lite.utils.date_utils import CYCLE_BOUNDARY


def resolve_open_cycles(
    open_cycles: List[BillingCycle],
) -> Tuple[Optional[BillingCycle], List[BillingCycle]]:
    """
    Pick the canonical open cycle and close the rest.

    Concurrent cycle starts can leave several open cycles behind. The one with
    the latest start date wins; every other open cycle ends one boundary unit
    before the winner starts.

    Returns:
        (canonical cycle or None, cycles that must be closed with end_date set)
    """
    if not open_cycles:
        return None, []

    ordered = sorted(open_cycles, key=lambda c: c.start_date, reverse=True)
    canonical = ordered[0]
    end_date = canonical.start_date - CYCLE_BOUNDARY

    return canonical, [replace(cycle, end_date=end_date) for cycle in ordered[1:]]


def plan_new_cycle(open_cycles: List[BillingCycle], start_date: datetime) -> List[BillingCycle]:
    """
    Validate a new cycle start and compute the closures it implies.

    Every open cycle must start strictly before the end date it would receive
    (start_date minus one boundary unit), otherwise nothing is closed.

    Raises:
        ValidationError: If the new cycle would not strictly follow an open one
    """
    candidate_end = start_date - CYCLE_BOUNDARY

    for cycle in open_cycles:
        if cycle.start_date >= candidate_end:
            raise ValidationError(
                "The new cycle start date must be after the previous cycle's start date."
            )

    return [replace(cycle, end_date=candidate_end) for cycle in open_cycles]
