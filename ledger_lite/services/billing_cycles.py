"""Billing cycle lifecycle: current-cycle lookup with repair, opening new cycles"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from ledger_lite.domain.cycles import plan_new_cycle, resolve_open_cycles
from ledger_lite.domain.models import BillingCycle
from ledger_lite.infrastructure.database.repositories import BillingCycleRepository
from ledger_lite.infrastructure.database.session import unit_of_work
from ledger_lite.infrastructure.observability.logging import log_operation
from ledger_lite.infrastructure.observability.metrics import cycle_repairs_counter, cycles_started_counter
from ledger_lite.utils.date_utils import utcnow


def resolve_current_cycle(db: Session, user_id: str) -> Optional[BillingCycle]:
    """
    Current cycle lookup without committing, for use inside a larger unit of work.

    Resolution order:
    1. Exactly one open cycle: that cycle
    2. Several open cycles: repair, keep the latest-starting one open
    3. No open cycle: the most recently closed one, or None for a new user
    """
    repo = BillingCycleRepository(db)
    canonical, stale = resolve_open_cycles(repo.get_open_cycles(user_id))

    if stale:
        repo.close_cycles(stale)
        cycle_repairs_counter.inc(len(stale))
        log_operation(
            "cycle_repair",
            user_id,
            "Closed duplicate open billing cycles",
            level=logging.WARNING,
            canonical_cycle_id=str(canonical.id),
            closed_cycle_ids=[str(c.id) for c in stale],
        )

    if canonical is not None:
        return canonical

    if repo.count_for_user(user_id) == 0:
        return None

    return repo.get_last_closed(user_id)


def get_current_cycle(db: Session, user_id: str) -> Optional[BillingCycle]:
    with unit_of_work(db, "fetch current billing cycle"):
        return resolve_current_cycle(db, user_id)


def start_new_cycle(db: Session, user_id: str, start_date: Optional[datetime] = None) -> BillingCycle:
    """
    Close every open cycle and open a new one starting at start_date (default now).

    Raises:
        ValidationError: If start_date does not strictly follow an open cycle;
            no cycle is modified in that case
    """
    start_date = start_date or utcnow()

    with unit_of_work(db, "start new billing cycle"):
        repo = BillingCycleRepository(db)
        closures = plan_new_cycle(repo.get_open_cycles(user_id), start_date)
        repo.close_cycles(closures)
        cycle = repo.create(user_id, start_date)

    cycles_started_counter.inc()
    log_operation(
        "cycle_started",
        user_id,
        "Billing cycle started",
        cycle_id=str(cycle.id),
        start_date=start_date.isoformat(),
        closed_cycles=len(closures),
    )
    return cycle


def list_cycles(db: Session, user_id: str) -> List[BillingCycle]:
    with unit_of_work(db, "fetch billing cycles"):
        return BillingCycleRepository(db).list_for_user(user_id)


def get_cycle(db: Session, user_id: str, cycle_id: uuid.UUID) -> Optional[BillingCycle]:
    with unit_of_work(db, "fetch billing cycle"):
        return BillingCycleRepository(db).get_by_id(user_id, cycle_id)
