"""Recurring charges (taxes) with lazy period-key migration"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from ledger_lite.domain.exceptions import NotFoundError, ValidationError
from ledger_lite.domain.models import RecurringCharge
from ledger_lite.domain.periods import assign_period_keys
from ledger_lite.infrastructure.database.repositories import (
    RecurringChargeRepository,
    TransactionRepository,
    charge_to_domain,
)
from ledger_lite.infrastructure.database.session import unit_of_work
from ledger_lite.infrastructure.observability.logging import log_operation
from ledger_lite.infrastructure.observability.metrics import period_keys_migrated_counter
from ledger_lite.utils.date_utils import utcnow

DUPLICATE_TAX_MESSAGE = "A tax with this name already exists for that month and year."


def reconcile_period_keys(db: Session, user_id: str, now: Optional[datetime] = None) -> int:
    """
    Give every legacy charge a collision-free (month, year), in one batch.

    Does not commit. Returns how many records were migrated.
    """
    repo = RecurringChargeRepository(db)
    legacy = repo.get_legacy(user_id)
    if not legacy:
        return 0

    assignments = assign_period_keys(legacy, repo.get_period_keys(user_id), now or utcnow())
    repo.apply_period_keys(assignments)

    period_keys_migrated_counter.inc(len(assignments))
    log_operation(
        "period_keys_migrated",
        user_id,
        "Assigned period keys to legacy taxes",
        level=logging.WARNING,
        migrated=len(assignments),
    )
    return len(assignments)


def get_taxes(db: Session, user_id: str) -> List[RecurringCharge]:
    """All taxes, latest period first, migrating legacy rows on the way"""
    with unit_of_work(db, "fetch taxes"):
        reconcile_period_keys(db, user_id)
        return RecurringChargeRepository(db).list_for_user(user_id)


def _validate_period(month: int, year: int) -> None:
    if not 0 <= month <= 11:
        raise ValidationError("Month must be between 0 and 11.")
    if year < 1:
        raise ValidationError("Year must be positive.")


def add_tax(db: Session, user_id: str, name: str, amount_cents: int, month: int, year: int) -> RecurringCharge:
    _validate_period(month, year)

    with unit_of_work(db, "add tax"):
        repo = RecurringChargeRepository(db)
        if repo.find_by_period(user_id, name, month, year):
            raise ValidationError(DUPLICATE_TAX_MESSAGE)
        tax = repo.create(user_id, name, amount_cents, month, year, utcnow())

    log_operation("tax_added", user_id, "Tax added", tax_id=str(tax.id), month=month, year=year)
    return tax


def update_tax(
    db: Session,
    user_id: str,
    tax_id: uuid.UUID,
    name: Optional[str] = None,
    amount_cents: Optional[int] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> RecurringCharge:
    """
    Edit an unpaid tax.

    Raises:
        NotFoundError: If the tax does not exist for this user
        ValidationError: If it is already paid or the new period key is taken
    """
    with unit_of_work(db, "update tax"):
        repo = RecurringChargeRepository(db)
        record = repo.get_by_id(user_id, tax_id)
        if record is None:
            raise NotFoundError("Tax not found.")
        if record.is_paid:
            raise ValidationError("Paid taxes cannot be edited.")

        new_name = name if name is not None else record.name
        new_month = month if month is not None else record.month
        new_year = year if year is not None else record.year
        if new_month is not None and new_year is not None:
            _validate_period(new_month, new_year)
            if repo.find_by_period(user_id, new_name, new_month, new_year, exclude_id=tax_id):
                raise ValidationError(DUPLICATE_TAX_MESSAGE)

        record.name = new_name
        record.month = new_month
        record.year = new_year
        if amount_cents is not None:
            record.amount_cents = amount_cents
        db.flush()
        tax = charge_to_domain(record)

    log_operation("tax_updated", user_id, "Tax updated", tax_id=str(tax_id))
    return tax


def mark_tax_paid(db: Session, user_id: str, tax_id: uuid.UUID, transaction_id: uuid.UUID) -> RecurringCharge:
    with unit_of_work(db, "mark tax as paid"):
        repo = RecurringChargeRepository(db)
        record = repo.get_by_id(user_id, tax_id)
        if record is None:
            raise NotFoundError("Tax not found.")
        if TransactionRepository(db).get_by_id(user_id, transaction_id) is None:
            raise NotFoundError("Transaction not found.")

        record.is_paid = True
        record.paid_transaction_id = transaction_id
        db.flush()
        tax = charge_to_domain(record)

    log_operation("tax_paid", user_id, "Tax marked as paid", tax_id=str(tax_id), transaction_id=str(transaction_id))
    return tax


def unique_tax_names(db: Session, user_id: str) -> List[str]:
    with unit_of_work(db, "fetch tax names"):
        return RecurringChargeRepository(db).unique_names(user_id)
