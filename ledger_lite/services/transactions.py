"""Transaction entry points that route through the installment engine"""

import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from ledger_lite.domain.exceptions import NotFoundError, ValidationError
from ledger_lite.domain.models import Transaction, TransactionInput
from ledger_lite.infrastructure.database.repositories import BillingCycleRepository, TransactionRepository
from ledger_lite.infrastructure.database.session import unit_of_work
from ledger_lite.infrastructure.observability.logging import log_operation
from ledger_lite.infrastructure.observability.metrics import installment_groups_counter
from ledger_lite.services.installments import create_installment_purchase, prepare_draft
from ledger_lite.utils.date_utils import end_of_month, utcnow


def add_transaction(db: Session, user_id: str, values: TransactionInput) -> Transaction:
    """
    Add a transaction, splitting card purchases with installments > 1.

    Returns:
        The created transaction, or the first installment of a split purchase
    """
    installments = values.installments or 1
    if installments < 1:
        raise ValidationError("Installment count must be at least 1.")

    with unit_of_work(db, "add transaction"):
        draft = prepare_draft(db, user_id, values)
        if installments > 1:
            first = create_installment_purchase(db, draft, installments)[0]
        else:
            first = TransactionRepository(db).create(draft)

    if first.group_id is not None:
        installment_groups_counter.labels(operation="create").inc()

    log_operation(
        "transaction_added",
        user_id,
        "Transaction added",
        transaction_id=str(first.id),
        group_id=str(first.group_id) if first.group_id else None,
        installments=installments,
        amount_cents=values.amount_cents,
    )
    return first


def delete_transaction(db: Session, user_id: str, transaction_id: uuid.UUID) -> Optional[uuid.UUID]:
    """
    Delete a transaction; installment members take their whole group with them.

    Returns:
        The deleted group id, or None for a standalone transaction
    """
    with unit_of_work(db, "delete transaction"):
        txn_repo = TransactionRepository(db)
        transaction = txn_repo.get_by_id(user_id, transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction not found.")

        if transaction.group_id is not None:
            txn_repo.delete_group(user_id, transaction.group_id)
        else:
            txn_repo.delete(user_id, transaction_id)

    log_operation(
        "transaction_deleted",
        user_id,
        "Transaction deleted",
        transaction_id=str(transaction_id),
        group_id=str(transaction.group_id) if transaction.group_id else None,
    )
    return transaction.group_id


def list_transactions(
    db: Session,
    user_id: str,
    cycle_id: Optional[uuid.UUID] = None,
    limit: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[Transaction]:
    """
    Transactions newest first, optionally scoped to a billing cycle.

    An open cycle extends to the end of the current month.
    """
    now = now or utcnow()
    with unit_of_work(db, "fetch transactions"):
        start = end = None
        if cycle_id is not None:
            cycle = BillingCycleRepository(db).get_by_id(user_id, cycle_id)
            if cycle is None:
                raise NotFoundError("Billing cycle not found.")
            start, end = cycle.start_date, cycle.end_date or end_of_month(now)

        return TransactionRepository(db).list_for_user(user_id, start, end, limit)
