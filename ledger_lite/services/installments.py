"""Installment purchases: create, replace, delete and aggregated views"""

import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from ledger_lite.config import settings
from ledger_lite.domain.exceptions import NotFoundError, ValidationError
from ledger_lite.domain.installments import (
    base_description,
    generate_installment_schedule,
    project_installments,
    projection_range,
    summarize_installments,
)
from ledger_lite.domain.models import (
    InstallmentOverview,
    InstallmentPurchase,
    MonthlyProjection,
    Transaction,
    TransactionDraft,
    TransactionInput,
    TransactionType,
)
from ledger_lite.infrastructure.database.repositories import PaymentMethodRepository, TransactionRepository
from ledger_lite.infrastructure.database.session import unit_of_work
from ledger_lite.infrastructure.observability.logging import log_operation
from ledger_lite.infrastructure.observability.metrics import installment_groups_counter
from ledger_lite.services.billing_cycles import resolve_current_cycle
from ledger_lite.utils.date_utils import utcnow


def prepare_draft(db: Session, user_id: str, values: TransactionInput) -> TransactionDraft:
    """
    Resolve card flags and the current cycle for new transaction values.

    Expenses on a credit card become unpaid card charges (card_id set,
    is_paid False) until a statement payment settles them.
    """
    method = PaymentMethodRepository(db).get_by_id(user_id, values.payment_method_id)
    if method is None:
        raise NotFoundError("Payment method not found.")

    is_card_payment = values.type == TransactionType.EXPENSE and method.type == settings.credit_card_type
    cycle = resolve_current_cycle(db, user_id)

    return TransactionDraft(
        user_id=user_id,
        amount_cents=values.amount_cents,
        date=values.date,
        type=values.type,
        category_id=values.category_id,
        payment_method_id=values.payment_method_id,
        description=values.description,
        is_card_payment=is_card_payment,
        is_paid=not is_card_payment,
        card_id=values.payment_method_id if is_card_payment else None,
        billing_cycle_id=cycle.id if cycle else None,
    )


def create_installment_purchase(
    db: Session,
    draft: TransactionDraft,
    installment_count: int,
    group_id: Optional[uuid.UUID] = None,
) -> List[Transaction]:
    """
    Write one transaction per installment under a shared group id.

    Does not commit. A fresh group id is generated unless one is given, so
    retrying a failed create writes a second group.

    Raises:
        ValidationError: If installment_count < 1 or the method is not a credit card
    """
    if not draft.is_card_payment:
        raise ValidationError("Installment purchases require a credit card expense.")

    schedule = generate_installment_schedule(draft.amount_cents, installment_count, draft.date, draft.description)
    return TransactionRepository(db).create_group(draft, schedule, group_id or uuid.uuid4())


def get_installment_purchase(db: Session, user_id: str, group_id: uuid.UUID) -> InstallmentPurchase:
    with unit_of_work(db, "fetch installment purchase"):
        members = TransactionRepository(db).get_group(user_id, group_id)

    if not members:
        raise NotFoundError("Installment purchase not found.")

    first = members[0]
    return InstallmentPurchase(
        group_id=group_id,
        first_transaction_id=first.id,
        description=base_description(first.description),
        total_cents=sum(t.amount_cents for t in members),
        date=first.date,
        category_id=first.category_id,
        payment_method_id=first.payment_method_id,
        installments=len(members),
    )


def update_installment_purchase(
    db: Session,
    user_id: str,
    group_id: uuid.UUID,
    values: TransactionInput,
) -> List[Transaction]:
    """
    Replace an installment group with one regenerated from new values.

    The whole group is deleted and re-created (member ids change, the group id
    is kept). Omitting installments keeps the current count; a count of 1
    turns the purchase into a single transaction.
    """
    with unit_of_work(db, "update installment purchase"):
        txn_repo = TransactionRepository(db)
        existing = txn_repo.get_group(user_id, group_id)
        if not existing:
            raise NotFoundError("Installment purchase not found.")

        count = values.installments or len(existing)
        draft = prepare_draft(db, user_id, values)
        if count > 1 and not draft.is_card_payment:
            raise ValidationError("Installment purchases require a credit card expense.")

        txn_repo.delete_group(user_id, group_id)
        if count > 1:
            created = create_installment_purchase(db, draft, count, group_id=group_id)
        else:
            created = [txn_repo.create(draft)]

    installment_groups_counter.labels(operation="update").inc()
    log_operation(
        "installments_updated",
        user_id,
        "Installment purchase replaced",
        group_id=str(group_id),
        installments=count,
        total_cents=values.amount_cents,
    )
    return created


def delete_installment_purchase(db: Session, user_id: str, group_id: uuid.UUID) -> int:
    """Delete every member of the group; returns how many were removed"""
    with unit_of_work(db, "delete installment purchase"):
        deleted = TransactionRepository(db).delete_group(user_id, group_id)
        if deleted == 0:
            raise NotFoundError("Installment purchase not found.")

    log_operation("installments_deleted", user_id, "Installment purchase deleted", group_id=str(group_id), deleted=deleted)
    return deleted


def get_installment_details(db: Session, user_id: str, now: Optional[datetime] = None) -> InstallmentOverview:
    now = now or utcnow()
    with unit_of_work(db, "fetch installment details"):
        transactions = TransactionRepository(db).get_installment_expenses(user_id)
        methods = PaymentMethodRepository(db).list_for_user(user_id)
    return summarize_installments(transactions, methods, now)


def get_installment_projection(db: Session, user_id: str, now: Optional[datetime] = None) -> List[MonthlyProjection]:
    now = now or utcnow()
    back, forward = settings.projection_months_back, settings.projection_months_forward
    start, end = projection_range(now, back, forward)

    with unit_of_work(db, "fetch installment projection"):
        transactions = TransactionRepository(db).get_installment_expenses(user_id, start, end)

    return project_installments(transactions, now, back, forward)
