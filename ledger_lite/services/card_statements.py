"""Card statement summaries and statement payment settlement"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from ledger_lite.config import settings
from ledger_lite.domain.exceptions import NotFoundError, ValidationError
from ledger_lite.domain.models import (
    CardSummary,
    PaymentAllocation,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from ledger_lite.domain.statements import current_statement_window, reconcile_payment, summarize_cards
from ledger_lite.infrastructure.database.repositories import (
    CategoryRepository,
    PaymentMethodRepository,
    TransactionRepository,
)
from ledger_lite.infrastructure.database.session import unit_of_work
from ledger_lite.infrastructure.observability.logging import log_operation
from ledger_lite.infrastructure.observability.metrics import record_statement_payment
from ledger_lite.utils.date_utils import add_months, utcnow


def pending_summaries(db: Session, user_id: str, now: datetime) -> List[CardSummary]:
    """
    Unpaid totals inside each enabled credit card's current statement window.

    A card with a closing day outside 1-31 is left out and logged; the other
    cards are still summarized.
    """
    cards = PaymentMethodRepository(db).get_enabled_by_type(user_id, settings.credit_card_type)
    txn_repo = TransactionRepository(db)

    statements = []
    for card in cards:
        try:
            window = current_statement_window(now, card.closing_day)
        except ValidationError as e:
            log_operation(
                "card_summary_skipped",
                user_id,
                f"Skipping card with invalid closing day: {e}",
                level=logging.WARNING,
                card_id=str(card.id),
                closing_day=card.closing_day,
            )
            continue
        charges = txn_repo.get_unpaid_card_charges(user_id, card.id, window.start, window.end)
        statements.append((card, window, charges))

    return summarize_cards(statements)


def paid_summaries(db: Session, user_id: str, now: datetime) -> List[Transaction]:
    """Recent statement settlements, newest first"""
    return TransactionRepository(db).get_summary_payments(
        user_id,
        since=add_months(now, -settings.paid_summaries_months),
        limit=settings.paid_summaries_limit,
    )


def get_card_summaries(
    db: Session,
    user_id: str,
    now: Optional[datetime] = None,
) -> Tuple[List[CardSummary], List[Transaction]]:
    now = now or utcnow()
    with unit_of_work(db, "fetch card summaries"):
        return pending_summaries(db, user_id, now), paid_summaries(db, user_id, now)


def resolve_payment_category(db: Session, user_id: str) -> uuid.UUID:
    """First configured payment category the user has ("Taxes", then "Other")"""
    repo = CategoryRepository(db)
    for name in settings.payment_category_names:
        category_id = repo.find_id_by_name(user_id, name)
        if category_id is not None:
            return category_id

    names = " or ".join(f"'{n}'" for n in settings.payment_category_names)
    raise NotFoundError(f"No {names} category found for card payments.")


def pay_card_summary(
    db: Session,
    user_id: str,
    card_id: uuid.UUID,
    payment_cents: int,
    date: datetime,
    payment_method_id: uuid.UUID,
    description: str,
    window_start: Optional[datetime] = None,
    window_end: Optional[datetime] = None,
) -> Tuple[Transaction, PaymentAllocation]:
    """
    Record a statement payment and settle card charges with it.

    Flow:
    1. Resolve the payment category
    2. Insert the settlement expense (is_summary_payment)
    3. Load unpaid charges for the card, oldest first, inside the window if given
    4. Mark paid every charge the payment fully covers, FIFO, stopping at the
       first one it cannot cover

    Surplus payment is not carried forward; it is returned as unapplied_cents.
    """
    if payment_cents <= 0:
        raise ValidationError("Payment amount must be positive.")

    with unit_of_work(db, "pay card summary"):
        methods = PaymentMethodRepository(db)
        card = methods.get_by_id(user_id, card_id)
        if card is None:
            raise NotFoundError("Card not found.")
        if card.type != settings.credit_card_type:
            raise ValidationError("Statement payments can only be made to a credit card.")
        if methods.get_by_id(user_id, payment_method_id) is None:
            raise NotFoundError("Payment method not found.")

        category_id = resolve_payment_category(db, user_id)
        txn_repo = TransactionRepository(db)

        settlement = txn_repo.create(
            TransactionDraft(
                user_id=user_id,
                amount_cents=payment_cents,
                date=date,
                type=TransactionType.EXPENSE,
                category_id=category_id,
                payment_method_id=payment_method_id,
                description=description,
                is_card_payment=False,
                is_paid=True,
            ),
            is_summary_payment=True,
            statement_card_id=card_id,
        )

        charges = txn_repo.get_unpaid_card_charges(user_id, card_id, window_start, window_end)
        allocation = reconcile_payment(charges, payment_cents)
        txn_repo.mark_paid(allocation.settled_ids)

    record_statement_payment(len(allocation.settled_ids), allocation.unapplied_cents)
    log_operation(
        "card_payment",
        user_id,
        "Card statement paid",
        level=logging.WARNING if allocation.unapplied_cents else logging.INFO,
        card_id=str(card_id),
        payment_cents=payment_cents,
        settled_charges=len(allocation.settled_ids),
        unapplied_cents=allocation.unapplied_cents,
    )
    return settlement, allocation
