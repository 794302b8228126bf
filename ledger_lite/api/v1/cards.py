"""/v1/card-summaries - Credit card statements and payments"""

import uuid
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ledger_lite.api.v1.schemas import (
    CardSummariesResponse,
    CardSummarySchema,
    PayCardSummaryRequest,
    PayCardSummaryResponse,
    TransactionSchema,
)
from ledger_lite.api.dependencies import get_invalidation_client, get_user_id
from ledger_lite.infrastructure.database.session import get_db
from ledger_lite.infrastructure.clients.invalidation import CARD_PAYMENT_MUTATION, InvalidationClient
from ledger_lite.services import card_statements

router = APIRouter()


@router.get("/card-summaries", response_model=CardSummariesResponse)
def get_card_summaries(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    """
    Card statements.

    Returns:
        pending: unpaid totals per card in its current statement window
        paid: recent statement payments
    """
    pending, paid = card_statements.get_card_summaries(db, user_id)
    return CardSummariesResponse(
        pending=[CardSummarySchema.model_validate(s) for s in pending],
        paid=[TransactionSchema.model_validate(t) for t in paid],
    )


@router.post("/card-summaries/{card_id}/payments", response_model=PayCardSummaryResponse, status_code=201)
def pay_card_summary(
    card_id: uuid.UUID,
    request_body: PayCardSummaryRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    invalidation: InvalidationClient = Depends(get_invalidation_client),
):
    """Record a statement payment and settle charges oldest first"""
    payment, allocation = card_statements.pay_card_summary(
        db,
        user_id,
        card_id,
        request_body.amount_cents,
        request_body.date,
        request_body.payment_method_id,
        request_body.description,
        request_body.window_start,
        request_body.window_end,
    )
    background_tasks.add_task(invalidation.publish, user_id, CARD_PAYMENT_MUTATION)

    return PayCardSummaryResponse(
        payment=TransactionSchema.model_validate(payment),
        settled_transaction_ids=allocation.settled_ids,
        settled_cents=allocation.settled_cents,
        unapplied_cents=allocation.unapplied_cents,
    )
