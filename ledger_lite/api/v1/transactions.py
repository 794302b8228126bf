"""/v1/transactions - Transaction entry and removal"""

import uuid
from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ledger_lite.api.v1.schemas import DeleteTransactionResponse, TransactionRequest, TransactionSchema
from ledger_lite.api.dependencies import get_invalidation_client, get_user_id
from ledger_lite.domain.models import TransactionInput
from ledger_lite.infrastructure.database.session import get_db
from ledger_lite.infrastructure.clients.invalidation import TRANSACTION_MUTATION, InvalidationClient
from ledger_lite.services import transactions

router = APIRouter()


def to_input(request_body: TransactionRequest) -> TransactionInput:
    return TransactionInput(
        amount_cents=request_body.amount_cents,
        date=request_body.date,
        type=request_body.type,
        category_id=request_body.category_id,
        payment_method_id=request_body.payment_method_id,
        description=request_body.description,
        installments=request_body.installments,
    )


@router.get("/transactions", response_model=List[TransactionSchema])
def list_transactions(
    cycle_id: Optional[uuid.UUID] = Query(None, description="Scope to a billing cycle"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return [TransactionSchema.model_validate(t) for t in transactions.list_transactions(db, user_id, cycle_id, limit)]


@router.post("/transactions", response_model=TransactionSchema, status_code=201)
def add_transaction(
    request_body: TransactionRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    invalidation: InvalidationClient = Depends(get_invalidation_client),
):
    """
    Add a transaction.

    Card expenses with installments > 1 are split into a monthly installment
    group; the first installment is returned.
    """
    first = transactions.add_transaction(db, user_id, to_input(request_body))
    background_tasks.add_task(invalidation.publish, user_id, TRANSACTION_MUTATION)
    return TransactionSchema.model_validate(first)


@router.delete("/transactions/{transaction_id}", response_model=DeleteTransactionResponse)
def delete_transaction(
    transaction_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    invalidation: InvalidationClient = Depends(get_invalidation_client),
):
    """Delete a transaction, or its whole installment group"""
    group_id = transactions.delete_transaction(db, user_id, transaction_id)
    background_tasks.add_task(invalidation.publish, user_id, TRANSACTION_MUTATION)
    return DeleteTransactionResponse(deleted_group_id=group_id)
