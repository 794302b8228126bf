"""/v1/installments - Installment purchase views and edits"""

import uuid
from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ledger_lite.api.v1.schemas import (
    DeleteGroupResponse,
    InstallmentDetailsResponse,
    InstallmentGroupResponse,
    InstallmentPurchaseSchema,
    MonthlyProjectionSchema,
    TransactionRequest,
    TransactionSchema,
)
from ledger_lite.api.v1.transactions import to_input
from ledger_lite.api.dependencies import get_invalidation_client, get_user_id
from ledger_lite.infrastructure.database.session import get_db
from ledger_lite.infrastructure.clients.invalidation import TRANSACTION_MUTATION, InvalidationClient
from ledger_lite.services import installments

router = APIRouter()


@router.get("/installments", response_model=InstallmentDetailsResponse)
def get_installment_details(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    """Pending and completed installment purchases with totals"""
    return InstallmentDetailsResponse.model_validate(installments.get_installment_details(db, user_id))


@router.get("/installments/projection", response_model=List[MonthlyProjectionSchema])
def get_installment_projection(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    """Installment totals for the 6 months before through the 5 months after this one"""
    return [MonthlyProjectionSchema.model_validate(p) for p in installments.get_installment_projection(db, user_id)]


@router.get("/installments/{group_id}", response_model=InstallmentPurchaseSchema)
def get_installment_purchase(group_id: uuid.UUID, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return InstallmentPurchaseSchema.model_validate(installments.get_installment_purchase(db, user_id, group_id))


@router.put("/installments/{group_id}", response_model=InstallmentGroupResponse)
def update_installment_purchase(
    group_id: uuid.UUID,
    request_body: TransactionRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    invalidation: InvalidationClient = Depends(get_invalidation_client),
):
    """Regenerate the whole group from the submitted purchase values"""
    created = installments.update_installment_purchase(db, user_id, group_id, to_input(request_body))
    background_tasks.add_task(invalidation.publish, user_id, TRANSACTION_MUTATION)
    return InstallmentGroupResponse(
        group_id=created[0].group_id,
        transactions=[TransactionSchema.model_validate(t) for t in created],
    )


@router.delete("/installments/{group_id}", response_model=DeleteGroupResponse)
def delete_installment_purchase(
    group_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    invalidation: InvalidationClient = Depends(get_invalidation_client),
):
    deleted = installments.delete_installment_purchase(db, user_id, group_id)
    background_tasks.add_task(invalidation.publish, user_id, TRANSACTION_MUTATION)
    return DeleteGroupResponse(deleted=deleted)
