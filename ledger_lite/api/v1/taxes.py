"""/v1/taxes - Recurring charges"""

import uuid
from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ledger_lite.api.v1.schemas import MarkTaxPaidRequest, TaxRequest, TaxSchema, TaxUpdateRequest
from ledger_lite.api.dependencies import get_invalidation_client, get_user_id
from ledger_lite.infrastructure.database.session import get_db
from ledger_lite.infrastructure.clients.invalidation import TAX_MUTATION, InvalidationClient
from ledger_lite.services import taxes

router = APIRouter()


@router.get("/taxes", response_model=List[TaxSchema])
def get_taxes(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    """Taxes, latest period first; legacy rows get their period key here"""
    return [TaxSchema.model_validate(t) for t in taxes.get_taxes(db, user_id)]


@router.get("/taxes/names", response_model=List[str])
def get_tax_names(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return taxes.unique_tax_names(db, user_id)


@router.post("/taxes", response_model=TaxSchema, status_code=201)
def add_tax(
    request_body: TaxRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    invalidation: InvalidationClient = Depends(get_invalidation_client),
):
    tax = taxes.add_tax(db, user_id, request_body.name, request_body.amount_cents, request_body.month, request_body.year)
    background_tasks.add_task(invalidation.publish, user_id, TAX_MUTATION)
    return TaxSchema.model_validate(tax)


@router.patch("/taxes/{tax_id}", response_model=TaxSchema)
def update_tax(
    tax_id: uuid.UUID,
    request_body: TaxUpdateRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    invalidation: InvalidationClient = Depends(get_invalidation_client),
):
    tax = taxes.update_tax(db, user_id, tax_id, **request_body.model_dump(exclude_unset=True))
    background_tasks.add_task(invalidation.publish, user_id, TAX_MUTATION)
    return TaxSchema.model_validate(tax)


@router.post("/taxes/{tax_id}/payment", response_model=TaxSchema)
def mark_tax_paid(
    tax_id: uuid.UUID,
    request_body: MarkTaxPaidRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    invalidation: InvalidationClient = Depends(get_invalidation_client),
):
    tax = taxes.mark_tax_paid(db, user_id, tax_id, request_body.transaction_id)
    background_tasks.add_task(invalidation.publish, user_id, TAX_MUTATION)
    return TaxSchema.model_validate(tax)
