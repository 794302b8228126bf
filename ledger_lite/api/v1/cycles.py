"""/v1/billing-cycles - Billing cycle lifecycle endpoints"""

import uuid
from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ledger_lite.api.v1.schemas import BillingCycleSchema, CurrentCycleResponse, StartCycleRequest
from ledger_lite.api.dependencies import get_invalidation_client, get_user_id
from ledger_lite.domain.exceptions import NotFoundError
from ledger_lite.infrastructure.database.session import get_db
from ledger_lite.infrastructure.clients.invalidation import BILLING_CYCLE_MUTATION, InvalidationClient
from ledger_lite.services import billing_cycles

router = APIRouter()


@router.get("/billing-cycles", response_model=List[BillingCycleSchema])
def list_billing_cycles(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    """All cycles for the user, newest first"""
    return [BillingCycleSchema.model_validate(c) for c in billing_cycles.list_cycles(db, user_id)]


@router.get("/billing-cycles/current", response_model=CurrentCycleResponse)
def get_current_billing_cycle(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    """
    Current billing cycle.

    Duplicate open cycles are repaired as a side effect. Returns a null cycle
    for users who have never started one.
    """
    cycle = billing_cycles.get_current_cycle(db, user_id)
    return CurrentCycleResponse(cycle=BillingCycleSchema.model_validate(cycle) if cycle else None)


@router.post("/billing-cycles", response_model=BillingCycleSchema, status_code=201)
def start_billing_cycle(
    request_body: StartCycleRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    invalidation: InvalidationClient = Depends(get_invalidation_client),
):
    """Close the open cycle(s) and start a new one"""
    cycle = billing_cycles.start_new_cycle(db, user_id, request_body.start_date)
    background_tasks.add_task(invalidation.publish, user_id, BILLING_CYCLE_MUTATION)
    return BillingCycleSchema.model_validate(cycle)


@router.get("/billing-cycles/{cycle_id}", response_model=BillingCycleSchema)
def get_billing_cycle(cycle_id: uuid.UUID, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    cycle = billing_cycles.get_cycle(db, user_id, cycle_id)
    if cycle is None:
        raise NotFoundError("Billing cycle not found.")
    return BillingCycleSchema.model_validate(cycle)
