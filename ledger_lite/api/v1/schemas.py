"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import datetime, timezone
from typing import Annotated, List, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from ledger_lite.domain.models import TransactionType


def to_naive_utc(value: datetime) -> datetime:
    """Store representation: naive UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


Instant = Annotated[datetime, AfterValidator(to_naive_utc)]


class ORMSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Billing cycles

class StartCycleRequest(BaseModel):
    """Request body for POST /v1/billing-cycles"""

    start_date: Optional[Instant] = Field(None, description="Defaults to now")


class BillingCycleSchema(ORMSchema):
    id: uuid.UUID
    start_date: datetime
    end_date: Optional[datetime] = None
    is_open: bool


class CurrentCycleResponse(BaseModel):
    """Response for GET /v1/billing-cycles/current; cycle is null before onboarding"""

    cycle: Optional[BillingCycleSchema] = None


# Transactions

class TransactionRequest(BaseModel):
    """Request body for adding or replacing a transaction"""

    amount_cents: int = Field(..., gt=0, description="Total amount in cents")
    date: Instant
    type: TransactionType
    category_id: uuid.UUID
    payment_method_id: uuid.UUID
    description: str = Field(..., min_length=1)
    installments: Optional[int] = Field(None, ge=1, description="Monthly installments for card purchases")


class TransactionSchema(ORMSchema):
    id: uuid.UUID
    amount_cents: int
    date: datetime
    type: TransactionType
    category_id: uuid.UUID
    payment_method_id: uuid.UUID
    description: str
    group_id: Optional[uuid.UUID] = None
    card_id: Optional[uuid.UUID] = None
    is_card_payment: bool
    is_paid: bool
    is_summary_payment: bool
    statement_card_id: Optional[uuid.UUID] = None
    billing_cycle_id: Optional[uuid.UUID] = None


class DeleteTransactionResponse(BaseModel):
    success: bool = True
    deleted_group_id: Optional[uuid.UUID] = None


# Installments

class InstallmentPurchaseSchema(ORMSchema):
    group_id: uuid.UUID
    first_transaction_id: uuid.UUID
    description: str
    total_cents: int
    date: datetime
    category_id: uuid.UUID
    payment_method_id: uuid.UUID
    installments: int


class InstallmentGroupResponse(BaseModel):
    group_id: Optional[uuid.UUID] = None
    transactions: List[TransactionSchema]


class InstallmentDetailSchema(ORMSchema):
    group_id: uuid.UUID
    first_transaction_id: uuid.UUID
    description: str
    total_cents: int
    installment_cents: int
    current_installment: int
    total_installments: int
    pending_cents: int
    payment_method_name: str
    purchase_date: datetime
    last_installment_date: datetime


class InstallmentDetailsResponse(ORMSchema):
    pending: List[InstallmentDetailSchema]
    completed: List[InstallmentDetailSchema]
    total_pending_cents: int
    total_current_month_cents: int


class MonthlyProjectionSchema(ORMSchema):
    month: str
    total_cents: int


class DeleteGroupResponse(BaseModel):
    success: bool = True
    deleted: int


# Card statements

class StatementWindowSchema(ORMSchema):
    start: datetime
    end: datetime


class CardSummarySchema(ORMSchema):
    card_id: uuid.UUID
    card_name: str
    card_bank: Optional[str] = None
    total_cents: int
    window: StatementWindowSchema
    transactions: List[TransactionSchema]


class CardSummariesResponse(BaseModel):
    pending: List[CardSummarySchema]
    paid: List[TransactionSchema]


class PayCardSummaryRequest(BaseModel):
    """Request body for POST /v1/card-summaries/{card_id}/payments"""

    amount_cents: int = Field(..., gt=0)
    date: Instant
    payment_method_id: uuid.UUID
    description: str = Field(..., min_length=1)
    window_start: Optional[Instant] = None
    window_end: Optional[Instant] = None


class PayCardSummaryResponse(BaseModel):
    success: bool = True
    payment: TransactionSchema
    settled_transaction_ids: List[uuid.UUID]
    settled_cents: int
    unapplied_cents: int


# Taxes

class TaxSchema(ORMSchema):
    id: uuid.UUID
    name: str
    amount_cents: int
    month: Optional[int] = None
    year: Optional[int] = None
    is_paid: bool
    paid_transaction_id: Optional[uuid.UUID] = None


class TaxRequest(BaseModel):
    name: str = Field(..., min_length=1)
    amount_cents: int = Field(..., gt=0)
    month: int = Field(..., ge=0, le=11, description="0 = January")
    year: int = Field(..., ge=1)


class TaxUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    amount_cents: Optional[int] = Field(None, gt=0)
    month: Optional[int] = Field(None, ge=0, le=11)
    year: Optional[int] = Field(None, ge=1)


class MarkTaxPaidRequest(BaseModel):
    transaction_id: uuid.UUID
