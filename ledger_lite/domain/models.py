"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass
class Transaction:
    """Atomic financial event"""

    id: uuid.UUID
    user_id: str
    amount_cents: int
    date: datetime
    type: TransactionType
    category_id: uuid.UUID
    payment_method_id: uuid.UUID
    description: str
    group_id: Optional[uuid.UUID] = None
    card_id: Optional[uuid.UUID] = None
    is_card_payment: bool = False
    is_paid: bool = True
    is_summary_payment: bool = False
    statement_card_id: Optional[uuid.UUID] = None  # Card settled by a summary payment
    savings_fund_id: Optional[uuid.UUID] = None
    billing_cycle_id: Optional[uuid.UUID] = None


@dataclass
class BillingCycle:
    """User-chosen accounting period; open while end_date is None"""

    id: uuid.UUID
    user_id: str
    start_date: datetime
    end_date: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.end_date is None


@dataclass
class PaymentMethod:
    id: uuid.UUID
    user_id: str
    name: str
    type: str
    bank: Optional[str] = None
    closing_day: Optional[int] = None  # 1-31, credit cards only
    is_enabled: bool = True

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.bank})" if self.bank else self.name


@dataclass
class RecurringCharge:
    """Tax record; (user_id, name, month, year) is unique once reconciled"""

    id: uuid.UUID
    user_id: str
    name: str
    amount_cents: int
    month: Optional[int]  # 0 = January
    year: Optional[int]
    is_paid: bool = False
    date: Optional[datetime] = None  # Legacy period source
    paid_transaction_id: Optional[uuid.UUID] = None


@dataclass
class TransactionDraft:
    """Values for a new transaction before it is split and stored"""

    user_id: str
    amount_cents: int
    date: datetime
    type: TransactionType
    category_id: uuid.UUID
    payment_method_id: uuid.UUID
    description: str
    is_card_payment: bool = False
    is_paid: bool = True
    card_id: Optional[uuid.UUID] = None
    billing_cycle_id: Optional[uuid.UUID] = None


@dataclass
class Installment:
    """Single dated charge of an installment purchase"""

    date: datetime
    amount_cents: int
    description: str


@dataclass
class StatementWindow:
    start: datetime
    end: datetime


@dataclass
class PaymentAllocation:
    """Outcome of FIFO reconciliation"""

    settled_ids: List[uuid.UUID]
    settled_cents: int
    unapplied_cents: int


@dataclass
class CardSummary:
    card_id: uuid.UUID
    card_name: str
    card_bank: Optional[str]
    total_cents: int
    window: StatementWindow
    transactions: List[Transaction] = field(default_factory=list)


@dataclass
class InstallmentDetail:
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


@dataclass
class InstallmentOverview:
    pending: List[InstallmentDetail]
    completed: List[InstallmentDetail]
    total_pending_cents: int
    total_current_month_cents: int


@dataclass
class MonthlyProjection:
    month: str  # YYYY-MM
    total_cents: int


@dataclass
class PeriodAssignment:
    charge_id: uuid.UUID
    month: int
    year: int


@dataclass
class TransactionInput:
    """Caller-supplied values for adding or re-creating a transaction"""

    amount_cents: int
    date: datetime
    type: TransactionType
    category_id: uuid.UUID
    payment_method_id: uuid.UUID
    description: str
    installments: Optional[int] = None


@dataclass
class InstallmentPurchase:
    """An installment group folded back into the values it was created from"""

    group_id: uuid.UUID
    first_transaction_id: uuid.UUID
    description: str
    total_cents: int
    date: datetime
    category_id: uuid.UUID
    payment_method_id: uuid.UUID
    installments: int
