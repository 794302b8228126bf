"""SQLAlchemy ORM models for the ledger store"""

import uuid
from sqlalchemy import Column, BigInteger, Boolean, DateTime, Integer, Text, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class TransactionRecord(Base):
    """Financial event; installment members share group_id"""

    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    date = Column(DateTime, nullable=False)
    type = Column(Text, nullable=False)
    category_id = Column(UUID(as_uuid=True), nullable=False)
    payment_method_id = Column(UUID(as_uuid=True), nullable=False)
    description = Column(Text, nullable=False, default="")
    group_id = Column(UUID(as_uuid=True), nullable=True)
    card_id = Column(UUID(as_uuid=True), nullable=True)
    is_card_payment = Column(Boolean, nullable=False, default=False)
    is_paid = Column(Boolean, nullable=False, default=True)
    is_summary_payment = Column(Boolean, nullable=False, default=False)
    statement_card_id = Column(UUID(as_uuid=True), nullable=True)
    savings_fund_id = Column(UUID(as_uuid=True), nullable=True)
    billing_cycle_id = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_user_group", "user_id", "group_id"),
        Index("ix_transactions_user_card_unpaid", "user_id", "card_id", "is_paid", "is_card_payment", "date"),
        Index("ix_transactions_user_summary", "user_id", "is_summary_payment", "date"),
    )


class BillingCycleRecord(Base):
    """User accounting period; open while end_date is NULL"""

    __tablename__ = "billing_cycles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PaymentMethodRecord(Base):
    __tablename__ = "payment_methods"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    bank = Column(Text, nullable=True)
    closing_day = Column(Integer, nullable=True)
    is_enabled = Column(Boolean, nullable=False, default=True)


class CategoryRecord(Base):
    __tablename__ = "categories"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    is_enabled = Column(Boolean, nullable=False, default=True)
    is_system = Column(Boolean, nullable=False, default=False)


class RecurringChargeRecord(Base):
    """Tax occurrence keyed by (user_id, name, month, year)"""

    __tablename__ = "recurring_charges"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    month = Column(Integer, nullable=True)  # NULL on legacy rows
    year = Column(Integer, nullable=True)
    date = Column(DateTime, nullable=True)
    is_paid = Column(Boolean, nullable=False, default=False)
    paid_transaction_id = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (Index("ix_recurring_charges_period", "user_id", "name", "year", "month"),)
