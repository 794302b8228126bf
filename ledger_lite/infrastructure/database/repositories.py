"""Data access layer for ledger entities"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from sqlalchemy import update
from sqlalchemy.orm import Session
from ledger_lite.infrastructure.database.models import (
    BillingCycleRecord,
    CategoryRecord,
    PaymentMethodRecord,
    RecurringChargeRecord,
    TransactionRecord,
)
from ledger_lite.domain.models import (
    BillingCycle,
    Installment,
    PaymentMethod,
    PeriodAssignment,
    RecurringCharge,
    Transaction,
    TransactionDraft,
    TransactionType,
)


def transaction_to_domain(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        user_id=record.user_id,
        amount_cents=record.amount_cents,
        date=record.date,
        type=TransactionType(record.type),
        category_id=record.category_id,
        payment_method_id=record.payment_method_id,
        description=record.description,
        group_id=record.group_id,
        card_id=record.card_id,
        is_card_payment=record.is_card_payment,
        is_paid=record.is_paid,
        is_summary_payment=record.is_summary_payment,
        statement_card_id=record.statement_card_id,
        savings_fund_id=record.savings_fund_id,
        billing_cycle_id=record.billing_cycle_id,
    )


def cycle_to_domain(record: BillingCycleRecord) -> BillingCycle:
    return BillingCycle(
        id=record.id,
        user_id=record.user_id,
        start_date=record.start_date,
        end_date=record.end_date,
    )


def payment_method_to_domain(record: PaymentMethodRecord) -> PaymentMethod:
    return PaymentMethod(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        type=record.type,
        bank=record.bank,
        closing_day=record.closing_day,
        is_enabled=record.is_enabled,
    )


def charge_to_domain(record: RecurringChargeRecord) -> RecurringCharge:
    return RecurringCharge(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        amount_cents=record.amount_cents,
        month=record.month,
        year=record.year,
        is_paid=record.is_paid,
        date=record.date,
        paid_transaction_id=record.paid_transaction_id,
    )


class TransactionRepository:
    """Repository for transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, draft: TransactionDraft, **extra) -> Transaction:
        """Persist a single transaction"""
        record = TransactionRecord(
            user_id=draft.user_id,
            amount_cents=draft.amount_cents,
            date=draft.date,
            type=draft.type.value,
            category_id=draft.category_id,
            payment_method_id=draft.payment_method_id,
            description=draft.description,
            is_card_payment=draft.is_card_payment,
            is_paid=draft.is_paid,
            card_id=draft.card_id,
            billing_cycle_id=draft.billing_cycle_id,
            **extra,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return transaction_to_domain(record)

    def create_group(
        self,
        draft: TransactionDraft,
        installments: List[Installment],
        group_id: uuid.UUID,
    ) -> List[Transaction]:
        """Persist every installment of a purchase under one group_id"""
        records = [
            TransactionRecord(
                user_id=draft.user_id,
                amount_cents=inst.amount_cents,
                date=inst.date,
                type=draft.type.value,
                category_id=draft.category_id,
                payment_method_id=draft.payment_method_id,
                description=inst.description,
                is_card_payment=draft.is_card_payment,
                is_paid=draft.is_paid,
                card_id=draft.card_id,
                billing_cycle_id=draft.billing_cycle_id,
                group_id=group_id,
            )
            for inst in installments
        ]
        self.db.add_all(records)
        self.db.flush()
        return [transaction_to_domain(r) for r in records]

    def get_by_id(self, user_id: str, transaction_id: uuid.UUID) -> Optional[Transaction]:
        record = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id, TransactionRecord.id == transaction_id)
            .first()
        )
        return transaction_to_domain(record) if record else None

    def list_for_user(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        """Transactions newest first, optionally bounded by date"""
        query = self.db.query(TransactionRecord).filter(TransactionRecord.user_id == user_id)
        if start is not None:
            query = query.filter(TransactionRecord.date >= start)
        if end is not None:
            query = query.filter(TransactionRecord.date <= end)
        query = query.order_by(TransactionRecord.date.desc())
        if limit:
            query = query.limit(limit)
        return [transaction_to_domain(r) for r in query.all()]

    def get_group(self, user_id: str, group_id: uuid.UUID) -> List[Transaction]:
        records = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id, TransactionRecord.group_id == group_id)
            .order_by(TransactionRecord.date.asc())
            .all()
        )
        return [transaction_to_domain(r) for r in records]

    def delete_group(self, user_id: str, group_id: uuid.UUID) -> int:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id, TransactionRecord.group_id == group_id)
            .delete(synchronize_session=False)
        )

    def delete(self, user_id: str, transaction_id: uuid.UUID) -> int:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id, TransactionRecord.id == transaction_id)
            .delete(synchronize_session=False)
        )

    def get_installment_expenses(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Transaction]:
        """Grouped expense transactions, oldest first"""
        query = self.db.query(TransactionRecord).filter(
            TransactionRecord.user_id == user_id,
            TransactionRecord.type == TransactionType.EXPENSE.value,
            TransactionRecord.group_id.isnot(None),
        )
        if start is not None:
            query = query.filter(TransactionRecord.date >= start)
        if end is not None:
            query = query.filter(TransactionRecord.date <= end)
        return [transaction_to_domain(r) for r in query.order_by(TransactionRecord.date.asc()).all()]

    def get_unpaid_card_charges(
        self,
        user_id: str,
        card_id: uuid.UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Transaction]:
        """Unsettled card charges, oldest first"""
        query = self.db.query(TransactionRecord).filter(
            TransactionRecord.user_id == user_id,
            TransactionRecord.card_id == card_id,
            TransactionRecord.is_card_payment.is_(True),
            TransactionRecord.is_paid.is_(False),
        )
        if start is not None:
            query = query.filter(TransactionRecord.date >= start)
        if end is not None:
            query = query.filter(TransactionRecord.date <= end)
        return [transaction_to_domain(r) for r in query.order_by(TransactionRecord.date.asc()).all()]

    def mark_paid(self, transaction_ids: Sequence[uuid.UUID]) -> None:
        if not transaction_ids:
            return
        self.db.execute(
            update(TransactionRecord)
            .where(TransactionRecord.id.in_(list(transaction_ids)))
            .values(is_paid=True)
        )

    def get_summary_payments(self, user_id: str, since: datetime, limit: int = 10) -> List[Transaction]:
        """Statement settlements newest first"""
        records = (
            self.db.query(TransactionRecord)
            .filter(
                TransactionRecord.user_id == user_id,
                TransactionRecord.is_summary_payment.is_(True),
                TransactionRecord.date >= since,
            )
            .order_by(TransactionRecord.date.desc())
            .limit(limit)
            .all()
        )
        return [transaction_to_domain(r) for r in records]


class BillingCycleRepository:
    """Repository for billing cycles"""

    def __init__(self, db: Session):
        self.db = db

    def get_open_cycles(self, user_id: str) -> List[BillingCycle]:
        """Open cycles, newest start first"""
        records = (
            self.db.query(BillingCycleRecord)
            .filter(BillingCycleRecord.user_id == user_id, BillingCycleRecord.end_date.is_(None))
            .order_by(BillingCycleRecord.start_date.desc())
            .all()
        )
        return [cycle_to_domain(r) for r in records]

    def count_for_user(self, user_id: str) -> int:
        return self.db.query(BillingCycleRecord).filter(BillingCycleRecord.user_id == user_id).count()

    def get_last_closed(self, user_id: str) -> Optional[BillingCycle]:
        record = (
            self.db.query(BillingCycleRecord)
            .filter(BillingCycleRecord.user_id == user_id, BillingCycleRecord.end_date.isnot(None))
            .order_by(BillingCycleRecord.end_date.desc())
            .first()
        )
        return cycle_to_domain(record) if record else None

    def get_by_id(self, user_id: str, cycle_id: uuid.UUID) -> Optional[BillingCycle]:
        record = (
            self.db.query(BillingCycleRecord)
            .filter(BillingCycleRecord.user_id == user_id, BillingCycleRecord.id == cycle_id)
            .first()
        )
        return cycle_to_domain(record) if record else None

    def list_for_user(self, user_id: str) -> List[BillingCycle]:
        records = (
            self.db.query(BillingCycleRecord)
            .filter(BillingCycleRecord.user_id == user_id)
            .order_by(BillingCycleRecord.start_date.desc())
            .all()
        )
        return [cycle_to_domain(r) for r in records]

    def close_cycles(self, cycles: List[BillingCycle]) -> None:
        """Write end_date for each given cycle"""
        for cycle in cycles:
            self.db.execute(
                update(BillingCycleRecord)
                .where(BillingCycleRecord.id == cycle.id)
                .values(end_date=cycle.end_date)
            )

    def create(self, user_id: str, start_date: datetime) -> BillingCycle:
        record = BillingCycleRecord(user_id=user_id, start_date=start_date)
        self.db.add(record)
        self.db.flush()
        return cycle_to_domain(record)


class PaymentMethodRepository:
    """Read-only lookup of payment methods"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str, method_id: uuid.UUID) -> Optional[PaymentMethod]:
        record = (
            self.db.query(PaymentMethodRecord)
            .filter(PaymentMethodRecord.user_id == user_id, PaymentMethodRecord.id == method_id)
            .first()
        )
        return payment_method_to_domain(record) if record else None

    def list_for_user(self, user_id: str) -> Dict[uuid.UUID, PaymentMethod]:
        records = (
            self.db.query(PaymentMethodRecord)
            .filter(PaymentMethodRecord.user_id == user_id)
            .order_by(PaymentMethodRecord.name.asc())
            .all()
        )
        return {r.id: payment_method_to_domain(r) for r in records}

    def get_enabled_by_type(self, user_id: str, method_type: str) -> List[PaymentMethod]:
        records = (
            self.db.query(PaymentMethodRecord)
            .filter(
                PaymentMethodRecord.user_id == user_id,
                PaymentMethodRecord.type == method_type,
                PaymentMethodRecord.is_enabled.is_(True),
            )
            .all()
        )
        return [payment_method_to_domain(r) for r in records]


class CategoryRepository:
    """Read-only lookup of categories"""

    def __init__(self, db: Session):
        self.db = db

    def find_id_by_name(self, user_id: str, name: str) -> Optional[uuid.UUID]:
        record = (
            self.db.query(CategoryRecord)
            .filter(CategoryRecord.user_id == user_id, CategoryRecord.name == name)
            .first()
        )
        return record.id if record else None


class RecurringChargeRepository:
    """Repository for tax records"""

    def __init__(self, db: Session):
        self.db = db

    def _for_user(self, user_id: str):
        return self.db.query(RecurringChargeRecord).filter(RecurringChargeRecord.user_id == user_id)

    def get_legacy(self, user_id: str) -> List[RecurringCharge]:
        """Records missing month or year, oldest legacy date first"""
        records = (
            self._for_user(user_id)
            .filter((RecurringChargeRecord.month.is_(None)) | (RecurringChargeRecord.year.is_(None)))
            .order_by(RecurringChargeRecord.date.asc(), RecurringChargeRecord.created_at.asc())
            .all()
        )
        return [charge_to_domain(r) for r in records]

    def get_period_keys(self, user_id: str) -> List[Tuple[str, int, int]]:
        """(name, month, year) already in use"""
        rows = (
            self._for_user(user_id)
            .filter(RecurringChargeRecord.month.isnot(None), RecurringChargeRecord.year.isnot(None))
            .with_entities(RecurringChargeRecord.name, RecurringChargeRecord.month, RecurringChargeRecord.year)
            .all()
        )
        return [(name, month, year) for name, month, year in rows]

    def apply_period_keys(self, assignments: List[PeriodAssignment]) -> None:
        """Write every assignment in one executemany batch"""
        if not assignments:
            return
        self.db.execute(
            update(RecurringChargeRecord),
            [{"id": a.charge_id, "month": a.month, "year": a.year} for a in assignments],
        )

    def list_for_user(self, user_id: str) -> List[RecurringCharge]:
        records = (
            self._for_user(user_id)
            .order_by(RecurringChargeRecord.year.desc(), RecurringChargeRecord.month.desc())
            .all()
        )
        return [charge_to_domain(r) for r in records]

    def get_by_id(self, user_id: str, charge_id: uuid.UUID) -> Optional[RecurringChargeRecord]:
        return self._for_user(user_id).filter(RecurringChargeRecord.id == charge_id).first()

    def find_by_period(
        self,
        user_id: str,
        name: str,
        month: int,
        year: int,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> Optional[RecurringChargeRecord]:
        query = self._for_user(user_id).filter(
            RecurringChargeRecord.name == name,
            RecurringChargeRecord.month == month,
            RecurringChargeRecord.year == year,
        )
        if exclude_id is not None:
            query = query.filter(RecurringChargeRecord.id != exclude_id)
        return query.first()

    def create(self, user_id: str, name: str, amount_cents: int, month: int, year: int, date: datetime) -> RecurringCharge:
        record = RecurringChargeRecord(
            user_id=user_id,
            name=name,
            amount_cents=amount_cents,
            month=month,
            year=year,
            date=date,
            is_paid=False,
        )
        self.db.add(record)
        self.db.flush()
        return charge_to_domain(record)

    def unique_names(self, user_id: str) -> List[str]:
        rows = (
            self._for_user(user_id)
            .with_entities(RecurringChargeRecord.name)
            .distinct()
            .order_by(RecurringChargeRecord.name.asc())
            .all()
        )
        return [name for (name,) in rows]
