"""Pytest fixtures for testing"""

import os

# Settings are read at import time; keep the app off the production database
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import uuid
import pytest
from datetime import datetime
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from ledger_lite.api.main import create_app
from ledger_lite.infrastructure.database.models import Base, CategoryRecord, PaymentMethodRecord
from ledger_lite.infrastructure.database.session import get_db
from ledger_lite.domain.models import Transaction, TransactionType


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

USER_ID = "user_123"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app, headers={"X-User-ID": USER_ID})


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def credit_card(db: Session) -> PaymentMethodRecord:
    """Enabled credit card closing on the 10th"""
    card = PaymentMethodRecord(
        user_id=USER_ID,
        name="Main Credit Card",
        type="Credit Card",
        bank="Default Bank",
        closing_day=10,
        is_enabled=True,
    )
    db.add(card)
    db.commit()
    return card


@pytest.fixture
def debit_card(db: Session) -> PaymentMethodRecord:
    card = PaymentMethodRecord(user_id=USER_ID, name="Main Debit Card", type="Debit Card", is_enabled=True)
    db.add(card)
    db.commit()
    return card


@pytest.fixture
def categories(db: Session) -> dict:
    """Default categories keyed by name"""
    records = {
        name: CategoryRecord(user_id=USER_ID, name=name, is_system=name == "Taxes")
        for name in ("Groceries", "Other", "Taxes")
    }
    db.add_all(records.values())
    db.commit()
    return {name: record.id for name, record in records.items()}


def make_transaction(
    amount_cents: int,
    date: datetime,
    group_id: uuid.UUID | None = None,
    description: str = "Purchase",
    payment_method_id: uuid.UUID | None = None,
) -> Transaction:
    """Card expense for pure-function tests"""
    method_id = payment_method_id or uuid.UUID(int=1)
    return Transaction(
        id=uuid.uuid4(),
        user_id=USER_ID,
        amount_cents=amount_cents,
        date=date,
        type=TransactionType.EXPENSE,
        category_id=uuid.UUID(int=2),
        payment_method_id=method_id,
        description=description,
        group_id=group_id,
        card_id=method_id,
        is_card_payment=True,
        is_paid=False,
    )
