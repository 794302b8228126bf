"""Database session management with connection pooling"""

import logging
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from ledger_lite.config import settings
from ledger_lite.domain.exceptions import StoreError

# Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    pool_size=10,
    max_overflow=10,
    pool_recycle=3600,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session, operation: str) -> Iterator[Session]:
    """
    Commit the work done inside the block, or roll it back.

    Store failures are re-raised as StoreError carrying the operation name
    ("failed to start new billing cycle: ..."). Domain and unexpected errors
    propagate unchanged after the rollback.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Store failure during {operation}: {e}", extra={"step": operation})
        raise StoreError(f"failed to {operation}: {e}") from e
    except Exception:
        db.rollback()
        raise
