"""Pytest fixtures for testing"""

import os

# Keep the module-level engine off PostgreSQL during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import date, datetime
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from debt_ledger.api.main import create_app
from debt_ledger.infrastructure.database.models import Base
from debt_ledger.infrastructure.database.session import get_db, enable_sqlite_savepoints
from debt_ledger.infrastructure.database.repositories import SqlLedgerStore
from debt_ledger.infrastructure.memory.store import InMemoryLedgerStore
from debt_ledger.domain.models import Debt, Transaction, INCOME


# Test database: one shared in-memory connection
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_savepoints(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
def sql_store(db: Session) -> SqlLedgerStore:
    return SqlLedgerStore(db)


@pytest.fixture
def memory_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


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
    return TestClient(app)


@pytest.fixture
def sample_debt() -> Debt:
    """12 monthly installments of 100,000 starting mid January 2024"""
    return Debt(
        name="Motorbike loan",
        total_amount=1_200_000,
        monthly_installment=100_000,
        tenor=12,
        start_date=date(2024, 1, 15),
        due_day=15,
        paid_installments=3,
    )


@pytest.fixture
def salary() -> Transaction:
    return Transaction(
        type=INCOME,
        name="Salary",
        category="Salary",
        amount=5_000_000,
        date=datetime(2024, 4, 1, 9, 0),
    )
