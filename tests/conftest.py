"""Pytest fixtures for testing"""

import os

# Point settings at SQLite before the application modules build their engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import itertools
import uuid
import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from cashflow_gateway.api.main import create_app
from cashflow_gateway.domain.models import Client, Invoice, InvoiceStatus
from cashflow_gateway.infrastructure.database.models import Base, ClientRecord, InvoiceRecord
from cashflow_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed reference date so date math is reproducible
TODAY = date(2024, 3, 15)


@pytest.fixture
def today() -> date:
    return TODAY


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
    return TestClient(app)


@pytest.fixture
def make_invoice() -> Callable[..., Invoice]:
    """Build domain invoices with sensible defaults (pending, 1000.00, due in 30 days)"""
    counter = itertools.count(1)

    def _make(**overrides) -> Invoice:
        n = next(counter)
        fields = dict(
            id=f"inv_{n}",
            amount=Decimal("1000.00"),
            issue_date=TODAY - timedelta(days=10),
            due_date=TODAY + timedelta(days=20),
            status=InvoiceStatus.PENDING,
        )
        fields.update(overrides)
        if not isinstance(fields["amount"], Decimal):
            fields["amount"] = Decimal(str(fields["amount"]))
        return Invoice(**fields)

    return _make


@pytest.fixture
def make_client() -> Callable[..., Client]:
    """Build domain clients with default payment statistics"""
    counter = itertools.count(1)

    def _make(**overrides) -> Client:
        n = next(counter)
        fields = dict(id=f"client_{n}", name=f"Client {n}")
        fields.update(overrides)
        return Client(**fields)

    return _make


@pytest.fixture
def seed_client(db: Session) -> Callable[..., ClientRecord]:
    """Insert a client row for a user"""

    def _seed(user_id: str, name: str, **fields) -> ClientRecord:
        record = ClientRecord(user_id=user_id, name=name, **fields)
        db.add(record)
        db.commit()
        return record

    return _seed


@pytest.fixture
def seed_invoice(db: Session) -> Callable[..., InvoiceRecord]:
    """Insert an invoice row for a user; created_at increases with each call"""
    counter = itertools.count(1)
    base_created = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _seed(user_id: str, amount: str, due_date: date, **fields) -> InvoiceRecord:
        fields.setdefault("issue_date", due_date - timedelta(days=30))
        fields.setdefault("status", InvoiceStatus.PENDING.value)
        fields.setdefault("created_at", base_created + timedelta(hours=next(counter)))
        record = InvoiceRecord(id=uuid.uuid4(), user_id=user_id, amount=Decimal(amount), due_date=due_date, **fields)
        db.add(record)
        db.commit()
        return record

    return _seed
