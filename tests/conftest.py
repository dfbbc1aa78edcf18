"""Pytest fixtures for testing"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Generator, Optional
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from fiado_ledger.api.main import create_app
from fiado_ledger.config import Settings
from fiado_ledger.infrastructure.database.models import Base, Customer, LedgerTransaction
from fiado_ledger.infrastructure.database.session import build_engine, build_session_factory


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Isolated in-memory database per test"""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(engine: Engine) -> Generator[Session, None, None]:
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        gemini_api_key="",
        week_starts_on=0,
        log_level="WARNING",
    )


@pytest.fixture
def client(engine: Engine, test_settings: Settings) -> TestClient:
    """FastAPI test client bound to the test database"""
    app = create_app(test_settings, engine=engine)
    return TestClient(app)


@pytest.fixture
def make_customer(db: Session) -> Callable[..., Customer]:
    def _make(name: str = "Ana", phone: Optional[str] = None) -> Customer:
        customer = Customer(name=name, phone=phone)
        db.add(customer)
        db.commit()
        return customer

    return _make


@pytest.fixture
def make_transaction(db: Session) -> Callable[..., LedgerTransaction]:
    """Insert a transaction with an explicit date"""

    def _make(
        customer: Customer,
        amount: str,
        date: datetime,
        description: Optional[str] = None,
        closure_id: Optional[int] = None,
    ) -> LedgerTransaction:
        txn = LedgerTransaction(
            customer_id=customer.id,
            amount=Decimal(amount),
            description=description,
            date=date,
            closure_id=closure_id,
        )
        db.add(txn)
        db.commit()
        return txn

    return _make
