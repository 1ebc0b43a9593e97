"""Shared test fixtures for the invoicing chart service tests.

Uses a SQLite file database so tests run without PostgreSQL.
"""

from __future__ import annotations

import os

# Override DATABASE_URL before importing anything from app — the Settings
# model reads .env eagerly via pydantic-settings, and the module-level
# ``engine`` in app.core.database would try to connect to PostgreSQL.
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["CURRENCY_REFRESH_INTERVAL_SECONDS"] = "0"

import itertools
from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from fastapi.testclient import TestClient

from app.core.database import Base, get_db
from app.main import app
from app.models import Client, Company, Currency, Expense, Invoice, Payment, User
from app.models.invoice import InvoiceStatus
from app.services.charts.scope import ChartScope

# Use SQLite file-based database for tests (no PostgreSQL needed)
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)


@event.listens_for(engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

USD, EUR, GBP = 1, 2, 3


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with overridden DB dependency."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class Factory:
    """Builds persisted records with sensible defaults."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self._emails = itertools.count(1)

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        return obj

    def currency(self, id: int, code: str, name: str = "") -> Currency:
        return self._save(Currency(id=id, code=code, name=name or code))

    def company(self, currency_id: str = "1", name: str = "Acme") -> Company:
        return self._save(Company(name=name, settings={"currency_id": currency_id}))

    def user(self, company: Company, is_admin: bool = False) -> User:
        email = f"user{next(self._emails)}@example.com"
        return self._save(User(company_id=company.id, email=email, is_admin=is_admin))

    def client(
        self,
        user: User,
        currency_id: str | None = "1",
        is_deleted: bool = False,
        archived: bool = False,
    ) -> Client:
        settings = {} if currency_id is None else {"currency_id": currency_id}
        return self._save(
            Client(
                company_id=user.company_id,
                user_id=user.id,
                name="Client",
                settings=settings,
                is_deleted=is_deleted,
                deleted_at=datetime(2024, 1, 1) if archived else None,
            )
        )

    def invoice(
        self,
        client: Client,
        amount: str = "100.00",
        balance: str = "0.00",
        on: date = date(2024, 3, 10),
        due: date | None = None,
        status_id: int = InvoiceStatus.SENT,
        is_deleted: bool = False,
        user: User | None = None,
    ) -> Invoice:
        return self._save(
            Invoice(
                company_id=client.company_id,
                user_id=user.id if user else client.user_id,
                client_id=client.id,
                status_id=status_id,
                amount=Decimal(amount),
                balance=Decimal(balance),
                date=on,
                due_date=due,
                is_deleted=is_deleted,
            )
        )

    def payment(
        self,
        client: Client,
        currency_id: int = USD,
        amount: str = "50.00",
        refunded: str = "0.00",
        on: date = date(2024, 3, 12),
        is_deleted: bool = False,
    ) -> Payment:
        return self._save(
            Payment(
                company_id=client.company_id,
                user_id=client.user_id,
                client_id=client.id,
                currency_id=currency_id,
                amount=Decimal(amount),
                refunded=Decimal(refunded),
                date=on,
                is_deleted=is_deleted,
            )
        )

    def expense(
        self,
        user: User,
        currency_id: int = USD,
        amount: str = "25.00",
        on: date = date(2024, 3, 15),
        is_deleted: bool = False,
        archived: bool = False,
    ) -> Expense:
        return self._save(
            Expense(
                company_id=user.company_id,
                user_id=user.id,
                currency_id=currency_id,
                amount=Decimal(amount),
                date=on,
                is_deleted=is_deleted,
                deleted_at=datetime(2024, 1, 1) if archived else None,
            )
        )


@pytest.fixture
def factory(db_session) -> Factory:
    return Factory(db_session)


@pytest.fixture
def company(factory) -> Company:
    """A company whose default currency is USD, with USD/EUR/GBP known."""
    factory.currency(USD, "USD", "US Dollar")
    factory.currency(EUR, "EUR", "Euro")
    factory.currency(GBP, "GBP", "British Pound")
    return factory.company(currency_id=str(USD))


@pytest.fixture
def admin(factory, company) -> User:
    return factory.user(company, is_admin=True)


@pytest.fixture
def member(factory, company) -> User:
    return factory.user(company, is_admin=False)


@pytest.fixture
def admin_scope(company, admin) -> ChartScope:
    return ChartScope.for_user(company, admin)


@pytest.fixture
def member_scope(company, member) -> ChartScope:
    return ChartScope.for_user(company, member)
