#!/usr/bin/env python3
"""
Seed a demo company for the invoicing chart service.

Creates:
  - the currency table (USD, EUR, GBP, CAD)
  - one company (default currency USD) with an admin and a regular user
  - clients in USD, EUR and GBP, one archived and one deleted
  - invoices, payments and expenses spread over the first quarter of 2024

Reproducible: uses random.seed(42).

Usage:
    DATABASE_URL=sqlite:///./demo.db python -m scripts.seed_demo_data
"""

from __future__ import annotations

import random
from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from app.models import Client, Company, Currency, Expense, Invoice, Payment, User
from app.models.invoice import InvoiceStatus

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SEED = 42

CURRENCIES: list[tuple[int, str, str, str]] = [
    (1, "USD", "US Dollar", "$"),
    (2, "EUR", "Euro", "€"),
    (3, "GBP", "British Pound", "£"),
    (4, "CAD", "Canadian Dollar", "C$"),
]

# (name, currency_id, owner, archived, deleted)
CLIENTS: list[tuple[str, str, str, bool, bool]] = [
    ("Northwind Traders", "1", "admin", False, False),
    ("Contoso GmbH", "2", "admin", False, False),
    ("Fabrikam Ltd", "3", "member", False, False),
    ("Tailspin Toys", "1", "member", True, False),
    ("Litware Inc", "4", "admin", False, True),
]

PERIOD_START = date(2024, 1, 1)
PERIOD_DAYS = 90
INVOICES_PER_CLIENT = 6


def _random_day(rng: random.Random) -> date:
    return PERIOD_START + timedelta(days=rng.randrange(PERIOD_DAYS))


def _money(rng: random.Random, low: int, high: int) -> Decimal:
    return Decimal(rng.randrange(low * 100, high * 100)) / 100


def seed_demo_data(db: Session, seed: int = SEED) -> dict[str, int]:
    """Insert the demo company and return row counts per table."""
    rng = random.Random(seed)

    for currency_id, code, name, symbol in CURRENCIES:
        if db.get(Currency, currency_id) is None:
            db.add(Currency(id=currency_id, code=code, name=name, symbol=symbol))

    company = Company(name="Demo Company", settings={"currency_id": "1"})
    db.add(company)
    db.flush()

    users = {
        "admin": User(company_id=company.id, email="admin@demo.test", is_admin=True),
        "member": User(company_id=company.id, email="member@demo.test"),
    }
    db.add_all(users.values())
    db.flush()

    counts = {"clients": 0, "invoices": 0, "payments": 0, "expenses": 0}

    for name, currency_id, owner, archived, deleted in CLIENTS:
        user = users[owner]
        client = Client(
            company_id=company.id,
            user_id=user.id,
            name=name,
            settings={"currency_id": currency_id},
            is_deleted=deleted,
            deleted_at=datetime(2024, 2, 1) if archived else None,
        )
        db.add(client)
        db.flush()
        counts["clients"] += 1

        for _ in range(INVOICES_PER_CLIENT):
            issued = _random_day(rng)
            amount = _money(rng, 100, 5000)
            status_id = rng.choice(
                [InvoiceStatus.SENT, InvoiceStatus.PARTIAL, InvoiceStatus.PAID]
            )
            paid = {
                InvoiceStatus.SENT: Decimal("0"),
                InvoiceStatus.PARTIAL: (amount / 2).quantize(Decimal("0.01")),
                InvoiceStatus.PAID: amount,
            }[status_id]

            db.add(
                Invoice(
                    company_id=company.id,
                    user_id=user.id,
                    client_id=client.id,
                    status_id=status_id,
                    amount=amount,
                    balance=amount - paid,
                    date=issued,
                    due_date=issued + timedelta(days=30),
                )
            )
            counts["invoices"] += 1

            if paid:
                db.add(
                    Payment(
                        company_id=company.id,
                        user_id=user.id,
                        client_id=client.id,
                        currency_id=int(currency_id),
                        amount=paid,
                        refunded=Decimal("0"),
                        date=issued + timedelta(days=rng.randrange(1, 20)),
                    )
                )
                counts["payments"] += 1

    for owner, currency_id in (("admin", 1), ("admin", 2), ("member", 3)):
        for _ in range(4):
            db.add(
                Expense(
                    company_id=company.id,
                    user_id=users[owner].id,
                    currency_id=currency_id,
                    amount=_money(rng, 10, 800),
                    date=_random_day(rng),
                )
            )
            counts["expenses"] += 1

    db.commit()
    counts["company_id"] = company.id
    return counts


def main() -> None:
    from app.core.database import Base, SessionLocal, engine
    from app.core.logging import setup_logging

    logger = setup_logging()
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        counts = seed_demo_data(db)
    finally:
        db.close()

    logger.info(
        "Demo data seeded: company_id=%d clients=%d invoices=%d payments=%d expenses=%d",
        counts["company_id"],
        counts["clients"],
        counts["invoices"],
        counts["payments"],
        counts["expenses"],
    )


if __name__ == "__main__":
    main()
