"""Resolve the set of currencies a company (as seen by one user) trades in."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.client import Client
from app.models.expense import Expense
from app.services.charts.currency_directory import normalize_currency_id
from app.services.charts.queries import client_currency_column
from app.services.charts.scope import ChartScope

logger = get_logger(__name__)


def resolve_currencies(db: Session, scope: ChartScope) -> list[int]:
    """Return the distinct currency ids relevant to *scope*.

    Sources, in order:
      1. the currency of every client (archived ones included),
      2. the company's default currency,
      3. the currency of every expense (archived ones included).

    Deleted clients and expenses are skipped, and non-admin users only
    contribute records they own.  The company currency is always present,
    so a company with no activity still yields exactly one id.
    """
    client_rows = (
        db.query(client_currency_column().label("id"))
        .filter(scope.owned_by(Client))
        .filter(Client.is_deleted.is_(False))
        .distinct()
        .all()
    )
    expense_rows = (
        db.query(Expense.currency_id.label("id"))
        .filter(scope.owned_by(Expense))
        .filter(Expense.is_deleted.is_(False))
        .distinct()
        .all()
    )

    candidates = [normalize_currency_id(row.id) for row in client_rows]
    candidates.append(scope.default_currency_id)
    candidates.extend(normalize_currency_id(row.id) for row in expense_rows)

    # dict.fromkeys keeps first-seen order while dropping repeats
    currencies = list(dict.fromkeys(c for c in candidates if c is not None))

    logger.debug(
        "Resolved currencies: company=%s user=%s admin=%s currencies=%s",
        scope.company_id,
        scope.user.id,
        scope.is_admin,
        currencies,
    )
    return currencies
