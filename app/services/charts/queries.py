"""Per-metric aggregate queries behind the chart service.

Totals queries aggregate every currency at once and tag each row with
its ``currency_id``; chart queries return a daily ``{date, total}``
series for one currency.  Every query is scoped to the company (and to
the acting user unless they are an admin), skips deleted records and
treats the date range as inclusive on both ends.  Clients without a
currency setting are reported in the company currency.

Rows are plain dicts so callers can decorate them in place.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import Integer, cast, func
from sqlalchemy.orm import Query, Session

from app.models.client import Client
from app.models.expense import Expense
from app.models.invoice import Invoice, InvoiceStatus
from app.models.payment import Payment
from app.services.charts.scope import ChartScope

# Invoices that count as issued / still awaiting payment
INVOICED_STATUSES = (InvoiceStatus.SENT, InvoiceStatus.PARTIAL, InvoiceStatus.PAID)
OUTSTANDING_STATUSES = (InvoiceStatus.SENT, InvoiceStatus.PARTIAL)


def client_currency_column():
    """The client's currency id as stored in its JSON settings."""
    return Client.settings["currency_id"].as_string()


def _rows(query: Query) -> list[dict]:
    return [dict(row._mapping) for row in query.all()]


class ChartQueries:
    """Runs the aggregate queries for one company/actor scope."""

    def __init__(self, db: Session, scope: ChartScope) -> None:
        self.db = db
        self.scope = scope

    # ── Totals (all currencies) ──────────────────────────────────────

    def invoices_query(self, start_date: date, end_date: date) -> list[dict]:
        """Invoiced amount and invoice count per client currency."""
        currency = self._client_currency()
        query = (
            self._invoice_base(
                start_date,
                end_date,
                INVOICED_STATUSES,
                currency.label("currency_id"),
                func.sum(Invoice.amount).label("amount"),
                func.count(Invoice.id).label("count"),
            )
            .group_by(currency)
        )
        return _rows(query)

    def outstanding_query(self, start_date: date, end_date: date) -> list[dict]:
        """Open balance and number of unpaid invoices per client currency."""
        currency = self._client_currency()
        query = (
            self._invoice_base(
                start_date,
                end_date,
                OUTSTANDING_STATUSES,
                currency.label("currency_id"),
                func.sum(Invoice.balance).label("amount"),
                func.count(Invoice.id).label("count"),
            )
            .group_by(currency)
        )
        return _rows(query)

    def revenue_query(self, start_date: date, end_date: date) -> list[dict]:
        """Payments received, net of refunds, per payment currency."""
        query = (
            self._payment_base(
                start_date,
                end_date,
                Payment.currency_id.label("currency_id"),
                func.sum(Payment.amount - Payment.refunded).label("amount"),
                func.count(Payment.id).label("count"),
            )
            .group_by(Payment.currency_id)
        )
        return _rows(query)

    def expenses_query(self, start_date: date, end_date: date) -> list[dict]:
        """Expense total per expense currency."""
        query = (
            self._expense_base(
                start_date,
                end_date,
                Expense.currency_id.label("currency_id"),
                func.sum(Expense.amount).label("amount"),
                func.count(Expense.id).label("count"),
            )
            .group_by(Expense.currency_id)
        )
        return _rows(query)

    # ── Chart series (one currency) ──────────────────────────────────

    def invoice_chart_query(
        self, start_date: date, end_date: date, currency_id: int
    ) -> list[dict]:
        query = (
            self._invoice_base(
                start_date,
                end_date,
                INVOICED_STATUSES,
                Invoice.date.label("date"),
                func.sum(Invoice.amount).label("total"),
            )
            .filter(self._client_currency() == currency_id)
            .group_by(Invoice.date)
            .order_by(Invoice.date)
        )
        return _rows(query)

    def outstanding_chart_query(
        self, start_date: date, end_date: date, currency_id: int
    ) -> list[dict]:
        """Open balances bucketed by due date (invoice date when unset)."""
        due = func.coalesce(Invoice.due_date, Invoice.date)
        query = (
            self.db.query(due.label("date"), func.sum(Invoice.balance).label("total"))
            .select_from(Invoice)
            .join(Client, Invoice.client_id == Client.id)
            .filter(self.scope.owned_by(Invoice))
            .filter(Invoice.is_deleted.is_(False))
            .filter(Client.is_deleted.is_(False))
            .filter(Invoice.status_id.in_(OUTSTANDING_STATUSES))
            .filter(due.between(start_date, end_date))
            .filter(self._client_currency() == currency_id)
            .group_by(due)
            .order_by(due)
        )
        return _rows(query)

    def payment_chart_query(
        self, start_date: date, end_date: date, currency_id: int
    ) -> list[dict]:
        query = (
            self._payment_base(
                start_date,
                end_date,
                Payment.date.label("date"),
                func.sum(Payment.amount - Payment.refunded).label("total"),
            )
            .filter(Payment.currency_id == currency_id)
            .group_by(Payment.date)
            .order_by(Payment.date)
        )
        return _rows(query)

    def expense_chart_query(
        self, start_date: date, end_date: date, currency_id: int
    ) -> list[dict]:
        query = (
            self._expense_base(
                start_date,
                end_date,
                Expense.date.label("date"),
                func.sum(Expense.amount).label("total"),
            )
            .filter(Expense.currency_id == currency_id)
            .group_by(Expense.date)
            .order_by(Expense.date)
        )
        return _rows(query)

    # ── Private helpers ──────────────────────────────────────────────

    def _client_currency(self):
        """Client currency as an integer, falling back to the company currency."""
        return cast(
            func.coalesce(
                client_currency_column(), str(self.scope.default_currency_id)
            ),
            Integer,
        )

    def _invoice_base(
        self,
        start_date: date,
        end_date: date,
        statuses: tuple[int, ...],
        *columns,
    ) -> Query:
        return (
            self.db.query(*columns)
            .select_from(Invoice)
            .join(Client, Invoice.client_id == Client.id)
            .filter(self.scope.owned_by(Invoice))
            .filter(Invoice.is_deleted.is_(False))
            .filter(Client.is_deleted.is_(False))
            .filter(Invoice.status_id.in_(statuses))
            .filter(Invoice.date.between(start_date, end_date))
        )

    def _payment_base(self, start_date: date, end_date: date, *columns) -> Query:
        return (
            self.db.query(*columns)
            .select_from(Payment)
            .join(Client, Payment.client_id == Client.id)
            .filter(self.scope.owned_by(Payment))
            .filter(Payment.is_deleted.is_(False))
            .filter(Client.is_deleted.is_(False))
            .filter(Payment.date.between(start_date, end_date))
        )

    def _expense_base(self, start_date: date, end_date: date, *columns) -> Query:
        return (
            self.db.query(*columns)
            .select_from(Expense)
            .filter(self.scope.owned_by(Expense))
            .filter(Expense.is_deleted.is_(False))
            .filter(Expense.date.between(start_date, end_date))
        )
