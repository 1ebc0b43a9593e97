"""Chart service — per-currency dashboards for a company.

Two report shapes are built for a date range:

  * ``chart_summary``: daily series per currency, fetched with one query
    per (currency, metric) pair.
  * ``totals``: one figure per currency and metric.  Each metric is
    fetched once for all currencies, decorated with currency codes, then
    matched back to every resolved currency.  Metrics with no row for a
    currency get ``MetricRow.empty()``.

Data-access errors are not caught here; a report is either complete or
the call fails.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.schemas.chart import (
    ChartPoint,
    CurrencySummary,
    CurrencyTotals,
    MetricRow,
    SummaryReport,
    TotalsReport,
)
from app.services.charts.currency_directory import (
    CurrencyDirectory,
    normalize_currency_id,
)
from app.services.charts.currency_resolver import resolve_currencies
from app.services.charts.exceptions import InvalidDateRange
from app.services.charts.queries import ChartQueries
from app.services.charts.scope import ChartScope

logger = get_logger(__name__)


def find_row(rows: Iterable[dict], currency_id: int) -> Optional[dict]:
    """Return the first row tagged with *currency_id*, or None."""
    for row in rows:
        if row.get("currency_id") == currency_id:
            return row
    return None


def _metric(rows: list[dict], currency_id: int) -> MetricRow:
    row = find_row(rows, currency_id)
    if row is None:
        return MetricRow.empty()
    return MetricRow(
        currency_id=row["currency_id"],
        code=row.get("code", ""),
        amount=row.get("amount") or 0,
        count=row.get("count") or 0,
    )


def _series(rows: list[dict]) -> list[ChartPoint]:
    return [ChartPoint(date=r["date"], total=r["total"] or 0) for r in rows]


class ChartService:
    """Builds chart and totals reports for one company/user scope."""

    def __init__(
        self,
        db: Session,
        scope: ChartScope,
        directory: CurrencyDirectory,
        queries: Optional[ChartQueries] = None,
    ) -> None:
        self.db = db
        self.scope = scope
        self.directory = directory
        self.queries = queries or ChartQueries(db, scope)

    # ── Public API ───────────────────────────────────────────────────

    def get_currency_codes(self) -> dict[int, str]:
        """Map every resolved currency id to its code ("" when unknown)."""
        return {
            currency_id: self.directory.code_for(currency_id)
            for currency_id in resolve_currencies(self.db, self.scope)
        }

    def chart_summary(self, start_date: date, end_date: date) -> SummaryReport:
        """Daily invoices/outstanding/payments/expenses series per currency."""
        _check_range(start_date, end_date)
        currencies = self.get_currency_codes()

        report = SummaryReport(start_date=start_date, end_date=end_date)
        for currency_id in currencies:
            logger.debug("Fetching chart series: currency_id=%s", currency_id)
            report.data[currency_id] = CurrencySummary(
                invoices=_series(
                    self.queries.invoice_chart_query(start_date, end_date, currency_id)
                ),
                outstanding=_series(
                    self.queries.outstanding_chart_query(
                        start_date, end_date, currency_id
                    )
                ),
                payments=_series(
                    self.queries.payment_chart_query(start_date, end_date, currency_id)
                ),
                expenses=_series(
                    self.queries.expense_chart_query(start_date, end_date, currency_id)
                ),
            )

        logger.info(
            "Chart summary built: company=%s range=%s..%s currencies=%d",
            self.scope.company_id,
            start_date,
            end_date,
            len(currencies),
        )
        return report

    def totals(self, start_date: date, end_date: date) -> TotalsReport:
        """Invoiced, revenue, outstanding and expense totals per currency."""
        _check_range(start_date, end_date)
        currencies = self.get_currency_codes()

        revenue = self.get_revenue(start_date, end_date)
        outstanding = self.get_outstanding(start_date, end_date)
        expenses = self.get_expenses(start_date, end_date)
        invoices = self.get_invoices(start_date, end_date)

        report = TotalsReport(
            start_date=start_date,
            end_date=end_date,
            currencies=currencies,
        )
        for currency_id in currencies:
            report.data[currency_id] = CurrencyTotals(
                invoices=_metric(invoices, currency_id),
                revenue=_metric(revenue, currency_id),
                outstanding=_metric(outstanding, currency_id),
                expenses=_metric(expenses, currency_id),
            )

        logger.info(
            "Totals built: company=%s range=%s..%s currencies=%d",
            self.scope.company_id,
            start_date,
            end_date,
            len(currencies),
        )
        return report

    def get_invoices(self, start_date: date, end_date: date) -> list[dict]:
        return self.add_currency_codes(
            self.queries.invoices_query(start_date, end_date)
        )

    def get_revenue(self, start_date: date, end_date: date) -> list[dict]:
        return self.add_currency_codes(self.queries.revenue_query(start_date, end_date))

    def get_outstanding(self, start_date: date, end_date: date) -> list[dict]:
        return self.add_currency_codes(
            self.queries.outstanding_query(start_date, end_date)
        )

    def get_expenses(self, start_date: date, end_date: date) -> list[dict]:
        return self.add_currency_codes(
            self.queries.expenses_query(start_date, end_date)
        )

    def add_currency_codes(self, rows: list[dict]) -> list[dict]:
        """Normalize each row's ``currency_id`` and attach its ``code``.

        Rows are updated in place and the same list is returned.
        """
        for row in rows:
            row["currency_id"] = normalize_currency_id(row.get("currency_id"))
            row["code"] = self.directory.code_for(row["currency_id"])
        return rows


def _check_range(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise InvalidDateRange(start_date, end_date)
