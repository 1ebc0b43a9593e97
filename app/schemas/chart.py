"""Pydantic schemas for chart requests and per-currency report payloads."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, model_serializer


class ChartRequest(BaseModel):
    """Request body for the summary and totals endpoints."""

    start_date: date = Field(
        ...,
        description="Start of the reporting range (inclusive)",
    )
    end_date: date = Field(
        ...,
        description="End of the reporting range (inclusive)",
    )


class MetricRow(BaseModel):
    """One aggregate figure for one currency over the requested range.

    A row without a ``currency_id`` is the empty metric: every numeric
    field is zero and it serializes as ``{}`` so API consumers can always
    index ``invoices``/``revenue``/... without a null check.
    """

    currency_id: Optional[int] = None
    code: str = ""
    amount: Decimal = Decimal("0")
    count: int = 0

    @classmethod
    def empty(cls) -> MetricRow:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.currency_id is None

    @model_serializer(mode="wrap")
    def _serialize(self, handler) -> dict[str, Any]:
        if self.is_empty:
            return {}
        return handler(self)


class ChartPoint(BaseModel):
    """A single day in a chart series."""

    date: date
    total: Decimal


class CurrencySummary(BaseModel):
    """Daily series for one currency (summary mode)."""

    invoices: list[ChartPoint] = Field(default_factory=list)
    outstanding: list[ChartPoint] = Field(default_factory=list)
    payments: list[ChartPoint] = Field(default_factory=list)
    expenses: list[ChartPoint] = Field(default_factory=list)


class CurrencyTotals(BaseModel):
    """Point-in-time totals for one currency (totals mode)."""

    invoices: MetricRow = Field(default_factory=MetricRow.empty)
    revenue: MetricRow = Field(default_factory=MetricRow.empty)
    outstanding: MetricRow = Field(default_factory=MetricRow.empty)
    expenses: MetricRow = Field(default_factory=MetricRow.empty)


def _flatten_currency_data(payload: dict[str, Any]) -> dict[str, Any]:
    """Lift the per-currency entries next to the date keys, keyed by string id."""
    data = payload.pop("data", {})
    for currency_id, entry in data.items():
        payload[str(currency_id)] = entry
    return payload


class SummaryReport(BaseModel):
    """Per-currency chart series for a date range.

    Serialized flat: ``{"start_date": ..., "end_date": ..., "1": {...}}``.
    """

    start_date: date
    end_date: date
    data: dict[int, CurrencySummary] = Field(default_factory=dict)

    @model_serializer(mode="wrap")
    def _serialize(self, handler) -> dict[str, Any]:
        return _flatten_currency_data(handler(self))


class TotalsReport(BaseModel):
    """Per-currency totals for a date range plus the id -> code map."""

    start_date: date
    end_date: date
    currencies: dict[int, str] = Field(default_factory=dict)
    data: dict[int, CurrencyTotals] = Field(default_factory=dict)

    @model_serializer(mode="wrap")
    def _serialize(self, handler) -> dict[str, Any]:
        return _flatten_currency_data(handler(self))
