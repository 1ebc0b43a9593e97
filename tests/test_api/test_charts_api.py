"""API integration tests for the chart endpoints."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from app.api.deps import get_currency_directory
from app.main import app
from app.services.charts.currency_directory import CurrencyDirectory
from app.services.charts.service import ChartService

USD, EUR, UNKNOWN = 1, 2, 7
RANGE = {"start_date": "2024-03-01", "end_date": "2024-03-31"}


def _headers(user) -> dict:
    return {"X-Company-Id": str(user.company_id), "X-User-Id": str(user.id)}


@pytest.fixture
def directory_override():
    """Serve a fixed directory instead of the process-wide cache."""
    directory = CurrencyDirectory.from_pairs([(USD, "USD"), (EUR, "EUR")])
    app.dependency_overrides[get_currency_directory] = lambda: directory
    yield directory
    app.dependency_overrides.pop(get_currency_directory, None)


def test_totals_renders_missing_metrics_as_empty_objects(
    client, factory, admin, directory_override
):
    """USD client with an invoice, EUR expense only → EUR invoices is {}."""
    usd_client = factory.client(admin, currency_id=str(USD))
    factory.invoice(usd_client, amount="120.00", on=date(2024, 3, 10))
    factory.expense(admin, currency_id=EUR, amount="30.00", on=date(2024, 3, 11))

    response = client.post("/api/v1/charts/totals", json=RANGE, headers=_headers(admin))

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["start_date"] == "2024-03-01"
    assert data["end_date"] == "2024-03-31"
    assert data["currencies"] == {"1": "USD", "2": "EUR"}
    assert data["2"]["invoices"] == {}
    assert data["2"]["revenue"] == {}
    assert float(data["2"]["expenses"]["amount"]) == 30.0
    assert data["2"]["expenses"]["code"] == "EUR"
    assert float(data["1"]["invoices"]["amount"]) == 120.0
    assert data["1"]["invoices"]["currency_id"] == USD
    assert data["1"]["expenses"] == {}


def test_summary_lists_series_per_currency(
    client, factory, admin, directory_override
):
    c = factory.client(admin, currency_id=str(USD))
    factory.payment(c, currency_id=USD, amount="60.00", on=date(2024, 3, 12))

    response = client.post(
        "/api/v1/charts/summary", json=RANGE, headers=_headers(admin)
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["start_date"] == "2024-03-01"
    assert data["1"]["invoices"] == []
    assert data["1"]["payments"][0]["date"] == "2024-03-12"
    assert float(data["1"]["payments"][0]["total"]) == 60.0


def test_currencies_keeps_unknown_ids(client, factory, admin, directory_override):
    factory.expense(admin, currency_id=UNKNOWN)

    response = client.get("/api/v1/charts/currencies", headers=_headers(admin))

    assert response.status_code == 200
    assert response.json()["currencies"] == {"1": "USD", "7": ""}


def test_currency_cache_loaded_on_startup(factory, admin, client):
    """Without an override, codes come from the cache filled at startup."""
    response = client.get("/api/v1/charts/currencies", headers=_headers(admin))

    assert response.status_code == 200
    assert response.json()["currencies"] == {"1": "USD"}


def test_member_does_not_see_admin_currencies(
    client, factory, admin, member, directory_override
):
    factory.client(admin, currency_id=str(EUR))

    response = client.get("/api/v1/charts/currencies", headers=_headers(member))

    assert response.json()["currencies"] == {"1": "USD"}


def test_inverted_range_is_rejected(client, admin, directory_override):
    response = client.post(
        "/api/v1/charts/totals",
        json={"start_date": "2024-03-31", "end_date": "2024-03-01"},
        headers=_headers(admin),
    )
    assert response.status_code == 422


def test_invalid_date_format_is_rejected(client, admin, directory_override):
    response = client.post(
        "/api/v1/charts/summary",
        json={"start_date": "yesterday", "end_date": "2024-03-01"},
        headers=_headers(admin),
    )
    assert response.status_code == 422


def test_missing_actor_headers(client, directory_override):
    response = client.post("/api/v1/charts/totals", json=RANGE)
    assert response.status_code == 422


def test_unknown_company(client, admin, directory_override):
    response = client.post(
        "/api/v1/charts/totals",
        json=RANGE,
        headers={"X-Company-Id": "999", "X-User-Id": str(admin.id)},
    )
    assert response.status_code == 404
    assert "not found" in response.json()["detail"].lower()


def test_user_from_another_company(client, factory, admin, directory_override):
    other = factory.company(name="Other")
    outsider = factory.user(other, is_admin=True)

    response = client.post(
        "/api/v1/charts/totals",
        json=RANGE,
        headers={"X-Company-Id": str(admin.company_id), "X-User-Id": str(outsider.id)},
    )
    assert response.status_code == 403


def test_database_errors_return_500(
    client, admin, directory_override, monkeypatch
):
    def broken(self, start_date, end_date):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(ChartService, "totals", broken)

    response = client.post("/api/v1/charts/totals", json=RANGE, headers=_headers(admin))

    assert response.status_code == 500


def test_currencies_database_error_returns_500(
    client, admin, directory_override, monkeypatch
):
    def broken(self):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(ChartService, "get_currency_codes", broken)

    response = client.get("/api/v1/charts/currencies", headers=_headers(admin))

    assert response.status_code == 500
