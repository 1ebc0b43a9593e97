"""Chart endpoints.

Thin wrappers around ``ChartService``: resolve the company/user scope,
run the aggregation and serialize the report with currency ids as
top-level string keys.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_chart_scope, get_currency_directory
from app.core.database import get_db
from app.core.logging import get_logger
from app.schemas.chart import ChartRequest
from app.services.charts.currency_directory import CurrencyDirectory
from app.services.charts.exceptions import InvalidDateRange
from app.services.charts.scope import ChartScope
from app.services.charts.service import ChartService

logger = get_logger(__name__)

router = APIRouter()


def _service(
    db: Session = Depends(get_db),
    scope: ChartScope = Depends(get_chart_scope),
    directory: CurrencyDirectory = Depends(get_currency_directory),
) -> ChartService:
    return ChartService(db=db, scope=scope, directory=directory)


@router.post("/totals")
def chart_totals(
    body: ChartRequest,
    service: ChartService = Depends(_service),
) -> dict:
    """Invoiced, revenue, outstanding and expense totals per currency.

    Currencies without activity for a metric get ``{}`` for that metric.
    """
    logger.info(
        "Totals requested: company=%s %s to %s",
        service.scope.company_id,
        body.start_date,
        body.end_date,
    )
    try:
        report = service.totals(body.start_date, body.end_date)
    except InvalidDateRange as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except SQLAlchemyError as exc:
        logger.exception("Totals query failed")
        raise HTTPException(status_code=500, detail=str(exc))

    return report.model_dump(mode="json")


@router.post("/summary")
def chart_summary(
    body: ChartRequest,
    service: ChartService = Depends(_service),
) -> dict:
    """Daily chart series per currency for the requested range."""
    logger.info(
        "Chart summary requested: company=%s %s to %s",
        service.scope.company_id,
        body.start_date,
        body.end_date,
    )
    try:
        report = service.chart_summary(body.start_date, body.end_date)
    except InvalidDateRange as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except SQLAlchemyError as exc:
        logger.exception("Chart summary query failed")
        raise HTTPException(status_code=500, detail=str(exc))

    return report.model_dump(mode="json")


@router.get("/currencies")
def chart_currencies(service: ChartService = Depends(_service)) -> dict:
    """Currencies the requesting user has activity in, keyed by id."""
    try:
        codes = service.get_currency_codes()
    except SQLAlchemyError as exc:
        logger.exception("Currency lookup failed")
        raise HTTPException(status_code=500, detail=str(exc))

    return {"currencies": {str(k): v for k, v in codes.items()}}
