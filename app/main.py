"""Invoicing Chart Service - Main Application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import charts
from app.core.config import settings
from app.core.database import Base, SessionLocal, engine
from app.core.logging import setup_logging
from app.services.charts.currency_directory import (
    CurrencyDirectoryCache,
    CurrencyRefreshScheduler,
)

logger = setup_logging(settings.log_level)

# Create all tables on startup
logger.info("Creating database tables...")
Base.metadata.create_all(bind=engine)
logger.info("Database tables ready")

currency_cache = CurrencyDirectoryCache()
currency_refresher = CurrencyRefreshScheduler(
    cache=currency_cache,
    db_factory=SessionLocal,
    interval_seconds=settings.currency_refresh_interval_seconds,
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    currency_refresher.refresh_once()
    currency_refresher.start()
    try:
        yield
    finally:
        currency_refresher.stop()


# -- OpenAPI tag metadata for Swagger grouping --
tags_metadata = [
    {
        "name": "Health",
        "description": "Service health and readiness checks.",
    },
    {
        "name": "Charts",
        "description": (
            "Per-currency dashboard data for a company: daily invoice, "
            "outstanding, payment and expense series, and point-in-time "
            "totals for a date range."
        ),
    },
]


app = FastAPI(
    title="Invoicing Chart Service",
    description=(
        "## Multi-Currency Dashboard API\n\n"
        "Aggregates invoices, payments and expenses per currency for the "
        "dashboard of an invoicing application.\n\n"
        "Every request names the company and acting user through the "
        "`X-Company-Id` and `X-User-Id` headers. Admin users see every "
        "record of the company; other users only see their own.\n\n"
        "### Quick Start\n"
        "```bash\n"
        "curl -X POST /api/v1/charts/totals -H 'X-Company-Id: 1' -H 'X-User-Id: 1' "
        '-H "Content-Type: application/json" '
        '-d \'{"start_date":"2024-01-01","end_date":"2024-12-31"}\'\n'
        "```\n"
    ),
    version="1.0.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)
app.state.currency_cache = currency_cache

app.include_router(charts.router, prefix="/api/v1/charts", tags=["Charts"])

logger.info("Chart service API ready - routes registered")


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint.

    Returns a simple JSON object confirming the service is running.
    """
    return {
        "status": "healthy",
        "service": "invoicing-charts",
        "currencies_loaded": len(currency_cache.get()),
    }
