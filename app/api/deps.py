"""Shared request dependencies for the chart routes."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.company import Company, User
from app.services.charts.currency_directory import CurrencyDirectory
from app.services.charts.scope import ChartScope


def get_chart_scope(
    x_company_id: int = Header(..., description="Company being reported on"),
    x_user_id: int = Header(..., description="User making the request"),
    db: Session = Depends(get_db),
) -> ChartScope:
    """Load the company and acting user named by the request headers."""
    company = db.get(Company, x_company_id)
    if company is None:
        raise HTTPException(
            status_code=404, detail=f"Company '{x_company_id}' not found"
        )

    user = db.get(User, x_user_id)
    if user is None:
        raise HTTPException(status_code=404, detail=f"User '{x_user_id}' not found")
    if user.company_id != company.id:
        raise HTTPException(
            status_code=403, detail="User does not belong to this company"
        )

    return ChartScope.for_user(company, user)


def get_currency_directory(request: Request) -> CurrencyDirectory:
    """Current snapshot of the process-wide currency directory."""
    return request.app.state.currency_cache.get()
