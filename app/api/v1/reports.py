"""Income reporting endpoints (read-only)."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_permission
from app.core.permissions import Permission, Principal
from app.schemas.reporting import IncomeSummary, TransactionReport, YearlyIncomeReport
from app.services.reporting_service import reporting_service

router = APIRouter()

ReportViewer = Annotated[Principal, Depends(require_permission(Permission.VIEW_REPORTS))]


# ============ INCOME ============


@router.get("/income/monthly", response_model=IncomeSummary)
async def get_monthly_income(
    admin: ReportViewer,
    db: Annotated[AsyncSession, Depends(get_db)],
    year: int = Query(..., ge=2020, le=2100),
    month: int = Query(..., ge=1, le=12),
) -> IncomeSummary:
    """Income, check-ins and check-outs for one calendar month."""
    data = await reporting_service.get_monthly_income(db, year, month)
    return IncomeSummary(**data)


@router.get("/income/yearly", response_model=YearlyIncomeReport)
async def get_yearly_income(
    admin: ReportViewer,
    db: Annotated[AsyncSession, Depends(get_db)],
    year: int = Query(..., ge=2020, le=2100),
) -> YearlyIncomeReport:
    """Income for a calendar year, broken down by month."""
    data = await reporting_service.get_yearly_income(db, year)
    return YearlyIncomeReport(**data)


# ============ TRANSACTIONS ============


@router.get("/transactions", response_model=TransactionReport)
async def get_transactions(
    admin: ReportViewer,
    db: Annotated[AsyncSession, Depends(get_db)],
    start_date: date | None = None,
    end_date: date | None = None,
) -> TransactionReport:
    """Check-in and check-out records for printing."""
    data = await reporting_service.list_transactions(db, start_date, end_date)
    return TransactionReport(**data)
