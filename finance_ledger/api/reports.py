"""
Report API endpoints.
"""

from fastapi import APIRouter, Depends, Query

from finance_ledger.api.deps import get_user_context, to_http_exception
from finance_ledger.context import UserContext
from finance_ledger.errors import LedgerError
from finance_ledger.schemas.report import AuditReport, MonthlySummary
from finance_ledger.services.report_service import ReportService
from finance_ledger.store import LedgerStore, get_store

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/summary", response_model=MonthlySummary)
def monthly_summary(
    month: str | None = Query(default=None, pattern=r"^\d{4}-\d{2}$"),
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Total balance and the income/expense of one month (default: current)."""
    try:
        return ReportService(store).monthly_summary(ctx, month)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/audit", response_model=AuditReport)
def audit(
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Recompute every cached balance from its history and list drift."""
    return ReportService(store).audit(ctx)
