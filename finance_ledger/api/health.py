"""
Health check endpoint.

Used by load balancers, monitoring systems, and humans
to verify the application is running and responsive.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from finance_ledger.errors import LedgerError
from finance_ledger.store import LedgerStore, get_store

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(store: LedgerStore = Depends(get_store)):
    """
    Return application health status including database connectivity.

    The database check executes a simple query to verify
    the connection is alive.
    """
    try:
        store.run(lambda db: db.execute(text("SELECT 1")), name="health")
        db_status = "healthy"
    except (SQLAlchemyError, LedgerError):
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "finance-ledger",
        "database": db_status,
    }
