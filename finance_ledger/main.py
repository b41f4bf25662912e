"""
Finance Ledger: FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

import uvicorn
from fastapi import FastAPI

from finance_ledger.config import configure_logging, get_settings
from finance_ledger.api.health import router as health_router
from finance_ledger.api.accounts import router as accounts_router
from finance_ledger.api.alerts import router as alerts_router
from finance_ledger.api.investments import router as investments_router
from finance_ledger.api.categories import router as categories_router
from finance_ledger.api.reports import router as reports_router

settings = get_settings()
configure_logging(settings)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Personal finance ledger with balance-consistent mutations",
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(alerts_router)
app.include_router(investments_router)
app.include_router(categories_router)
app.include_router(reports_router)


def run() -> None:
    uvicorn.run(
        "finance_ledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
