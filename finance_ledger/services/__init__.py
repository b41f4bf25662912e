"""Business logic services."""

from finance_ledger.services.ledger_service import LedgerService
from finance_ledger.services.account_service import AccountService
from finance_ledger.services.transaction_service import TransactionService
from finance_ledger.services.alert_service import AlertService
from finance_ledger.services.investment_service import InvestmentService
from finance_ledger.services.category_service import CategoryService
from finance_ledger.services.report_service import ReportService

__all__ = [
    "LedgerService",
    "AccountService",
    "TransactionService",
    "AlertService",
    "InvestmentService",
    "CategoryService",
    "ReportService",
]
