"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from finance_ledger.models.base import Base
from finance_ledger.models.enums import (
    TransactionType,
    MovementType,
    AlertType,
)
from finance_ledger.models.account import Account
from finance_ledger.models.transaction import Transaction
from finance_ledger.models.alert import Alert
from finance_ledger.models.investment_fund import InvestmentFund
from finance_ledger.models.investment_movement import InvestmentMovement
from finance_ledger.models.category import Category, DEFAULT_CATEGORIES

__all__ = [
    "Base",
    "TransactionType",
    "MovementType",
    "AlertType",
    "Account",
    "Transaction",
    "Alert",
    "InvestmentFund",
    "InvestmentMovement",
    "Category",
    "DEFAULT_CATEGORIES",
]
