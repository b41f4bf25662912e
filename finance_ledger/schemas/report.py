"""
Pydantic schemas for reports.
"""

from decimal import Decimal

from pydantic import BaseModel, computed_field


class MonthlySummary(BaseModel):
    month: str
    total_balance: Decimal
    total_income: Decimal
    total_expense: Decimal
    net: Decimal


class BalanceDrift(BaseModel):
    """A document whose cached balance disagrees with its history."""
    id: str
    name: str
    cached_balance: Decimal
    expected_balance: Decimal


class AuditReport(BaseModel):
    accounts: list[BalanceDrift]
    funds: list[BalanceDrift]

    @computed_field
    @property
    def consistent(self) -> bool:
        return not self.accounts and not self.funds
