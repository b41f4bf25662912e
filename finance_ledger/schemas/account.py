"""
Pydantic schemas for account operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from finance_ledger.schemas.common import SignedAmount


class AccountCreate(BaseModel):
    """Request to open a new account."""
    name: str = Field(min_length=1, max_length=100)
    initial_balance: SignedAmount = Decimal("0")


class AccountRename(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class AccountResponse(BaseModel):
    id: str
    name: str
    initial_balance: Decimal
    balance: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class JournalBalanceResponse(BaseModel):
    """Cached balance side by side with the balance recomputed from the journal."""
    account_id: str
    balance: Decimal
    journal_balance: Decimal
    consistent: bool
