"""
Pydantic schemas for journal operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from finance_ledger.models.base import utcnow
from finance_ledger.models.enums import TransactionType
from finance_ledger.schemas.common import PositiveAmount


class TransactionCreate(BaseModel):
    amount: PositiveAmount
    type: TransactionType
    category: str = Field(default="Outros", min_length=1, max_length=100)
    date: datetime = Field(default_factory=utcnow)
    description: str | None = Field(default=None, max_length=255)


class TransactionUpdate(BaseModel):
    """
    New values for an existing entry.

    Omitted fields keep their stored value, so an empty update is
    a valid no-op edit.
    """
    amount: PositiveAmount | None = None
    type: TransactionType | None = None
    category: str | None = Field(default=None, min_length=1, max_length=100)
    date: datetime | None = None
    description: str | None = Field(default=None, max_length=255)


class TransactionResponse(BaseModel):
    id: str
    account_id: str
    amount: Decimal
    type: TransactionType
    category: str
    date: datetime
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PostingResponse(BaseModel):
    """A journal mutation together with the committed account balance."""
    transaction: TransactionResponse
    account_balance: Decimal
