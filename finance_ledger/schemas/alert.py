"""
Pydantic schemas for recurring alerts.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from finance_ledger.models.enums import AlertType
from finance_ledger.schemas.common import PositiveAmount


class AlertCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    day_of_month: int = Field(default=5, ge=1, le=31)
    category: str = Field(default="Outros", min_length=1, max_length=100)
    amount: PositiveAmount | None = None
    account_id: str | None = None
    type: AlertType = AlertType.PAYABLE


class AlertUpdate(BaseModel):
    """Changes to the alert definition. Payment state is not editable here."""
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    day_of_month: int | None = Field(default=None, ge=1, le=31)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    amount: PositiveAmount | None = None
    account_id: str | None = None
    type: AlertType | None = None


class MarkPaidRequest(BaseModel):
    """
    Fallbacks for alerts created without an amount or account.

    Values stored on the alert take precedence.
    """
    account_id: str | None = None
    amount: PositiveAmount | None = None


class AlertResponse(BaseModel):
    id: str
    title: str
    description: str | None
    day_of_month: int
    category: str
    amount: Decimal | None
    account_id: str | None
    type: AlertType
    last_paid_month: str | None
    transaction_id: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class AlertPaymentResponse(BaseModel):
    alert: AlertResponse
    account_balance: Decimal | None
