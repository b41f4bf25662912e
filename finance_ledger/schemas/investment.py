"""
Pydantic schemas for investment funds and their movements.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from finance_ledger.models.base import utcnow
from finance_ledger.models.enums import MovementType
from finance_ledger.schemas.common import PositiveAmount, QuotaValue


class FundCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    custodian_account_id: str


class FundResponse(BaseModel):
    id: str
    name: str
    custodian_account_id: str
    balance: Decimal
    last_quota_value: Decimal | None
    deleting: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ContributionCreate(BaseModel):
    origin_account_id: str
    amount: PositiveAmount
    date: datetime = Field(default_factory=utcnow)
    quota_value: QuotaValue | None = None


class ContributionUpdate(BaseModel):
    """
    New values for an existing contribution.

    Omitted fields keep their stored value. quota_value can be
    cleared by sending it explicitly as null.
    """
    origin_account_id: str | None = None
    amount: PositiveAmount | None = None
    date: datetime | None = None
    quota_value: QuotaValue | None = None


class MovementResponse(BaseModel):
    id: str
    fund_id: str
    origin_account_id: str
    amount: Decimal
    type: MovementType
    date: datetime
    quota_value: Decimal | None
    units: Decimal | None
    account_transaction_id: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ContributionResponse(BaseModel):
    movement: MovementResponse
    fund_balance: Decimal
    account_balance: Decimal


class FundDeletionResponse(BaseModel):
    fund_id: str
    reversed_movements: int
