"""
Investment fund model.

balance is the cumulative net of the fund's movements (buy adds,
sell subtracts), independent of any account balance. deleting is
set when a cascade deletion starts and stays set until the fund
document itself is removed, so an interrupted deletion can be
resumed and no new contributions land in the meantime.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, DateTime, Integer, Numeric, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column

from finance_ledger.models.base import Base, new_id, utcnow


class InvestmentFund(Base):
    __tablename__ = "investment_funds"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_id
    )
    user_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    custodian_account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id"), nullable=False
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    last_quota_value: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 8), nullable=True
    )
    deleting: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<InvestmentFund {self.name} balance={self.balance}>"
