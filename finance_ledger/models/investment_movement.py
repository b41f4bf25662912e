"""
Investment movement model.

One contribution (buy) or withdrawal (sell) of a fund. Each
movement is paired with a journal entry in its origin account:
a buy is an expense there, a sell an income. account_transaction_id
is the reversal handle for that entry.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Integer, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from finance_ledger.models.base import Base, new_id, utcnow
from finance_ledger.models.enums import MovementType


class InvestmentMovement(Base):
    __tablename__ = "investment_movements"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_id
    )
    user_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    fund_id: Mapped[str] = mapped_column(
        ForeignKey("investment_funds.id"), nullable=False, index=True
    )
    origin_account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False
    )
    type: Mapped[MovementType] = mapped_column(
        SAEnum(
            MovementType,
            name="movement_type_enum",
            values_callable=lambda e: [m.value for m in e],
            create_constraint=True,
        ),
        nullable=False,
        default=MovementType.BUY,
    )
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    quota_value: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 8), nullable=True
    )
    units: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 8), nullable=True
    )
    # No foreign key: the paired entry may be removed out of band.
    account_transaction_id: Mapped[str | None] = mapped_column(
        String(36), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def fund_effect(self) -> Decimal:
        """Effect of this movement on the fund balance."""
        if self.type == MovementType.SELL:
            return -self.amount
        return self.amount

    def __repr__(self) -> str:
        return f"<InvestmentMovement {self.type.value} {self.amount}>"
