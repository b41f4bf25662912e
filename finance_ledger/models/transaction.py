"""
Transaction model (journal entry).

A single posted monetary movement against one account. Its
signed effect on the account balance is +amount for income and
-amount for expense. The id never changes; the other fields may
be edited, but only through LedgerService so the balance moves
with them.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Integer, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from finance_ledger.models.base import Base, new_id, utcnow
from finance_ledger.models.enums import TransactionType


def signed_effect(entry_type: TransactionType, amount: Decimal) -> Decimal:
    """+amount for income, -amount for expense."""
    if entry_type == TransactionType.INCOME:
        return amount
    return -amount


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_id
    )
    user_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False
    )
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            values_callable=lambda e: [m.value for m in e],
            create_constraint=True,
        ),
        nullable=False,
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def signed_amount(self) -> Decimal:
        """Effect of this entry on its account balance."""
        return signed_effect(self.type, self.amount)

    def __repr__(self) -> str:
        return f"<Transaction {self.type.value} {self.amount} ({self.category})>"
