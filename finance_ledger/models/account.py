"""
Account model.

An account holds a cached running balance. The balance is never
set directly by feature code: it only moves together with the
journal entry that justifies the change (see LedgerService).

Invariant at rest:
    balance == initial_balance + sum of signed journal effects
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from finance_ledger.models.base import Base, new_id, utcnow


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_id
    )
    user_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    initial_balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    # Optimistic concurrency: every UPDATE/DELETE checks this counter
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Account {self.name} balance={self.balance}>"
