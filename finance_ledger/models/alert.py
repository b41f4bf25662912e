"""
Recurring alert model.

A monthly bill (or receivable) definition. last_paid_month is the
binding key: when it is set, transaction_id names the journal
entry created by the payment, which is the handle used to reverse
it exactly when the alert is unmarked.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Integer, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from finance_ledger.models.base import Base, new_id, utcnow
from finance_ledger.models.enums import AlertType


class Alert(Base):
    __tablename__ = "alerts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_id
    )
    user_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    day_of_month: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(
        String(100), nullable=False, default="Outros"
    )
    amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 2), nullable=True
    )
    account_id: Mapped[str | None] = mapped_column(
        ForeignKey("accounts.id"), nullable=True
    )
    type: Mapped[AlertType] = mapped_column(
        SAEnum(
            AlertType,
            name="alert_type_enum",
            values_callable=lambda e: [m.value for m in e],
            create_constraint=True,
        ),
        nullable=False,
        default=AlertType.PAYABLE,
    )
    last_paid_month: Mapped[str | None] = mapped_column(
        String(7), nullable=True
    )
    # No foreign key: the entry lives in the account's journal and
    # may disappear independently of the alert.
    transaction_id: Mapped[str | None] = mapped_column(
        String(36), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def is_paid_for(self, month: str) -> bool:
        return self.last_paid_month == month

    def __repr__(self) -> str:
        return f"<Alert {self.title} day={self.day_of_month} paid={self.last_paid_month}>"
