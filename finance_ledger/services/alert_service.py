"""
Alert service: recurring bills and their monthly payment state.

Marking an alert paid posts a journal entry in the bound account
and stores that entry's id on the alert. Unmarking deletes exactly
that entry through the ledger, so the balance returns to where it
was. Payment state is keyed by the YYYY-MM month of the call.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from finance_ledger.context import UserContext
from finance_ledger.errors import (
    AlertAlreadyPaid,
    AlertNotFound,
    InvalidInputError,
)
from finance_ledger.models.alert import Alert
from finance_ledger.models.base import new_id, utcnow
from finance_ledger.models.enums import AlertType, TransactionType
from finance_ledger.schemas.alert import (
    AlertCreate,
    AlertUpdate,
    MarkPaidRequest,
)
from finance_ledger.services.ledger_service import LedgerService
from finance_ledger.store import LedgerStore
from finance_ledger.utils.months import month_key

logger = logging.getLogger(__name__)


@dataclass
class AlertPayment:
    alert: Alert
    account_balance: Decimal | None


def _payment_time(today: date | None) -> datetime:
    """
    When a payment happens, in UTC like every stored timestamp.

    An explicit day is taken as the start of that day, so the entry
    and last_paid_month always name the same month.
    """
    if today is None:
        return utcnow()
    return datetime(today.year, today.month, today.day)


def _load_alert(db: Session, ctx: UserContext, alert_id: str) -> Alert:
    alert = db.execute(
        select(Alert).where(
            Alert.id == alert_id,
            Alert.user_id == ctx.user_id,
        )
    ).scalar_one_or_none()
    if alert is None:
        raise AlertNotFound(alert_id)
    return alert


class AlertService:

    def __init__(self, store: LedgerStore):
        self.store = store

    # --- Definitions ---

    def create_alert(self, ctx: UserContext, request: AlertCreate) -> Alert:
        def operation(db: Session) -> Alert:
            if request.account_id is not None:
                LedgerService(db, ctx).load_account(request.account_id)
            alert = Alert(
                id=new_id(),
                user_id=ctx.user_id,
                title=request.title.strip(),
                description=request.description,
                day_of_month=request.day_of_month,
                category=request.category,
                amount=request.amount,
                account_id=request.account_id,
                type=request.type,
                last_paid_month=None,
                transaction_id=None,
            )
            db.add(alert)
            return alert

        return self.store.run(operation, name="create_alert")

    def get_alert(self, ctx: UserContext, alert_id: str) -> Alert:
        return self.store.run(
            lambda db: _load_alert(db, ctx, alert_id), name="get_alert"
        )

    def list_alerts(self, ctx: UserContext) -> list[Alert]:
        """All alerts of the user, in due-day order."""
        def operation(db: Session) -> list[Alert]:
            alerts = db.execute(
                select(Alert)
                .where(Alert.user_id == ctx.user_id)
                .order_by(Alert.day_of_month, Alert.title)
            ).scalars().all()
            return list(alerts)

        return self.store.run(operation, name="list_alerts")

    def update_alert(
        self, ctx: UserContext, alert_id: str, request: AlertUpdate
    ) -> Alert:
        """
        Change the alert definition.

        A payment already made keeps its own entry; changing the
        amount or account only affects future payments.
        """
        changes = request.model_dump(exclude_unset=True)

        def operation(db: Session) -> Alert:
            alert = _load_alert(db, ctx, alert_id)
            if changes.get("account_id") is not None:
                LedgerService(db, ctx).load_account(changes["account_id"])
            for field, value in changes.items():
                if value is None and field not in ("description", "amount", "account_id"):
                    continue
                setattr(alert, field, value)
            return alert

        return self.store.run(operation, name="update_alert")

    def delete_alert(self, ctx: UserContext, alert_id: str) -> None:
        """Remove the definition. Past payment entries stay in the journal."""
        def operation(db: Session) -> None:
            db.delete(_load_alert(db, ctx, alert_id))

        self.store.run(operation, name="delete_alert")

    # --- Payment state ---

    def mark_paid(
        self,
        ctx: UserContext,
        alert_id: str,
        request: MarkPaidRequest | None = None,
        today: date | None = None,
    ) -> AlertPayment:
        """
        Pay the alert for the current month.

        Amount and account come from the alert, falling back to the
        request. Both are resolved before anything is written:
        InvalidInputError if either is missing, AlertAlreadyPaid if
        the alert is already paid for this month.
        """
        request = request or MarkPaidRequest()
        paid_at = _payment_time(today)
        current = month_key(paid_at)

        def operation(db: Session) -> AlertPayment:
            ledger = LedgerService(db, ctx)
            alert = _load_alert(db, ctx, alert_id)
            if alert.is_paid_for(current):
                raise AlertAlreadyPaid(alert.id, current)

            amount = alert.amount or request.amount
            if amount is None or amount <= 0:
                raise InvalidInputError(
                    f"Alert {alert.id} has no amount to pay"
                )
            account_id = alert.account_id or request.account_id
            if not account_id:
                raise InvalidInputError(
                    f"Alert {alert.id} has no account to pay from"
                )
            account = ledger.load_account(account_id)

            if alert.type == AlertType.RECEIVABLE:
                entry_type = TransactionType.INCOME
            else:
                entry_type = TransactionType.EXPENSE

            txn = ledger.post_entry(
                account,
                amount=amount,
                type=entry_type,
                category=alert.category,
                date=paid_at,
                description=alert.title,
            )
            alert.last_paid_month = current
            alert.account_id = account.id
            alert.amount = amount
            alert.transaction_id = txn.id
            return AlertPayment(alert, account.balance)

        result = self.store.run(operation, name="mark_alert_paid")
        logger.info(
            "Alert %s paid for %s: %s on account %s",
            alert_id, current, result.alert.amount, result.alert.account_id,
        )
        return result

    def mark_unpaid(
        self,
        ctx: UserContext,
        alert_id: str,
        today: date | None = None,
    ) -> AlertPayment:
        """
        Undo the payment of the current month.

        The linked entry is reversed and deleted through the ledger.
        If it was already removed elsewhere, only the payment state
        is cleared; no balance is touched. An alert not paid for the
        current month is unpaid already: a payment from an earlier
        month stays in the journal and nothing changes.
        """
        current = month_key(_payment_time(today))

        def operation(db: Session) -> AlertPayment:
            ledger = LedgerService(db, ctx)
            alert = _load_alert(db, ctx, alert_id)
            if not alert.is_paid_for(current):
                return AlertPayment(alert, None)

            balance = None
            if alert.transaction_id is not None:
                txn = ledger.find_transaction(alert.transaction_id)
                if txn is not None:
                    account = ledger.load_account(txn.account_id)
                    ledger.reverse_and_delete(account, txn)
                    balance = account.balance
                else:
                    logger.warning(
                        "Alert %s: payment entry %s is gone, "
                        "clearing state without reversal",
                        alert.id, alert.transaction_id,
                    )

            alert.last_paid_month = None
            alert.transaction_id = None
            return AlertPayment(alert, balance)

        result = self.store.run(operation, name="mark_alert_unpaid")
        logger.info("Alert %s marked unpaid for %s", alert_id, current)
        return result
