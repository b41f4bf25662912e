"""
Report service: read-only views over the ledger.

The audit recomputes every cached balance from its history:
    account.balance == initial_balance + sum of signed journal effects
    fund.balance    == sum of signed movement effects
Any difference is drift, the one thing the ledger must never show.
"""

import logging
from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from finance_ledger.context import UserContext
from finance_ledger.errors import InvalidInputError
from finance_ledger.models.account import Account
from finance_ledger.models.enums import MovementType, TransactionType
from finance_ledger.models.investment_fund import InvestmentFund
from finance_ledger.models.investment_movement import InvestmentMovement
from finance_ledger.models.transaction import Transaction
from finance_ledger.schemas.report import (
    AuditReport,
    BalanceDrift,
    MonthlySummary,
)
from finance_ledger.services.account_service import journal_sum_query
from finance_ledger.store import LedgerStore
from finance_ledger.utils.money import to_money
from finance_ledger.utils.months import current_month_key, month_bounds

logger = logging.getLogger(__name__)


class ReportService:

    def __init__(self, store: LedgerStore):
        self.store = store

    def monthly_summary(
        self, ctx: UserContext, month: str | None = None
    ) -> MonthlySummary:
        """Total balance now, with income and expense posted in the given month."""
        month = month or current_month_key()
        try:
            start, end = month_bounds(month)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e

        def operation(db: Session) -> MonthlySummary:
            total_balance = db.execute(
                select(func.coalesce(func.sum(Account.balance), 0)).where(
                    Account.user_id == ctx.user_id
                )
            ).scalar()
            totals = dict(
                db.execute(
                    select(
                        Transaction.type,
                        func.coalesce(func.sum(Transaction.amount), 0),
                    )
                    .where(
                        Transaction.user_id == ctx.user_id,
                        Transaction.date >= start,
                        Transaction.date < end,
                    )
                    .group_by(Transaction.type)
                ).all()
            )
            income = to_money(totals.get(TransactionType.INCOME))
            expense = to_money(totals.get(TransactionType.EXPENSE))
            return MonthlySummary(
                month=month,
                total_balance=to_money(total_balance),
                total_income=income,
                total_expense=expense,
                net=income - expense,
            )

        return self.store.run(operation, name="monthly_summary")

    def audit(self, ctx: UserContext) -> AuditReport:
        """Report every account and fund whose cached balance drifted."""
        def operation(db: Session) -> AuditReport:
            journal = {
                account_id: to_money(total)
                for account_id, total in db.execute(
                    journal_sum_query(ctx.user_id)
                ).all()
            }
            accounts = db.execute(
                select(Account).where(Account.user_id == ctx.user_id)
            ).scalars().all()
            account_drift = []
            for account in accounts:
                expected = to_money(account.initial_balance) + journal.get(
                    account.id, Decimal("0.00")
                )
                if to_money(account.balance) != expected:
                    account_drift.append(BalanceDrift(
                        id=account.id,
                        name=account.name,
                        cached_balance=to_money(account.balance),
                        expected_balance=expected,
                    ))

            signed = case(
                (InvestmentMovement.type == MovementType.SELL,
                 -InvestmentMovement.amount),
                else_=InvestmentMovement.amount,
            )
            movements = {
                fund_id: to_money(total)
                for fund_id, total in db.execute(
                    select(
                        InvestmentMovement.fund_id,
                        func.coalesce(func.sum(signed), 0),
                    )
                    .where(InvestmentMovement.user_id == ctx.user_id)
                    .group_by(InvestmentMovement.fund_id)
                ).all()
            }
            funds = db.execute(
                select(InvestmentFund).where(
                    InvestmentFund.user_id == ctx.user_id
                )
            ).scalars().all()
            fund_drift = []
            for fund in funds:
                expected = movements.get(fund.id, Decimal("0.00"))
                if to_money(fund.balance) != expected:
                    fund_drift.append(BalanceDrift(
                        id=fund.id,
                        name=fund.name,
                        cached_balance=to_money(fund.balance),
                        expected_balance=expected,
                    ))

            return AuditReport(accounts=account_drift, funds=fund_drift)

        report = self.store.run(operation, name="audit")
        if not report.consistent:
            logger.error(
                "Balance drift for user %s: %d account(s), %d fund(s)",
                ctx.user_id, len(report.accounts), len(report.funds),
            )
        return report
