"""
Account service: manages accounts and their lifecycle.

Opening an account sets its cached balance to the initial
balance. After that the balance only moves through the ledger.
"""

import logging
from decimal import Decimal

from sqlalchemy import case, delete, func, select
from sqlalchemy.orm import Session

from finance_ledger.context import UserContext
from finance_ledger.errors import InvalidInputError
from finance_ledger.models.account import Account
from finance_ledger.models.alert import Alert
from finance_ledger.models.base import new_id
from finance_ledger.models.enums import TransactionType
from finance_ledger.models.investment_fund import InvestmentFund
from finance_ledger.models.investment_movement import InvestmentMovement
from finance_ledger.models.transaction import Transaction
from finance_ledger.schemas.account import AccountCreate, AccountRename
from finance_ledger.services.ledger_service import LedgerService
from finance_ledger.store import LedgerStore
from finance_ledger.utils.money import to_money

logger = logging.getLogger(__name__)


def journal_sum_query(user_id: str):
    """Net signed effect of the journal, grouped by account."""
    signed = case(
        (Transaction.type == TransactionType.INCOME, Transaction.amount),
        else_=-Transaction.amount,
    )
    return (
        select(Transaction.account_id, func.coalesce(func.sum(signed), 0))
        .where(Transaction.user_id == user_id)
        .group_by(Transaction.account_id)
    )


class AccountService:

    def __init__(self, store: LedgerStore):
        self.store = store

    def create_account(self, ctx: UserContext, request: AccountCreate) -> Account:
        """Open an account whose balance starts at its initial balance."""
        def operation(db: Session) -> Account:
            account = Account(
                id=new_id(),
                user_id=ctx.user_id,
                name=request.name.strip(),
                initial_balance=request.initial_balance,
                balance=request.initial_balance,
            )
            db.add(account)
            return account

        account = self.store.run(operation, name="create_account")
        logger.info("Opened account %s (%s)", account.id, account.name)
        return account

    def get_account(self, ctx: UserContext, account_id: str) -> Account:
        return self.store.run(
            lambda db: LedgerService(db, ctx).load_account(account_id),
            name="get_account",
        )

    def list_accounts(self, ctx: UserContext) -> list[Account]:
        def operation(db: Session) -> list[Account]:
            accounts = db.execute(
                select(Account)
                .where(Account.user_id == ctx.user_id)
                .order_by(Account.created_at, Account.name)
            ).scalars().all()
            return list(accounts)

        return self.store.run(operation, name="list_accounts")

    def rename_account(
        self, ctx: UserContext, account_id: str, request: AccountRename
    ) -> Account:
        def operation(db: Session) -> Account:
            account = LedgerService(db, ctx).load_account(account_id)
            account.name = request.name.strip()
            return account

        return self.store.run(operation, name="rename_account")

    def delete_account(self, ctx: UserContext, account_id: str) -> None:
        """
        Delete an account together with its whole journal.

        Refused while investment movements originate from the account
        or a fund uses it as custodian, since their reversal handles
        point into this journal. Alerts bound to the account are
        unbound; their payment entries go away with the journal.
        """
        def operation(db: Session) -> None:
            account = LedgerService(db, ctx).load_account(account_id)

            movements = db.execute(
                select(func.count(InvestmentMovement.id)).where(
                    InvestmentMovement.user_id == ctx.user_id,
                    InvestmentMovement.origin_account_id == account.id,
                )
            ).scalar()
            if movements:
                raise InvalidInputError(
                    f"Account {account.id} still funds {movements} "
                    f"investment contribution(s)"
                )

            custodian_of = db.execute(
                select(func.count(InvestmentFund.id)).where(
                    InvestmentFund.user_id == ctx.user_id,
                    InvestmentFund.custodian_account_id == account.id,
                )
            ).scalar()
            if custodian_of:
                raise InvalidInputError(
                    f"Account {account.id} is custodian of "
                    f"{custodian_of} fund(s)"
                )

            alerts = db.execute(
                select(Alert).where(
                    Alert.user_id == ctx.user_id,
                    Alert.account_id == account.id,
                )
            ).scalars().all()
            for alert in alerts:
                alert.account_id = None
                alert.transaction_id = None
            db.flush()

            db.execute(
                delete(Transaction).where(Transaction.account_id == account.id)
            )
            db.delete(account)

        self.store.run(operation, name="delete_account")
        logger.info("Deleted account %s", account_id)

    def journal_balance(
        self, ctx: UserContext, account_id: str
    ) -> tuple[Account, Decimal]:
        """
        Recompute an account's balance from its journal.

        Returns the account (with its cached balance) and
        initial_balance + sum of signed journal effects.
        """
        def operation(db: Session) -> tuple[Account, Decimal]:
            account = LedgerService(db, ctx).load_account(account_id)
            row = db.execute(
                journal_sum_query(ctx.user_id).where(
                    Transaction.account_id == account.id
                )
            ).first()
            total = row[1] if row else 0
            return account, to_money(account.initial_balance) + to_money(total)

        return self.store.run(operation, name="journal_balance")
