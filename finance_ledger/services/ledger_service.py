"""
Ledger service: the core of the system.

This service enforces the fundamental rule:
an account's cached balance equals its initial balance plus the
signed effect of every journal entry posted against it.

It is the only code that changes Account.balance, and it only
does so in the same step that creates, rewrites, or deletes the
journal entry justifying the change. It works inside a session
handed to it by a LedgerStore unit of work and never commits;
the store commits everything the unit wrote, or nothing.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from finance_ledger.context import UserContext
from finance_ledger.errors import AccountNotFound, TransactionNotFound
from finance_ledger.models.account import Account
from finance_ledger.models.base import new_id
from finance_ledger.models.enums import TransactionType
from finance_ledger.models.transaction import Transaction, signed_effect


class LedgerService:
    """
    Balance-consistent journal mutations.

    Every public method pairs exactly one journal change with the
    matching balance delta. Reversals are computed from the stored
    entry, never from caller-supplied values.
    """

    def __init__(self, db: Session, ctx: UserContext):
        self.db = db
        self.ctx = ctx

    # --- Reads ---

    def find_account(self, account_id: str) -> Account | None:
        return self.db.execute(
            select(Account).where(
                Account.id == account_id,
                Account.user_id == self.ctx.user_id,
            )
        ).scalar_one_or_none()

    def load_account(self, account_id: str) -> Account:
        account = self.find_account(account_id)
        if account is None:
            raise AccountNotFound(account_id)
        return account

    def find_transaction(
        self, transaction_id: str, account_id: str | None = None
    ) -> Transaction | None:
        """Look up an entry; optionally require it to belong to account_id."""
        query = select(Transaction).where(
            Transaction.id == transaction_id,
            Transaction.user_id == self.ctx.user_id,
        )
        if account_id is not None:
            query = query.where(Transaction.account_id == account_id)
        return self.db.execute(query).scalar_one_or_none()

    def load_transaction(
        self, transaction_id: str, account_id: str | None = None
    ) -> Transaction:
        txn = self.find_transaction(transaction_id, account_id)
        if txn is None:
            raise TransactionNotFound(transaction_id)
        return txn

    # --- Mutations ---

    def post_entry(
        self,
        account: Account,
        *,
        amount: Decimal,
        type: TransactionType,
        category: str,
        date: datetime,
        description: str | None = None,
    ) -> Transaction:
        """Create a journal entry and apply its effect to the balance."""
        txn = Transaction(
            id=new_id(),
            user_id=self.ctx.user_id,
            account_id=account.id,
            amount=amount,
            type=type,
            category=category,
            date=date,
            description=description,
        )
        self.db.add(txn)
        account.balance = account.balance + signed_effect(type, amount)
        return txn

    def reverse_and_delete(self, account: Account, txn: Transaction) -> None:
        """Delete an entry and undo exactly the effect it had."""
        if txn.account_id != account.id:
            raise ValueError(
                f"Transaction {txn.id} does not belong to account {account.id}"
            )
        account.balance = account.balance - txn.signed_amount
        self.db.delete(txn)

    def rewrite_entry(
        self,
        account: Account,
        txn: Transaction,
        *,
        amount: Decimal,
        type: TransactionType,
        category: str,
        date: datetime,
        description: str | None,
    ) -> Decimal:
        """
        Overwrite an entry's mutable fields in place.

        The balance moves by the difference between the new and the
        old signed effect in a single step, so there is never an
        intermediate state where the old effect is removed but the
        new one not yet applied. Returns that difference.
        """
        if txn.account_id != account.id:
            raise ValueError(
                f"Transaction {txn.id} does not belong to account {account.id}"
            )
        net_change = signed_effect(type, amount) - txn.signed_amount

        txn.amount = amount
        txn.type = type
        txn.category = category
        txn.date = date
        txn.description = description

        if net_change:
            account.balance = account.balance + net_change
        return net_change
