"""
Transaction service: post, edit and delete journal entries.

Each operation is one LedgerStore unit of work:
1. Reads the account (and the stored entry, for edit/delete)
2. Computes the balance delta from what is stored right now
3. Writes the entry change and the new balance together

The returned balance is the committed one.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from finance_ledger.context import UserContext
from finance_ledger.errors import InvalidInputError
from finance_ledger.models.transaction import Transaction
from finance_ledger.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
)
from finance_ledger.services.ledger_service import LedgerService
from finance_ledger.store import LedgerStore
from finance_ledger.utils.months import month_bounds

logger = logging.getLogger(__name__)


@dataclass
class PostingResult:
    """A journal entry as committed, and its account's balance afterwards."""
    transaction: Transaction
    account_balance: Decimal


class TransactionService:

    def __init__(self, store: LedgerStore):
        self.store = store

    def post_transaction(
        self, ctx: UserContext, account_id: str, request: TransactionCreate
    ) -> PostingResult:
        """
        Create a journal entry and move the balance by its effect.

        Raises AccountNotFound if the account does not exist when
        the unit reads it.
        """
        def operation(db: Session) -> PostingResult:
            ledger = LedgerService(db, ctx)
            account = ledger.load_account(account_id)
            txn = ledger.post_entry(
                account,
                amount=request.amount,
                type=request.type,
                category=request.category,
                date=request.date,
                description=request.description,
            )
            return PostingResult(txn, account.balance)

        result = self.store.run(operation, name="post_transaction")
        logger.info(
            "Posted %s %s to account %s (balance %s)",
            request.type.value, request.amount, account_id,
            result.account_balance,
        )
        return result

    def edit_transaction(
        self,
        ctx: UserContext,
        account_id: str,
        transaction_id: str,
        request: TransactionUpdate,
    ) -> PostingResult:
        """
        Rewrite an entry and apply the net change in one step.

        The old entry is read inside the unit; a stale copy held by
        the caller has no influence on the delta.
        """
        changes = request.model_dump(exclude_unset=True)

        def operation(db: Session) -> PostingResult:
            ledger = LedgerService(db, ctx)
            account = ledger.load_account(account_id)
            txn = ledger.load_transaction(transaction_id, account_id)

            def pick(field):
                value = changes.get(field)
                return getattr(txn, field) if value is None else value

            ledger.rewrite_entry(
                account,
                txn,
                amount=pick("amount"),
                type=pick("type"),
                category=pick("category"),
                date=pick("date"),
                description=(
                    changes["description"]
                    if "description" in changes
                    else txn.description
                ),
            )
            return PostingResult(txn, account.balance)

        result = self.store.run(operation, name="edit_transaction")
        logger.info(
            "Edited transaction %s on account %s (balance %s)",
            transaction_id, account_id, result.account_balance,
        )
        return result

    def delete_transaction(
        self, ctx: UserContext, account_id: str, transaction_id: str
    ) -> PostingResult:
        """Delete an entry and undo its effect on the balance."""
        def operation(db: Session) -> PostingResult:
            ledger = LedgerService(db, ctx)
            account = ledger.load_account(account_id)
            txn = ledger.load_transaction(transaction_id, account_id)
            ledger.reverse_and_delete(account, txn)
            return PostingResult(txn, account.balance)

        result = self.store.run(operation, name="delete_transaction")
        logger.info(
            "Deleted transaction %s from account %s (balance %s)",
            transaction_id, account_id, result.account_balance,
        )
        return result

    def get_transaction(
        self, ctx: UserContext, account_id: str, transaction_id: str
    ) -> Transaction:
        def operation(db: Session) -> Transaction:
            ledger = LedgerService(db, ctx)
            ledger.load_account(account_id)
            return ledger.load_transaction(transaction_id, account_id)

        return self.store.run(operation, name="get_transaction")

    def list_transactions(
        self, ctx: UserContext, account_id: str, month: str | None = None
    ) -> list[Transaction]:
        """Return an account's entries, newest first, optionally for one YYYY-MM month."""
        bounds = None
        if month is not None:
            try:
                bounds = month_bounds(month)
            except ValueError as e:
                raise InvalidInputError(str(e)) from e

        def operation(db: Session) -> list[Transaction]:
            LedgerService(db, ctx).load_account(account_id)
            query = select(Transaction).where(
                Transaction.account_id == account_id,
                Transaction.user_id == ctx.user_id,
            )
            if bounds is not None:
                start, end = bounds
                query = query.where(
                    Transaction.date >= start, Transaction.date < end
                )
            entries = db.execute(
                query.order_by(Transaction.date.desc(), Transaction.created_at.desc())
            ).scalars().all()
            return list(entries)

        return self.store.run(operation, name="list_transactions")
