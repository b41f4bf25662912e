"""
Tests for the LedgerService balance primitives.

These run LedgerService directly inside store units, the way
the higher-level services use it.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from finance_ledger.models.enums import TransactionType
from finance_ledger.schemas.account import AccountCreate
from finance_ledger.services.account_service import AccountService
from finance_ledger.models.transaction import Transaction, signed_effect
from finance_ledger.services.ledger_service import LedgerService


def entry(amount, type=TransactionType.EXPENSE, category="Outros"):
    return dict(
        amount=Decimal(amount),
        type=type,
        category=category,
        date=datetime(2024, 6, 1),
    )


@pytest.fixture
def account(store, ctx):
    return AccountService(store).create_account(
        ctx, AccountCreate(name="Main", initial_balance=Decimal("1000"))
    )


class TestSignedEffect:

    def test_income_is_positive(self):
        assert signed_effect(TransactionType.INCOME, Decimal("10")) == Decimal("10")

    def test_expense_is_negative(self):
        assert signed_effect(TransactionType.EXPENSE, Decimal("10")) == Decimal("-10")

    def test_entry_uses_the_same_rule(self):
        for entry_type in TransactionType:
            txn = Transaction(type=entry_type, amount=Decimal("42.50"))
            assert txn.signed_amount == signed_effect(entry_type, Decimal("42.50"))


class TestPostEntry:

    def test_post_moves_balance_by_signed_effect(self, store, ctx, account):
        def operation(db):
            ledger = LedgerService(db, ctx)
            acct = ledger.load_account(account.id)
            ledger.post_entry(acct, **entry("150"))
            return acct.balance

        assert store.run(operation, name="post") == Decimal("850")

    def test_post_assigns_id_before_flush(self, store, ctx, account):
        def operation(db):
            ledger = LedgerService(db, ctx)
            txn = ledger.post_entry(ledger.load_account(account.id), **entry("1"))
            return txn.id

        assert store.run(operation, name="post")


class TestReverseAndDelete:

    def test_reverse_undoes_stored_effect(self, store, ctx, account):
        def post(db):
            ledger = LedgerService(db, ctx)
            return ledger.post_entry(
                ledger.load_account(account.id),
                **entry("40", TransactionType.INCOME),
            ).id

        txn_id = store.run(post, name="post")

        def reverse(db):
            ledger = LedgerService(db, ctx)
            acct = ledger.load_account(account.id)
            ledger.reverse_and_delete(acct, ledger.load_transaction(txn_id))
            return acct.balance

        assert store.run(reverse, name="reverse") == Decimal("1000")
        assert store.run(
            lambda db: LedgerService(db, ctx).find_transaction(txn_id),
            name="find",
        ) is None

    def test_reverse_against_wrong_account_rejected(self, store, ctx, account):
        other = AccountService(store).create_account(ctx, AccountCreate(name="Other"))

        def post(db):
            ledger = LedgerService(db, ctx)
            return ledger.post_entry(ledger.load_account(account.id), **entry("5")).id

        txn_id = store.run(post, name="post")

        def reverse_elsewhere(db):
            ledger = LedgerService(db, ctx)
            ledger.reverse_and_delete(
                ledger.load_account(other.id), ledger.load_transaction(txn_id)
            )

        with pytest.raises(ValueError, match="does not belong"):
            store.run(reverse_elsewhere, name="reverse")


class TestRewriteEntry:

    def test_rewrite_returns_net_change(self, store, ctx, account):
        def operation(db):
            ledger = LedgerService(db, ctx)
            acct = ledger.load_account(account.id)
            txn = ledger.post_entry(acct, **entry("100"))
            db.flush()
            net = ledger.rewrite_entry(
                acct, txn, **entry("30", TransactionType.INCOME),
                description=None,
            )
            return net, acct.balance

        net, balance = store.run(operation, name="rewrite")
        # -100 becomes +30
        assert net == Decimal("130")
        assert balance == Decimal("1030")

    def test_rewrite_without_change_leaves_balance(self, store, ctx, account):
        def operation(db):
            ledger = LedgerService(db, ctx)
            acct = ledger.load_account(account.id)
            txn = ledger.post_entry(acct, **entry("100"))
            db.flush()
            net = ledger.rewrite_entry(acct, txn, **entry("100"), description=None)
            return net, acct.balance

        net, balance = store.run(operation, name="rewrite")
        assert net == 0
        assert balance == Decimal("900")
