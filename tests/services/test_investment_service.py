"""
Tests for the InvestmentService.

Every scenario checks both sides of a contribution: the fund
balance and the origin account balance with its journal.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from finance_ledger.errors import (
    AccountNotFound,
    ConflictRetryExhausted,
    FundNotFound,
    InvalidInputError,
    MovementNotFound,
    PartialCascadeFailure,
)
from finance_ledger.models.base import new_id
from finance_ledger.models.enums import MovementType, TransactionType
from finance_ledger.models.investment_movement import InvestmentMovement
from finance_ledger.schemas.account import AccountCreate
from finance_ledger.schemas.investment import (
    ContributionCreate,
    ContributionUpdate,
    FundCreate,
)
from finance_ledger.schemas.transaction import TransactionUpdate
from finance_ledger.services.account_service import AccountService
from finance_ledger.services.investment_service import (
    InvestmentService,
    _load_fund,
    compute_units,
)
from finance_ledger.services.ledger_service import LedgerService
from finance_ledger.services.transaction_service import TransactionService
from finance_ledger.store import LedgerStore


class FlakyStore(LedgerStore):
    """Fails the Nth cascade reversal as if it kept conflicting."""

    def __init__(self, session_factory, fail_on: int):
        super().__init__(session_factory, max_retries=3)
        self.fail_on = fail_on
        self.reversals = 0

    def run(self, operation, *, name):
        if name == "delete_fund.reverse":
            self.reversals += 1
            if self.reversals == self.fail_on:
                raise ConflictRetryExhausted(name, self.max_retries)
        return super().run(operation, name=name)


@pytest.fixture
def accounts(store, ctx):
    service = AccountService(store)
    x = service.create_account(
        ctx, AccountCreate(name="X", initial_balance=Decimal("1000"))
    )
    y = service.create_account(
        ctx, AccountCreate(name="Y", initial_balance=Decimal("1000"))
    )
    return x, y


@pytest.fixture
def fund(store, ctx, accounts):
    return InvestmentService(store).create_fund(
        ctx, FundCreate(name="Tesouro Selic", custodian_account_id=accounts[0].id)
    )


def balance_of(store, ctx, account_id):
    return AccountService(store).get_account(ctx, account_id).balance


def fund_balance(store, ctx, fund_id):
    return InvestmentService(store).get_fund(ctx, fund_id).balance


def contribute(store, ctx, fund_id, account_id, amount, quota=None):
    return InvestmentService(store).contribute(ctx, fund_id, ContributionCreate(
        origin_account_id=account_id,
        amount=Decimal(amount),
        quota_value=Decimal(quota) if quota is not None else None,
    ))


class TestUnits:

    def test_units_from_quota(self):
        assert compute_units(Decimal("100"), Decimal("12.5")) == Decimal("8.00000000")

    def test_no_quota_no_units(self):
        assert compute_units(Decimal("100"), None) is None
        assert compute_units(Decimal("100"), Decimal("0")) is None


class TestFunds:

    def test_create_fund_starts_empty(self, fund):
        assert fund.balance == Decimal("0")
        assert fund.deleting is False

    def test_create_fund_requires_custodian(self, store, ctx):
        with pytest.raises(AccountNotFound):
            InvestmentService(store).create_fund(
                ctx, FundCreate(name="CDB", custodian_account_id="ghost")
            )

    def test_funds_are_per_user(self, store, ctx, other_ctx, fund):
        assert InvestmentService(store).list_funds(other_ctx) == []
        with pytest.raises(FundNotFound):
            InvestmentService(store).get_fund(other_ctx, fund.id)


class TestContribute:

    def test_contribution_moves_both_sides(self, store, ctx, accounts, fund):
        x, _ = accounts

        result = contribute(store, ctx, fund.id, x.id, "100", quota="10")

        assert result.fund_balance == Decimal("100")
        assert result.account_balance == Decimal("900")
        assert result.movement.type == MovementType.BUY
        assert result.movement.units == Decimal("10.00000000")

        entries = TransactionService(store).list_transactions(ctx, x.id)
        assert len(entries) == 1
        assert entries[0].id == result.movement.account_transaction_id
        assert entries[0].type == TransactionType.EXPENSE
        assert entries[0].category == "Investimentos"
        assert entries[0].description == "Aporte em Tesouro Selic"

    def test_contribution_records_quota(self, store, ctx, accounts, fund):
        contribute(store, ctx, fund.id, accounts[0].id, "100", quota="10.12345678")
        assert InvestmentService(store).get_fund(ctx, fund.id).last_quota_value == (
            Decimal("10.12345678")
        )

    def test_contribution_may_overdraw(self, store, ctx, accounts, fund):
        result = contribute(store, ctx, fund.id, accounts[0].id, "1500")
        assert result.account_balance == Decimal("-500")

    def test_unknown_account_changes_nothing(self, store, ctx, fund):
        with pytest.raises(AccountNotFound):
            contribute(store, ctx, fund.id, "ghost", "100")
        assert fund_balance(store, ctx, fund.id) == Decimal("0")
        assert InvestmentService(store).list_movements(ctx, fund.id) == []

    def test_movements_listed(self, store, ctx, accounts, fund):
        contribute(store, ctx, fund.id, accounts[0].id, "10")
        contribute(store, ctx, fund.id, accounts[1].id, "20")
        movements = InvestmentService(store).list_movements(ctx, fund.id)
        assert sorted(m.amount for m in movements) == [Decimal("10"), Decimal("20")]


class TestEditContribution:

    def test_same_account_edit_applies_net_change(self, store, ctx, accounts, fund):
        x, _ = accounts
        movement = contribute(store, ctx, fund.id, x.id, "100").movement

        result = InvestmentService(store).edit_contribution(
            ctx, movement.id, ContributionUpdate(amount=Decimal("130"))
        )

        assert result.fund_balance == Decimal("130")
        assert result.account_balance == Decimal("870")
        assert result.movement.account_transaction_id == movement.account_transaction_id
        entry = TransactionService(store).get_transaction(
            ctx, x.id, movement.account_transaction_id
        )
        assert entry.amount == Decimal("130")

    def test_moving_to_another_account(self, store, ctx, accounts, fund):
        x, y = accounts
        movement = contribute(store, ctx, fund.id, x.id, "100").movement
        assert balance_of(store, ctx, x.id) == Decimal("900")

        result = InvestmentService(store).edit_contribution(
            ctx, movement.id,
            ContributionUpdate(origin_account_id=y.id, amount=Decimal("150")),
        )

        assert balance_of(store, ctx, x.id) == Decimal("1000")
        assert balance_of(store, ctx, y.id) == Decimal("850")
        assert fund_balance(store, ctx, fund.id) == Decimal("150")
        assert result.movement.origin_account_id == y.id
        assert TransactionService(store).list_transactions(ctx, x.id) == []
        y_entries = TransactionService(store).list_transactions(ctx, y.id)
        assert [e.id for e in y_entries] == [result.movement.account_transaction_id]

    def test_quota_update_recomputes_units(self, store, ctx, accounts, fund):
        movement = contribute(store, ctx, fund.id, accounts[0].id, "100", quota="10").movement

        result = InvestmentService(store).edit_contribution(
            ctx, movement.id, ContributionUpdate(quota_value=Decimal("20"))
        )

        assert result.movement.units == Decimal("5.00000000")
        assert InvestmentService(store).get_fund(ctx, fund.id).last_quota_value == (
            Decimal("20")
        )

    def test_missing_entry_is_posted_again(self, store, ctx, accounts, fund):
        x, _ = accounts
        movement = contribute(store, ctx, fund.id, x.id, "100").movement
        TransactionService(store).delete_transaction(
            ctx, x.id, movement.account_transaction_id
        )
        assert balance_of(store, ctx, x.id) == Decimal("1000")

        result = InvestmentService(store).edit_contribution(
            ctx, movement.id, ContributionUpdate(amount=Decimal("120"))
        )

        assert balance_of(store, ctx, x.id) == Decimal("880")
        assert result.fund_balance == Decimal("120")
        assert result.movement.account_transaction_id != movement.account_transaction_id

    def test_unknown_target_account_changes_nothing(self, store, ctx, accounts, fund):
        x, _ = accounts
        movement = contribute(store, ctx, fund.id, x.id, "100").movement

        with pytest.raises(AccountNotFound):
            InvestmentService(store).edit_contribution(
                ctx, movement.id,
                ContributionUpdate(origin_account_id="ghost", amount=Decimal("150")),
            )

        assert balance_of(store, ctx, x.id) == Decimal("900")
        assert fund_balance(store, ctx, fund.id) == Decimal("100")

    def test_unknown_movement(self, store, ctx):
        with pytest.raises(MovementNotFound):
            InvestmentService(store).edit_contribution(
                ctx, "ghost", ContributionUpdate(amount=Decimal("1"))
            )


class TestDeleteContribution:

    def test_delete_restores_both_sides(self, store, ctx, accounts, fund):
        x, _ = accounts
        movement = contribute(store, ctx, fund.id, x.id, "100").movement

        result = InvestmentService(store).delete_contribution(ctx, movement.id)

        assert result.fund_balance == Decimal("0")
        assert result.account_balance == Decimal("1000")
        assert TransactionService(store).list_transactions(ctx, x.id) == []
        assert InvestmentService(store).list_movements(ctx, fund.id) == []

    def test_account_reversed_by_stored_entry(self, store, ctx, accounts, fund):
        x, _ = accounts
        movement = contribute(store, ctx, fund.id, x.id, "100").movement
        TransactionService(store).edit_transaction(
            ctx, x.id, movement.account_transaction_id,
            TransactionUpdate(amount=Decimal("80")),
        )
        assert balance_of(store, ctx, x.id) == Decimal("920")

        InvestmentService(store).delete_contribution(ctx, movement.id)

        assert balance_of(store, ctx, x.id) == Decimal("1000")
        assert fund_balance(store, ctx, fund.id) == Decimal("0")

    def test_missing_entry_leaves_account_alone(self, store, ctx, accounts, fund):
        x, _ = accounts
        movement = contribute(store, ctx, fund.id, x.id, "100").movement
        TransactionService(store).delete_transaction(
            ctx, x.id, movement.account_transaction_id
        )

        InvestmentService(store).delete_contribution(ctx, movement.id)

        assert balance_of(store, ctx, x.id) == Decimal("1000")
        assert fund_balance(store, ctx, fund.id) == Decimal("0")
        assert InvestmentService(store).list_movements(ctx, fund.id) == []

    def test_sell_is_reversed_the_other_way(self, store, ctx, accounts, fund):
        x, _ = accounts
        contribute(store, ctx, fund.id, x.id, "100")

        def record_sale(db):
            ledger = LedgerService(db, ctx)
            account = ledger.load_account(x.id)
            f = _load_fund(db, ctx, fund.id)
            txn = ledger.post_entry(
                account,
                amount=Decimal("40"),
                type=TransactionType.INCOME,
                category="Investimentos",
                date=datetime(2024, 5, 1),
            )
            f.balance = f.balance - Decimal("40")
            movement = InvestmentMovement(
                id=new_id(),
                user_id=ctx.user_id,
                fund_id=f.id,
                origin_account_id=account.id,
                amount=Decimal("40"),
                type=MovementType.SELL,
                date=datetime(2024, 5, 1),
                account_transaction_id=txn.id,
            )
            db.add(movement)
            return movement.id

        sale_id = store.run(record_sale, name="record_sale")
        assert balance_of(store, ctx, x.id) == Decimal("940")
        assert fund_balance(store, ctx, fund.id) == Decimal("60")

        InvestmentService(store).delete_contribution(ctx, sale_id)

        assert balance_of(store, ctx, x.id) == Decimal("900")
        assert fund_balance(store, ctx, fund.id) == Decimal("100")


class TestDeleteFund:

    def test_cascade_restores_every_account(self, store, ctx, accounts, fund):
        a, b = accounts
        contribute(store, ctx, fund.id, a.id, "300")
        contribute(store, ctx, fund.id, b.id, "200")

        result = InvestmentService(store).delete_fund(ctx, fund.id)

        assert result.reversed_movements == 2
        assert balance_of(store, ctx, a.id) == Decimal("1000")
        assert balance_of(store, ctx, b.id) == Decimal("1000")
        assert TransactionService(store).list_transactions(ctx, a.id) == []
        with pytest.raises(FundNotFound):
            InvestmentService(store).get_fund(ctx, fund.id)

    def test_empty_fund_is_deleted(self, store, ctx, fund):
        result = InvestmentService(store).delete_fund(ctx, fund.id)
        assert result.reversed_movements == 0

    def test_unknown_fund(self, store, ctx):
        with pytest.raises(FundNotFound):
            InvestmentService(store).delete_fund(ctx, "ghost")

    def test_partial_failure_can_be_resumed(self, store, ctx, accounts, fund):
        a, b = accounts
        contribute(store, ctx, fund.id, a.id, "100")
        contribute(store, ctx, fund.id, a.id, "50")
        contribute(store, ctx, fund.id, b.id, "200")
        flaky = FlakyStore(store.session_factory, fail_on=2)

        with pytest.raises(PartialCascadeFailure) as exc_info:
            InvestmentService(flaky).delete_fund(ctx, fund.id)

        failure = exc_info.value
        assert failure.fund_id == fund.id
        assert len(failure.remaining_movement_ids) == 2
        left = InvestmentService(store).list_movements(ctx, fund.id)
        assert sorted(m.id for m in left) == sorted(failure.remaining_movement_ids)

        # Reversed movement stays reversed, remaining ones untouched
        stuck = InvestmentService(store).get_fund(ctx, fund.id)
        assert stuck.deleting is True
        assert stuck.balance == sum(m.amount for m in left)
        restored = Decimal("2000") - sum(m.amount for m in left)
        assert balance_of(store, ctx, a.id) + balance_of(store, ctx, b.id) == restored

        result = InvestmentService(store).delete_fund(ctx, fund.id)

        assert result.reversed_movements == 2
        assert balance_of(store, ctx, a.id) == Decimal("1000")
        assert balance_of(store, ctx, b.id) == Decimal("1000")
        with pytest.raises(FundNotFound):
            InvestmentService(store).get_fund(ctx, fund.id)

    def test_no_contributions_while_deleting(self, store, ctx, accounts, fund):
        contribute(store, ctx, fund.id, accounts[0].id, "100")
        contribute(store, ctx, fund.id, accounts[0].id, "100")
        flaky = FlakyStore(store.session_factory, fail_on=1)
        with pytest.raises(PartialCascadeFailure):
            InvestmentService(flaky).delete_fund(ctx, fund.id)

        with pytest.raises(InvalidInputError):
            contribute(store, ctx, fund.id, accounts[0].id, "10")

    def test_cascade_survives_missing_entry(self, store, ctx, accounts, fund):
        a, _ = accounts
        contribute(store, ctx, fund.id, a.id, "100")
        # Entry removed through the journal first: account already restored
        movement = InvestmentService(store).list_movements(ctx, fund.id)[0]
        TransactionService(store).delete_transaction(
            ctx, a.id, movement.account_transaction_id
        )

        result = InvestmentService(store).delete_fund(ctx, fund.id)

        assert result.reversed_movements == 1
        assert balance_of(store, ctx, a.id) == Decimal("1000")
