"""
Investment service: funds, contributions and their reversal.

A contribution touches three documents at once: the fund
(balance), the origin account (balance plus a journal entry) and
the movement that links them. Every operation here reads all the
documents it will write inside one LedgerStore unit, so either all
of them change or none do.

Accounting for a movement:
    buy   fund +amount, origin account expense of amount
    sell  fund -amount, origin account income of amount
Only buys are created; reversal and edit handle both.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_ledger.context import UserContext
from finance_ledger.errors import (
    FundNotFound,
    InvalidInputError,
    LedgerError,
    MovementNotFound,
    PartialCascadeFailure,
)
from finance_ledger.models.account import Account
from finance_ledger.models.base import new_id
from finance_ledger.models.enums import MovementType, TransactionType
from finance_ledger.models.investment_fund import InvestmentFund
from finance_ledger.models.investment_movement import InvestmentMovement
from finance_ledger.schemas.investment import (
    ContributionCreate,
    ContributionUpdate,
    FundCreate,
)
from finance_ledger.services.ledger_service import LedgerService
from finance_ledger.store import LedgerStore
from finance_ledger.utils.money import UNIT_QUANTUM

logger = logging.getLogger(__name__)

INVESTMENT_CATEGORY = "Investimentos"


def contribution_description(fund_name: str) -> str:
    return f"Aporte em {fund_name}"


def compute_units(amount: Decimal, quota_value: Decimal | None) -> Decimal | None:
    """Fund units bought for amount at quota_value; None without a positive quota."""
    if quota_value is None or quota_value <= 0:
        return None
    return (amount / quota_value).quantize(UNIT_QUANTUM)


def paired_entry_type(movement_type: MovementType) -> TransactionType:
    if movement_type == MovementType.SELL:
        return TransactionType.INCOME
    return TransactionType.EXPENSE


@dataclass
class ContributionResult:
    movement: InvestmentMovement
    fund_balance: Decimal
    account_balance: Decimal


@dataclass
class FundDeletionResult:
    fund_id: str
    reversed_movements: int


def _load_fund(db: Session, ctx: UserContext, fund_id: str) -> InvestmentFund:
    fund = db.execute(
        select(InvestmentFund).where(
            InvestmentFund.id == fund_id,
            InvestmentFund.user_id == ctx.user_id,
        )
    ).scalar_one_or_none()
    if fund is None:
        raise FundNotFound(fund_id)
    return fund


def _find_movement(
    db: Session, ctx: UserContext, movement_id: str
) -> InvestmentMovement | None:
    return db.execute(
        select(InvestmentMovement).where(
            InvestmentMovement.id == movement_id,
            InvestmentMovement.user_id == ctx.user_id,
        )
    ).scalar_one_or_none()


def _load_movement(
    db: Session, ctx: UserContext, movement_id: str
) -> InvestmentMovement:
    movement = _find_movement(db, ctx, movement_id)
    if movement is None:
        raise MovementNotFound(movement_id)
    return movement


def _reverse_movement(
    db: Session,
    ledger: LedgerService,
    fund: InvestmentFund,
    movement: InvestmentMovement,
    account: Account | None,
) -> None:
    """
    Undo a movement's effect on its fund and origin account, then delete it.

    The account side is undone from the stored journal entry, so an
    entry edited since the contribution is reversed by what it says
    now. When the entry (or the account) no longer exists there is
    no evidence of what to undo, and the account is left alone.
    The fund side is undone by the movement's own amount.
    """
    txn = None
    if account is not None and movement.account_transaction_id:
        txn = ledger.find_transaction(
            movement.account_transaction_id, account.id
        )

    fund.balance = fund.balance - movement.fund_effect
    if txn is not None:
        ledger.reverse_and_delete(account, txn)
    else:
        logger.warning(
            "Movement %s: paired entry %s missing, account %s untouched",
            movement.id, movement.account_transaction_id,
            movement.origin_account_id,
        )
    db.delete(movement)


class InvestmentService:

    def __init__(self, store: LedgerStore):
        self.store = store

    # --- Funds ---

    def create_fund(self, ctx: UserContext, request: FundCreate) -> InvestmentFund:
        """Create an empty fund held at the custodian account."""
        def operation(db: Session) -> InvestmentFund:
            LedgerService(db, ctx).load_account(request.custodian_account_id)
            fund = InvestmentFund(
                id=new_id(),
                user_id=ctx.user_id,
                name=request.name.strip(),
                custodian_account_id=request.custodian_account_id,
                balance=Decimal("0"),
                last_quota_value=None,
                deleting=False,
            )
            db.add(fund)
            return fund

        fund = self.store.run(operation, name="create_fund")
        logger.info("Created fund %s (%s)", fund.id, fund.name)
        return fund

    def get_fund(self, ctx: UserContext, fund_id: str) -> InvestmentFund:
        return self.store.run(
            lambda db: _load_fund(db, ctx, fund_id), name="get_fund"
        )

    def list_funds(self, ctx: UserContext) -> list[InvestmentFund]:
        def operation(db: Session) -> list[InvestmentFund]:
            funds = db.execute(
                select(InvestmentFund)
                .where(InvestmentFund.user_id == ctx.user_id)
                .order_by(InvestmentFund.created_at, InvestmentFund.name)
            ).scalars().all()
            return list(funds)

        return self.store.run(operation, name="list_funds")

    def list_movements(
        self, ctx: UserContext, fund_id: str
    ) -> list[InvestmentMovement]:
        """A fund's movements, newest first."""
        def operation(db: Session) -> list[InvestmentMovement]:
            _load_fund(db, ctx, fund_id)
            movements = db.execute(
                select(InvestmentMovement)
                .where(
                    InvestmentMovement.fund_id == fund_id,
                    InvestmentMovement.user_id == ctx.user_id,
                )
                .order_by(
                    InvestmentMovement.date.desc(),
                    InvestmentMovement.created_at.desc(),
                )
            ).scalars().all()
            return list(movements)

        return self.store.run(operation, name="list_movements")

    # --- Contributions ---

    def contribute(
        self, ctx: UserContext, fund_id: str, request: ContributionCreate
    ) -> ContributionResult:
        """
        Buy into a fund from an origin account.

        The account is allowed to go negative: it tracks a running
        ledger, not a spending limit.
        """
        def operation(db: Session) -> ContributionResult:
            ledger = LedgerService(db, ctx)
            fund = _load_fund(db, ctx, fund_id)
            if fund.deleting:
                raise InvalidInputError(f"Fund {fund.id} is being deleted")
            account = ledger.load_account(request.origin_account_id)

            txn = ledger.post_entry(
                account,
                amount=request.amount,
                type=TransactionType.EXPENSE,
                category=INVESTMENT_CATEGORY,
                date=request.date,
                description=contribution_description(fund.name),
            )
            fund.balance = fund.balance + request.amount
            fund.last_quota_value = request.quota_value

            movement = InvestmentMovement(
                id=new_id(),
                user_id=ctx.user_id,
                fund_id=fund.id,
                origin_account_id=account.id,
                amount=request.amount,
                type=MovementType.BUY,
                date=request.date,
                quota_value=request.quota_value,
                units=compute_units(request.amount, request.quota_value),
                account_transaction_id=txn.id,
            )
            db.add(movement)
            return ContributionResult(movement, fund.balance, account.balance)

        result = self.store.run(operation, name="contribute")
        logger.info(
            "Contribution %s: %s from account %s into fund %s",
            result.movement.id, request.amount,
            request.origin_account_id, fund_id,
        )
        return result

    def edit_contribution(
        self, ctx: UserContext, movement_id: str, request: ContributionUpdate
    ) -> ContributionResult:
        """
        Change amount, date, quota value or origin account of a contribution.

        Same origin: the paired entry is rewritten in place and the
        account moves by the net change.
        New origin: the old entry is reversed and deleted in the old
        account and a new one is posted in the new account.
        Either way the fund moves by new - old, all in one unit.
        """
        changes = request.model_dump(exclude_unset=True)

        def operation(db: Session) -> ContributionResult:
            ledger = LedgerService(db, ctx)
            movement = _load_movement(db, ctx, movement_id)
            fund = _load_fund(db, ctx, movement.fund_id)
            if fund.deleting:
                raise InvalidInputError(f"Fund {fund.id} is being deleted")
            old_account = ledger.load_account(movement.origin_account_id)
            new_account = ledger.load_account(
                changes.get("origin_account_id") or movement.origin_account_id
            )
            old_txn = None
            if movement.account_transaction_id:
                old_txn = ledger.find_transaction(
                    movement.account_transaction_id, old_account.id
                )

            amount = changes.get("amount") or movement.amount
            date = changes.get("date") or movement.date
            if "quota_value" in changes:
                quota_value = changes["quota_value"]
            else:
                quota_value = movement.quota_value

            entry = dict(
                amount=amount,
                type=paired_entry_type(movement.type),
                category=INVESTMENT_CATEGORY,
                date=date,
                description=contribution_description(fund.name),
            )
            if new_account.id == old_account.id and old_txn is not None:
                ledger.rewrite_entry(old_account, old_txn, **entry)
                txn_id = old_txn.id
            else:
                if old_txn is not None:
                    ledger.reverse_and_delete(old_account, old_txn)
                txn_id = ledger.post_entry(new_account, **entry).id

            old_effect = movement.fund_effect
            movement.amount = amount
            movement.date = date
            movement.quota_value = quota_value
            movement.units = compute_units(amount, quota_value)
            movement.origin_account_id = new_account.id
            movement.account_transaction_id = txn_id

            fund.balance = fund.balance + movement.fund_effect - old_effect
            if changes.get("quota_value") is not None:
                fund.last_quota_value = changes["quota_value"]

            return ContributionResult(movement, fund.balance, new_account.balance)

        result = self.store.run(operation, name="edit_contribution")
        logger.info(
            "Contribution %s edited: %s from account %s",
            movement_id, result.movement.amount,
            result.movement.origin_account_id,
        )
        return result

    def delete_contribution(
        self, ctx: UserContext, movement_id: str
    ) -> ContributionResult:
        """
        Reverse a contribution and delete it with its paired entry.

        Raises AccountNotFound if the origin account no longer exists.
        """
        def operation(db: Session) -> ContributionResult:
            ledger = LedgerService(db, ctx)
            movement = _load_movement(db, ctx, movement_id)
            fund = _load_fund(db, ctx, movement.fund_id)
            account = ledger.load_account(movement.origin_account_id)
            _reverse_movement(db, ledger, fund, movement, account)
            return ContributionResult(movement, fund.balance, account.balance)

        result = self.store.run(operation, name="delete_contribution")
        logger.info(
            "Contribution %s deleted (fund balance %s)",
            movement_id, result.fund_balance,
        )
        return result

    # --- Fund deletion ---

    def delete_fund(self, ctx: UserContext, fund_id: str) -> FundDeletionResult:
        """
        Delete a fund, reversing every movement first.

        This is a resumable workflow, not one atomic unit:
        1. mark the fund as deleting (no new contributions)
        2. reverse the remaining movements, one unit each, oldest first
        3. delete the fund

        The movements still present are the cursor. If a step fails,
        PartialCascadeFailure lists them; calling delete_fund again
        continues from there.
        """
        def begin(db: Session) -> list[str]:
            fund = _load_fund(db, ctx, fund_id)
            fund.deleting = True
            ids = db.execute(
                select(InvestmentMovement.id)
                .where(
                    InvestmentMovement.fund_id == fund.id,
                    InvestmentMovement.user_id == ctx.user_id,
                )
                .order_by(
                    InvestmentMovement.created_at, InvestmentMovement.id
                )
            ).scalars().all()
            return list(ids)

        pending = self.store.run(begin, name="delete_fund.begin")
        logger.info(
            "Deleting fund %s: %d movement(s) to reverse", fund_id, len(pending)
        )

        reversed_count = 0
        for index, movement_id in enumerate(pending):
            try:
                if self.store.run(
                    lambda db: self._reverse_for_cascade(db, ctx, fund_id, movement_id),
                    name="delete_fund.reverse",
                ):
                    reversed_count += 1
            except (LedgerError, SQLAlchemyError) as e:
                remaining = pending[index:]
                logger.error(
                    "Deletion of fund %s stopped at movement %s: %s",
                    fund_id, movement_id, e,
                )
                raise PartialCascadeFailure(fund_id, remaining, e) from e

        def finish(db: Session) -> None:
            fund = _load_fund(db, ctx, fund_id)
            left = db.execute(
                select(InvestmentMovement.id).where(
                    InvestmentMovement.fund_id == fund.id,
                )
            ).scalars().all()
            if left:
                raise PartialCascadeFailure(
                    fund_id,
                    list(left),
                    InvalidInputError("movements appeared during deletion"),
                )
            db.delete(fund)

        self.store.run(finish, name="delete_fund.finish")
        logger.info(
            "Deleted fund %s after reversing %d movement(s)",
            fund_id, reversed_count,
        )
        return FundDeletionResult(fund_id, reversed_count)

    def _reverse_for_cascade(
        self, db: Session, ctx: UserContext, fund_id: str, movement_id: str
    ) -> bool:
        """
        One cascade step. Returns False if the movement was already gone.

        Unlike delete_contribution, a missing origin account does not
        stop the cascade: the fund side is still reversed.
        """
        ledger = LedgerService(db, ctx)
        fund = _load_fund(db, ctx, fund_id)
        movement = _find_movement(db, ctx, movement_id)
        if movement is None:
            return False
        account = ledger.find_account(movement.origin_account_id)
        _reverse_movement(db, ledger, fund, movement, account)
        return True
