"""
Investment fund API endpoints.
"""

from fastapi import APIRouter, Depends

from finance_ledger.api.deps import get_user_context, to_http_exception
from finance_ledger.context import UserContext
from finance_ledger.errors import LedgerError
from finance_ledger.schemas.investment import (
    ContributionCreate,
    ContributionResponse,
    ContributionUpdate,
    FundCreate,
    FundDeletionResponse,
    FundResponse,
    MovementResponse,
)
from finance_ledger.services.investment_service import (
    ContributionResult,
    InvestmentService,
)
from finance_ledger.store import LedgerStore, get_store

router = APIRouter(prefix="/investments", tags=["Investments"])


def _contribution_response(result: ContributionResult) -> ContributionResponse:
    return ContributionResponse(
        movement=MovementResponse.model_validate(result.movement),
        fund_balance=result.fund_balance,
        account_balance=result.account_balance,
    )


# --- Movement Endpoints ---
# Declared before /{fund_id} so "movements" is never taken for a fund id.

@router.patch(
    "/movements/{movement_id}",
    response_model=ContributionResponse,
)
def edit_contribution(
    movement_id: str,
    request: ContributionUpdate,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Edit a contribution, possibly moving it to another origin account."""
    try:
        result = InvestmentService(store).edit_contribution(
            ctx, movement_id, request
        )
    except LedgerError as e:
        raise to_http_exception(e)
    return _contribution_response(result)


@router.delete(
    "/movements/{movement_id}",
    response_model=ContributionResponse,
)
def delete_contribution(
    movement_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Delete a contribution and reverse its effects."""
    try:
        result = InvestmentService(store).delete_contribution(ctx, movement_id)
    except LedgerError as e:
        raise to_http_exception(e)
    return _contribution_response(result)


# --- Fund Endpoints ---

@router.post("", response_model=FundResponse, status_code=201)
def create_fund(
    request: FundCreate,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        return InvestmentService(store).create_fund(ctx, request)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("", response_model=list[FundResponse])
def list_funds(
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    return InvestmentService(store).list_funds(ctx)


@router.get("/{fund_id}", response_model=FundResponse)
def get_fund(
    fund_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        return InvestmentService(store).get_fund(ctx, fund_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.delete("/{fund_id}", response_model=FundDeletionResponse)
def delete_fund(
    fund_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """
    Delete a fund, reversing all of its contributions.

    If this fails partway, the response lists the movements still
    pending; repeating the request resumes the deletion.
    """
    try:
        result = InvestmentService(store).delete_fund(ctx, fund_id)
    except LedgerError as e:
        raise to_http_exception(e)
    return FundDeletionResponse(
        fund_id=result.fund_id,
        reversed_movements=result.reversed_movements,
    )


@router.get("/{fund_id}/movements", response_model=list[MovementResponse])
def list_movements(
    fund_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        return InvestmentService(store).list_movements(ctx, fund_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.post(
    "/{fund_id}/movements",
    response_model=ContributionResponse,
    status_code=201,
)
def contribute(
    fund_id: str,
    request: ContributionCreate,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Contribute to a fund from an origin account."""
    try:
        result = InvestmentService(store).contribute(ctx, fund_id, request)
    except LedgerError as e:
        raise to_http_exception(e)
    return _contribution_response(result)
