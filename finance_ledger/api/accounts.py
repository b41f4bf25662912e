"""
Account and journal API endpoints.

The API layer is thin: it handles HTTP concerns and delegates
every balance change to the services.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from finance_ledger.api.deps import get_user_context, to_http_exception
from finance_ledger.context import UserContext
from finance_ledger.errors import LedgerError
from finance_ledger.schemas.account import (
    AccountCreate,
    AccountRename,
    AccountResponse,
    JournalBalanceResponse,
)
from finance_ledger.schemas.transaction import (
    PostingResponse,
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
)
from finance_ledger.services.account_service import AccountService
from finance_ledger.services.transaction_service import (
    PostingResult,
    TransactionService,
)
from finance_ledger.store import LedgerStore, get_store

router = APIRouter(prefix="/accounts", tags=["Accounts"])


def _posting_response(result: PostingResult) -> PostingResponse:
    return PostingResponse(
        transaction=TransactionResponse.model_validate(result.transaction),
        account_balance=result.account_balance,
    )


# --- Account Endpoints ---

@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Open a new account."""
    return AccountService(store).create_account(ctx, request)


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    return AccountService(store).list_accounts(ctx)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        return AccountService(store).get_account(ctx, account_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.patch("/{account_id}", response_model=AccountResponse)
def rename_account(
    account_id: str,
    request: AccountRename,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        return AccountService(store).rename_account(ctx, account_id, request)
    except LedgerError as e:
        raise to_http_exception(e)


@router.delete("/{account_id}", status_code=204)
def delete_account(
    account_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Delete an account and its journal."""
    try:
        AccountService(store).delete_account(ctx, account_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get(
    "/{account_id}/journal-balance",
    response_model=JournalBalanceResponse,
)
def get_journal_balance(
    account_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Compare the cached balance with the balance recomputed from the journal."""
    try:
        account, journal_balance = AccountService(store).journal_balance(
            ctx, account_id
        )
    except LedgerError as e:
        raise to_http_exception(e)

    return JournalBalanceResponse(
        account_id=account.id,
        balance=account.balance,
        journal_balance=journal_balance,
        consistent=account.balance == journal_balance,
    )


# --- Journal Endpoints ---

@router.post(
    "/{account_id}/transactions",
    response_model=PostingResponse,
    status_code=201,
)
def post_transaction(
    account_id: str,
    request: TransactionCreate,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Post an entry and return it with the updated balance."""
    try:
        result = TransactionService(store).post_transaction(ctx, account_id, request)
    except LedgerError as e:
        raise to_http_exception(e)
    return _posting_response(result)


@router.get(
    "/{account_id}/transactions",
    response_model=list[TransactionResponse],
)
def list_transactions(
    account_id: str,
    month: str | None = Query(default=None, pattern=r"^\d{4}-\d{2}$"),
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        return TransactionService(store).list_transactions(ctx, account_id, month)
    except LedgerError as e:
        raise to_http_exception(e)


@router.patch(
    "/{account_id}/transactions/{transaction_id}",
    response_model=PostingResponse,
)
def edit_transaction(
    account_id: str,
    transaction_id: str,
    request: TransactionUpdate,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Edit an entry; the balance moves by the net change."""
    try:
        result = TransactionService(store).edit_transaction(
            ctx, account_id, transaction_id, request
        )
    except LedgerError as e:
        raise to_http_exception(e)
    return _posting_response(result)


@router.delete(
    "/{account_id}/transactions/{transaction_id}",
    response_model=PostingResponse,
)
def delete_transaction(
    account_id: str,
    transaction_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Delete an entry and reverse its effect."""
    try:
        result = TransactionService(store).delete_transaction(
            ctx, account_id, transaction_id
        )
    except LedgerError as e:
        raise to_http_exception(e)
    return _posting_response(result)
