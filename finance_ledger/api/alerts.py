"""
Recurring alert API endpoints.
"""

from fastapi import APIRouter, Depends

from finance_ledger.api.deps import get_user_context, to_http_exception
from finance_ledger.context import UserContext
from finance_ledger.errors import LedgerError
from finance_ledger.schemas.alert import (
    AlertCreate,
    AlertPaymentResponse,
    AlertResponse,
    AlertUpdate,
    MarkPaidRequest,
)
from finance_ledger.services.alert_service import AlertPayment, AlertService
from finance_ledger.store import LedgerStore, get_store

router = APIRouter(prefix="/alerts", tags=["Alerts"])


def _payment_response(result: AlertPayment) -> AlertPaymentResponse:
    return AlertPaymentResponse(
        alert=AlertResponse.model_validate(result.alert),
        account_balance=result.account_balance,
    )


@router.post("", response_model=AlertResponse, status_code=201)
def create_alert(
    request: AlertCreate,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        return AlertService(store).create_alert(ctx, request)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("", response_model=list[AlertResponse])
def list_alerts(
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """All alerts, ordered by due day."""
    return AlertService(store).list_alerts(ctx)


@router.get("/{alert_id}", response_model=AlertResponse)
def get_alert(
    alert_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        return AlertService(store).get_alert(ctx, alert_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.patch("/{alert_id}", response_model=AlertResponse)
def update_alert(
    alert_id: str,
    request: AlertUpdate,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        return AlertService(store).update_alert(ctx, alert_id, request)
    except LedgerError as e:
        raise to_http_exception(e)


@router.delete("/{alert_id}", status_code=204)
def delete_alert(
    alert_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        AlertService(store).delete_alert(ctx, alert_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.post("/{alert_id}/pay", response_model=AlertPaymentResponse)
def mark_alert_paid(
    alert_id: str,
    request: MarkPaidRequest | None = None,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """
    Mark the alert paid for the current month.

    Posts the payment entry and debits (or, for receivables,
    credits) the bound account.
    """
    try:
        result = AlertService(store).mark_paid(ctx, alert_id, request)
    except LedgerError as e:
        raise to_http_exception(e)
    return _payment_response(result)


@router.post("/{alert_id}/unpay", response_model=AlertPaymentResponse)
def mark_alert_unpaid(
    alert_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Undo the current payment, reversing its entry."""
    try:
        result = AlertService(store).mark_unpaid(ctx, alert_id)
    except LedgerError as e:
        raise to_http_exception(e)
    return _payment_response(result)
