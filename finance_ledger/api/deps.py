"""
Shared API dependencies.

Authentication is handled upstream; the caller's user id arrives
in the X-User-Id header and becomes the UserContext handed to
every service call.
"""

from fastapi import Header, HTTPException

from finance_ledger.context import UserContext
from finance_ledger.errors import (
    AlertAlreadyPaid,
    ConflictRetryExhausted,
    InvalidInputError,
    LedgerError,
    NotFoundError,
    PartialCascadeFailure,
)


def get_user_context(x_user_id: str = Header(min_length=1)) -> UserContext:
    try:
        return UserContext(user_id=x_user_id)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))


def to_http_exception(error: LedgerError) -> HTTPException:
    """Map a ledger error to the HTTP status the client sees."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, InvalidInputError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, AlertAlreadyPaid):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, ConflictRetryExhausted):
        return HTTPException(status_code=503, detail=str(error))
    if isinstance(error, PartialCascadeFailure):
        return HTTPException(status_code=500, detail={
            "message": str(error),
            "fund_id": error.fund_id,
            "remaining_movement_ids": error.remaining_movement_ids,
        })
    return HTTPException(status_code=500, detail=str(error))
