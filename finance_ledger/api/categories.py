"""
Category API endpoints.
"""

from fastapi import APIRouter, Depends

from finance_ledger.api.deps import get_user_context, to_http_exception
from finance_ledger.context import UserContext
from finance_ledger.errors import LedgerError
from finance_ledger.schemas.category import CategoryCreate, CategoryResponse
from finance_ledger.services.category_service import CategoryService
from finance_ledger.store import LedgerStore, get_store

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    """Default categories followed by the user's own."""
    return CategoryService(store).list_categories(ctx)


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    request: CategoryCreate,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        category = CategoryService(store).create_category(ctx, request)
    except LedgerError as e:
        raise to_http_exception(e)
    return CategoryResponse(id=category.id, name=category.name, is_default=False)


@router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: str,
    ctx: UserContext = Depends(get_user_context),
    store: LedgerStore = Depends(get_store),
):
    try:
        CategoryService(store).delete_category(ctx, category_id)
    except LedgerError as e:
        raise to_http_exception(e)
