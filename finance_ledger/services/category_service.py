"""
Category service: user-defined labels for journal entries.

Entries store the category name itself, so categories can be
added and removed freely without touching any balance.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from finance_ledger.context import UserContext
from finance_ledger.errors import CategoryNotFound, InvalidInputError
from finance_ledger.models.base import new_id
from finance_ledger.models.category import Category, DEFAULT_CATEGORIES
from finance_ledger.schemas.category import CategoryCreate, CategoryResponse
from finance_ledger.store import LedgerStore


def _user_categories(db: Session, ctx: UserContext) -> list[Category]:
    categories = db.execute(
        select(Category)
        .where(Category.user_id == ctx.user_id)
        .order_by(Category.name)
    ).scalars().all()
    return list(categories)


class CategoryService:

    def __init__(self, store: LedgerStore):
        self.store = store

    def list_categories(self, ctx: UserContext) -> list[CategoryResponse]:
        """Default categories first, then the user's own, without case-insensitive duplicates."""
        user_categories = self.store.run(
            lambda db: _user_categories(db, ctx), name="list_categories"
        )
        seen = {name.casefold() for name in DEFAULT_CATEGORIES}
        result = [
            CategoryResponse(id=None, name=name, is_default=True)
            for name in DEFAULT_CATEGORIES
        ]
        for category in user_categories:
            if category.name.casefold() in seen:
                continue
            seen.add(category.name.casefold())
            result.append(
                CategoryResponse(id=category.id, name=category.name, is_default=False)
            )
        return result

    def create_category(self, ctx: UserContext, request: CategoryCreate) -> Category:
        name = request.name.strip()
        if not name:
            raise InvalidInputError("Category name must not be blank")

        def operation(db: Session) -> Category:
            taken = {n.casefold() for n in DEFAULT_CATEGORIES}
            taken.update(c.name.casefold() for c in _user_categories(db, ctx))
            if name.casefold() in taken:
                raise InvalidInputError(f"Category '{name}' already exists")
            category = Category(id=new_id(), user_id=ctx.user_id, name=name)
            db.add(category)
            return category

        return self.store.run(operation, name="create_category")

    def delete_category(self, ctx: UserContext, category_id: str) -> None:
        def operation(db: Session) -> None:
            category = db.execute(
                select(Category).where(
                    Category.id == category_id,
                    Category.user_id == ctx.user_id,
                )
            ).scalar_one_or_none()
            if category is None:
                raise CategoryNotFound(category_id)
            db.delete(category)

        self.store.run(operation, name="delete_category")
