"""
User category model.

Categories are labels only; journal entries store the category
name, not a reference, so deleting a category never touches the
ledger.
"""

from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from finance_ledger.models.base import Base, new_id, utcnow


# Offered to every user in addition to their own categories
DEFAULT_CATEGORIES = (
    "Alimentação",
    "Clientes",
    "Lazer",
    "Transporte",
    "Saúde",
    "Educação",
    "Moradia",
    "Outros",
)


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=new_id
    )
    user_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<Category {self.name}>"
