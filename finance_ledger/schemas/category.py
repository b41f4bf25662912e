"""
Pydantic schemas for categories.
"""

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class CategoryResponse(BaseModel):
    id: str | None
    name: str
    is_default: bool
