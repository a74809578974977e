"""Pydantic schemas for book data validation."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class BookBase(BaseModel):
    """Base book fields common to create/update operations."""

    title: str = Field(..., min_length=1, max_length=500, description="Book title")
    author: str = Field(..., min_length=1, max_length=500, description="Book author")
    isbn: str = Field(..., min_length=1, max_length=20, description="ISBN")

    @field_validator("title", "author", "isbn", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        """Strip surrounding whitespace so blank values fail min_length."""
        if isinstance(v, str):
            return v.strip()
        return v


class BookCreate(BookBase):
    """Schema for creating a book."""

    pass


class BookUpdate(BookBase):
    """Schema for updating a book.

    Updates replace title, author and isbn together.
    """

    pass


class BookResponse(BookBase):
    """Schema for book responses."""

    id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookFilter(BaseModel):
    """Catalog search filter; set fields are AND-combined substring matches."""

    title: Optional[str] = None
    author: Optional[str] = None
