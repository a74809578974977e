"""Offset/limit pagination for catalog and ledger queries."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

T = TypeVar("T")


class PageRequest(BaseModel):
    """Zero-based page number and page size."""

    page: int = Field(0, ge=0)
    size: int = Field(20, ge=1, le=500)

    @property
    def offset(self) -> int:
        return self.page * self.size


class Page(BaseModel, Generic[T]):
    """One page of results plus the total number of matches."""

    content: list[T]
    total_elements: int
    pageable: PageRequest

    model_config = {"arbitrary_types_allowed": True}

    @property
    def total_pages(self) -> int:
        if self.total_elements == 0:
            return 0
        return math.ceil(self.total_elements / self.pageable.size)

    @property
    def page_number(self) -> int:
        return self.pageable.page

    @property
    def page_size(self) -> int:
        return self.pageable.size


def paginate(session: Session, stmt: Select, page: PageRequest) -> Page:
    """Run ``stmt`` for one page and count all rows it would match.

    Returned rows are expunged from the session.
    """
    total = session.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar() or 0

    rows = session.execute(stmt.offset(page.offset).limit(page.size)).unique().scalars().all()
    for row in rows:
        session.expunge(row)

    return Page(content=list(rows), total_elements=total, pageable=page)
