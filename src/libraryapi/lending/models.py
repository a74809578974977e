"""SQLAlchemy models for book lending.

Tables:
- loans: Individual loan records
"""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.models import Base, Book, utc_now_iso


class Loan(Base):
    """Loan model - one book handed to one customer."""

    __tablename__ = "loans"
    __table_args__ = (
        # At most one outstanding loan per book, enforced at write time
        Index(
            "uq_loans_book_outstanding",
            "book_id",
            unique=True,
            sqlite_where=text("returned = 0"),
            postgresql_where=text("returned = false"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # No cascade: books with loan history cannot be deleted
    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id"),
        nullable=False,
        index=True,
    )

    customer: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    customer_email: Mapped[Optional[str]] = mapped_column(String(200))

    loan_date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # ISO date
    returned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[str] = mapped_column(String(32), default=utc_now_iso)

    book: Mapped["Book"] = relationship("Book", lazy="joined")

    def __repr__(self) -> str:
        return f"<Loan(id={self.id}, book_id={self.book_id}, customer='{self.customer}', returned={self.returned})>"

    @property
    def is_outstanding(self) -> bool:
        """Check if the book has not come back yet."""
        return not self.returned

    @property
    def days_on_loan(self) -> int:
        """Days since the loan was issued."""
        return (date.today() - date.fromisoformat(self.loan_date)).days

    @property
    def contact(self) -> str:
        """Address used for overdue notices."""
        return self.customer_email or self.customer
