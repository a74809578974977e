"""Loan ledger for book lending operations."""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import get_config
from ..db.models import Book
from ..db.pagination import Page, PageRequest, paginate
from ..db.sqlite import Database, get_db
from ..exceptions import BusinessError, NotFoundError
from .models import Loan
from .schemas import LoanCreate, LoanFilter, LoanUpdate

logger = logging.getLogger(__name__)

BOOK_ALREADY_LOANED = "Book already loaned"


class LoanLedger:
    """Manages loan issuance, returns and overdue lookups."""

    def __init__(self, db: Optional[Database] = None, late_loan_days: Optional[int] = None):
        """Initialize the ledger.

        Args:
            db: Database instance
            late_loan_days: Days after which an outstanding loan is late
                (default: LIBRARY_LATE_LOAN_DAYS)
        """
        self.db = db or get_db()
        self.late_loan_days = (
            late_loan_days if late_loan_days is not None else get_config().late_loan_days
        )

    # -------------------------------------------------------------------------
    # Issue and return
    # -------------------------------------------------------------------------

    def issue(self, data: LoanCreate) -> Loan:
        """Issue a loan for a book.

        The outstanding-loan check and the insert share one transaction, and
        the partial unique index on outstanding loans rejects a concurrent
        second insert.

        Args:
            data: Loan creation data

        Returns:
            Created loan

        Raises:
            NotFoundError: If the book does not exist
            BusinessError: If the book already has an outstanding loan
        """
        with self.db.get_session() as session:
            book = session.get(Book, data.book_id)
            if book is None:
                raise NotFoundError("Book", data.book_id)

            if self._has_outstanding(session, data.book_id):
                logger.warning("Book %s already loaned, rejecting loan to %s", data.book_id, data.customer)
                raise BusinessError(BOOK_ALREADY_LOANED)

            loan = Loan(
                book=book,
                customer=data.customer,
                customer_email=data.customer_email,
                loan_date=(data.loan_date or date.today()).isoformat(),
                returned=False,
            )
            session.add(loan)
            try:
                session.flush()
            except IntegrityError as e:
                logger.warning("Concurrent loan for book %s rejected by index", data.book_id)
                raise BusinessError(BOOK_ALREADY_LOANED) from e

            session.commit()
            session.expunge(loan)

        logger.info("Issued loan %s: book %s to %s", loan.id, loan.book_id, loan.customer)
        return loan

    def has_outstanding_loan(self, book_id: int) -> bool:
        """Check whether a book is currently on loan."""
        with self.db.get_session() as session:
            return self._has_outstanding(session, book_id)

    def get(self, loan_id: int) -> Optional[Loan]:
        """Get a loan by ID.

        Args:
            loan_id: Loan ID

        Returns:
            Loan or None
        """
        with self.db.get_session() as session:
            loan = session.get(Loan, loan_id)
            if loan:
                session.expunge(loan)
            return loan

    def update(self, loan_id: int, data: LoanUpdate) -> Loan:
        """Apply a loan update; only the returned flag may change.

        Args:
            loan_id: Loan ID
            data: Update data

        Returns:
            Updated loan

        Raises:
            NotFoundError: If the loan does not exist
            BusinessError: If a returned loan would become active again
        """
        with self.db.get_session() as session:
            loan = session.get(Loan, loan_id)
            if not loan:
                raise NotFoundError("Loan", loan_id)

            if loan.returned and not data.returned:
                raise BusinessError("Returned loan cannot be reactivated")

            if data.returned and not loan.returned:
                loan.returned = True
                logger.info("Loan %s returned (book %s)", loan.id, loan.book_id)

            session.commit()
            session.expunge(loan)
            return loan

    def mark_returned(self, loan_id: int) -> Loan:
        """Mark a loan as returned.

        Args:
            loan_id: Loan ID

        Returns:
            Updated loan
        """
        return self.update(loan_id, LoanUpdate(returned=True))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find(self, filters: Optional[LoanFilter] = None, page: Optional[PageRequest] = None) -> Page:
        """Search loans by book isbn or customer.

        Args:
            filters: isbn (exact) and/or customer (case-insensitive substring),
                OR-combined when both are set
            page: Page to return (default: first page)

        Returns:
            Page of loans ordered by ID
        """
        filters = filters or LoanFilter()
        page = page or PageRequest()

        conditions = []
        if filters.isbn:
            conditions.append(Book.isbn == filters.isbn)
        if filters.customer:
            conditions.append(
                func.lower(Loan.customer).contains(filters.customer.lower(), autoescape=True)
            )

        stmt = select(Loan).join(Book, Loan.book_id == Book.id)
        if conditions:
            stmt = stmt.where(or_(*conditions))
        stmt = stmt.order_by(Loan.id)

        with self.db.get_session() as session:
            return paginate(session, stmt, page)

    def get_loans_by_book(self, book_id: int, page: Optional[PageRequest] = None) -> Page:
        """Get the loan history of a book, oldest first.

        Args:
            book_id: Book ID
            page: Page to return (default: first page)

        Returns:
            Page of loans ordered by loan date, then ID
        """
        page = page or PageRequest()
        stmt = (
            select(Loan)
            .where(Loan.book_id == book_id)
            .order_by(Loan.loan_date.asc(), Loan.id.asc())
        )

        with self.db.get_session() as session:
            return paginate(session, stmt, page)

    def get_all_late_loans(
        self,
        threshold_days: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> list[Loan]:
        """Get every outstanding loan issued before today minus the threshold.

        The result is materialized in full.

        Args:
            threshold_days: Override for the configured late-loan threshold
            as_of: Reference date (default: today)

        Returns:
            Late loans ordered by loan date, then ID
        """
        days = self.late_loan_days if threshold_days is None else threshold_days
        cutoff = (as_of or date.today()) - timedelta(days=days)

        stmt = (
            select(Loan)
            .where(
                Loan.returned.is_(False),
                Loan.loan_date < cutoff.isoformat(),
            )
            .order_by(Loan.loan_date.asc(), Loan.id.asc())
        )

        with self.db.get_session() as session:
            loans = session.execute(stmt).scalars().all()
            for loan in loans:
                session.expunge(loan)
            return list(loans)

    @staticmethod
    def _has_outstanding(session: Session, book_id: int) -> bool:
        return session.execute(
            select(func.count()).select_from(Loan).where(
                Loan.book_id == book_id,
                Loan.returned.is_(False),
            )
        ).scalar() > 0
