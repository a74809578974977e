"""Book catalog operations."""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from ..db.models import Book
from ..db.pagination import Page, PageRequest, paginate
from ..db.schemas import BookCreate, BookFilter, BookUpdate
from ..db.sqlite import Database, get_db
from ..exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

DUPLICATE_ISBN_MESSAGE = "Isbn already registered."


class BookCatalog:
    """Manages the book catalog."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize the catalog.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def create(self, data: BookCreate) -> Book:
        """Add a book to the catalog.

        Args:
            data: Book creation data

        Returns:
            Created book

        Raises:
            ConflictError: If another book already has the same isbn
        """
        with self.db.get_session() as session:
            if self._isbn_taken(session, data.isbn):
                logger.warning("Rejected duplicate isbn %s", data.isbn)
                raise ConflictError(DUPLICATE_ISBN_MESSAGE, field="isbn")

            book = Book(title=data.title, author=data.author, isbn=data.isbn)
            session.add(book)
            try:
                session.flush()
            except IntegrityError as e:
                # Concurrent insert won the unique constraint
                raise ConflictError(DUPLICATE_ISBN_MESSAGE, field="isbn") from e

            session.commit()
            session.refresh(book)
            session.expunge(book)

        logger.info("Created book %s (isbn %s)", book.id, book.isbn)
        return book

    def get(self, book_id: int) -> Optional[Book]:
        """Get a book by ID.

        Args:
            book_id: Book ID

        Returns:
            Book or None
        """
        with self.db.get_session() as session:
            book = session.get(Book, book_id)
            if book:
                session.expunge(book)
            return book

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        """Get a book by ISBN.

        Args:
            isbn: Exact isbn

        Returns:
            Book or None
        """
        with self.db.get_session() as session:
            book = session.execute(
                select(Book).where(Book.isbn == isbn)
            ).scalar_one_or_none()
            if book:
                session.expunge(book)
            return book

    def exists_by_isbn(self, isbn: str) -> bool:
        """Check whether any book uses the given isbn."""
        with self.db.get_session() as session:
            return self._isbn_taken(session, isbn)

    def update(self, book_id: int, data: BookUpdate) -> Book:
        """Replace title, author and isbn of a book.

        Args:
            book_id: Book ID
            data: New values

        Returns:
            Updated book

        Raises:
            NotFoundError: If the book does not exist
            ConflictError: If the new isbn belongs to another book
        """
        with self.db.get_session() as session:
            book = session.get(Book, book_id)
            if not book:
                raise NotFoundError("Book", book_id)

            if data.isbn != book.isbn and self._isbn_taken(session, data.isbn):
                raise ConflictError(DUPLICATE_ISBN_MESSAGE, field="isbn")

            book.title = data.title
            book.author = data.author
            book.isbn = data.isbn
            try:
                session.flush()
            except IntegrityError as e:
                raise ConflictError(DUPLICATE_ISBN_MESSAGE, field="isbn") from e

            session.commit()
            session.refresh(book)
            session.expunge(book)
            return book

    def delete(self, book_id: int) -> None:
        """Delete a book.

        Raises:
            NotFoundError: If the book does not exist
            ConflictError: If loans still reference the book
        """
        with self.db.get_session() as session:
            book = session.get(Book, book_id)
            if not book:
                raise NotFoundError("Book", book_id)

            session.delete(book)
            try:
                session.flush()
            except IntegrityError as e:
                raise ConflictError("Book has loan records and cannot be deleted.") from e

        logger.info("Deleted book %s", book_id)

    def find(self, filters: Optional[BookFilter] = None, page: Optional[PageRequest] = None) -> Page:
        """Search books by title and/or author.

        Both filters are case-insensitive substring matches and must both
        match when given.

        Args:
            filters: Optional title/author filter
            page: Page to return (default: first page)

        Returns:
            Page of books ordered by ID
        """
        filters = filters or BookFilter()
        page = page or PageRequest()

        stmt = select(Book)
        if filters.title:
            stmt = stmt.where(
                func.lower(Book.title).contains(filters.title.lower(), autoescape=True)
            )
        if filters.author:
            stmt = stmt.where(
                func.lower(Book.author).contains(filters.author.lower(), autoescape=True)
            )
        stmt = stmt.order_by(Book.id)

        with self.db.get_session() as session:
            return paginate(session, stmt, page)

    @staticmethod
    def _isbn_taken(session, isbn: str) -> bool:
        return session.execute(
            select(func.count()).select_from(Book).where(Book.isbn == isbn)
        ).scalar() > 0
