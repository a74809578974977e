"""Pytest configuration and shared fixtures.

This module provides fixtures for testing libraryapi, including an
in-memory database, the catalog and ledger managers, sample books and a
recording mail transport.
"""

from datetime import date, timedelta
from pathlib import Path

import pytest

from libraryapi.catalog import BookCatalog
from libraryapi.config import Config
from libraryapi.db import Book, BookCreate, Database
from libraryapi.exceptions import TransportError
from libraryapi.lending import Loan, LoanCreate, LoanLedger


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def db() -> Database:
    """Create an in-memory database for testing."""
    database = Database(":memory:")
    database.create_tables()
    return database


@pytest.fixture
def catalog(db: Database) -> BookCatalog:
    """Create a BookCatalog with test database."""
    return BookCatalog(db)


@pytest.fixture
def ledger(db: Database) -> LoanLedger:
    """Create a LoanLedger with a 4-day late threshold."""
    return LoanLedger(db, late_loan_days=4)


@pytest.fixture
def config() -> Config:
    """Application config that never touches the filesystem or network."""
    return Config(
        db_path=Path(":memory:"),
        late_loan_days=4,
        mail_from="mail@library-api.com",
        mail_subject="Book with overdue loan",
        smtp_host="localhost",
        smtp_port=25,
        smtp_username=None,
        smtp_password=None,
        smtp_security="none",
        sweep_interval=86400,
        log_level="INFO",
    )


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_book(catalog: BookCatalog) -> Book:
    """Create a sample book with isbn 321."""
    return catalog.create(BookCreate(title="As aventuras", author="Fulano", isbn="321"))


@pytest.fixture
def sample_books(catalog: BookCatalog) -> list[Book]:
    """Create several books."""
    books_data = [
        BookCreate(title="Dom Casmurro", author="Machado de Assis", isbn="001"),
        BookCreate(title="Memorias Postumas", author="Machado de Assis", isbn="002"),
        BookCreate(title="Vidas Secas", author="Graciliano Ramos", isbn="003"),
        BookCreate(title="Grande Sertao: Veredas", author="Guimaraes Rosa", isbn="004"),
    ]
    return [catalog.create(data) for data in books_data]


@pytest.fixture
def make_loan(ledger: LoanLedger):
    """Factory that issues a loan N days ago."""

    def _make(book: Book, customer: str = "Fulano", days_ago: int = 0, email: str | None = None) -> Loan:
        return ledger.issue(
            LoanCreate(
                book_id=book.id,
                customer=customer,
                customer_email=email,
                loan_date=date.today() - timedelta(days=days_ago),
            )
        )

    return _make


# ============================================================================
# Mail Fixtures
# ============================================================================


class RecordingTransport:
    """Mail transport that keeps every message instead of sending it."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    def send(self, from_address: str, subject: str, body: str, recipients: list[str]) -> None:
        if self.fail:
            raise TransportError("Connection refused", recipients)
        self.sent.append(
            {
                "from": from_address,
                "subject": subject,
                "body": body,
                "recipients": recipients,
            }
        )


@pytest.fixture
def transport() -> RecordingTransport:
    """A transport that records messages."""
    return RecordingTransport()


@pytest.fixture
def failing_transport() -> RecordingTransport:
    """A transport whose every send fails."""
    return RecordingTransport(fail=True)
