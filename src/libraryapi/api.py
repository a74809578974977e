"""REST API for the catalog and the loan ledger, built on Flask."""

import logging
from typing import Callable, Optional

from flask import Flask, jsonify, request
from pydantic import ValidationError

from .catalog import BookCatalog
from .config import Config, get_config
from .db import BookCreate, BookFilter, BookResponse, BookUpdate, Database, Page, PageRequest, get_db
from .exceptions import BusinessError, NotFoundError
from .lending import LoanCreate, LoanFilter, LoanLedger, LoanRequest, LoanResponse, LoanUpdate

logger = logging.getLogger(__name__)

BOOK_NOT_FOUND_FOR_ISBN = "Book not found for passed isbn"


def _validation_messages(error: ValidationError) -> list[str]:
    """Flatten pydantic errors into one message per field."""
    messages = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        messages.append(f"{location}: {err['msg']}" if location else err["msg"])
    return messages


def _page_request() -> PageRequest:
    return PageRequest(
        page=request.args.get("page", 0),
        size=request.args.get("size", 20),
    )


def _page_json(page: Page, serialize: Callable) -> dict:
    return {
        "content": [serialize(item) for item in page.content],
        "total_elements": page.total_elements,
        "total_pages": page.total_pages,
        "page": page.page_number,
        "size": page.page_size,
    }


def _book_json(book) -> dict:
    return BookResponse.model_validate(book).model_dump(mode="json")


def _loan_json(loan) -> dict:
    return LoanResponse.from_loan(loan).model_dump(mode="json")


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


def create_app(
    db: Optional[Database] = None,
    config: Optional[Config] = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        db: Database to serve (default: the global database)
        config: Application config (default: loaded from the environment)
    """
    config = config or get_config()
    db = db or get_db(str(config.db_path))

    catalog = BookCatalog(db)
    ledger = LoanLedger(db, late_loan_days=config.late_loan_days)

    app = Flask(__name__)
    app.extensions["libraryapi"] = {"catalog": catalog, "ledger": ledger, "config": config}

    # ------------------------------------------------------------------
    # Error handlers
    # ------------------------------------------------------------------

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        return jsonify({"errors": _validation_messages(error)}), 400

    @app.errorhandler(BusinessError)
    def handle_business_error(error: BusinessError):
        return jsonify({"errors": [error.message]}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(error: NotFoundError):
        return jsonify({"errors": [error.message]}), 404

    # ------------------------------------------------------------------
    # Books
    # ------------------------------------------------------------------

    @app.route("/api/books", methods=["POST"])
    def create_book():
        """Add a book to the catalog."""
        data = BookCreate.model_validate(_json_body())
        book = catalog.create(data)
        return jsonify(_book_json(book)), 201

    @app.route("/api/books/<int:book_id>", methods=["GET"])
    def get_book(book_id: int):
        """Get one book."""
        book = catalog.get(book_id)
        if not book:
            raise NotFoundError("Book", book_id)
        return jsonify(_book_json(book))

    @app.route("/api/books/<int:book_id>", methods=["PUT"])
    def update_book(book_id: int):
        """Replace a book's title, author and isbn."""
        data = BookUpdate.model_validate(_json_body())
        book = catalog.update(book_id, data)
        return jsonify(_book_json(book))

    @app.route("/api/books/<int:book_id>", methods=["DELETE"])
    def delete_book(book_id: int):
        """Remove a book from the catalog."""
        catalog.delete(book_id)
        return "", 204

    @app.route("/api/books", methods=["GET"])
    def find_books():
        """Search books by title and author."""
        filters = BookFilter(
            title=request.args.get("title") or None,
            author=request.args.get("author") or None,
        )
        page = catalog.find(filters, _page_request())
        return jsonify(_page_json(page, _book_json))

    @app.route("/api/books/<int:book_id>/loans", methods=["GET"])
    def loans_by_book(book_id: int):
        """Loan history of one book, oldest first."""
        if not catalog.get(book_id):
            raise NotFoundError("Book", book_id)
        page = ledger.get_loans_by_book(book_id, _page_request())
        return jsonify(_page_json(page, _loan_json))

    # ------------------------------------------------------------------
    # Loans
    # ------------------------------------------------------------------

    @app.route("/api/loans", methods=["POST"])
    def create_loan():
        """Lend a book, addressed by isbn, to a customer."""
        data = LoanRequest.model_validate(_json_body())
        book = catalog.get_by_isbn(data.isbn)
        if not book:
            raise BusinessError(BOOK_NOT_FOUND_FOR_ISBN)

        loan = ledger.issue(
            LoanCreate(book_id=book.id, customer=data.customer, customer_email=data.email)
        )
        return jsonify(_loan_json(loan)), 201

    @app.route("/api/loans/<int:loan_id>", methods=["GET"])
    def get_loan(loan_id: int):
        """Get one loan."""
        loan = ledger.get(loan_id)
        if not loan:
            raise NotFoundError("Loan", loan_id)
        return jsonify(_loan_json(loan))

    @app.route("/api/loans/<int:loan_id>", methods=["PATCH"])
    def return_loan(loan_id: int):
        """Mark a loan as returned."""
        data = LoanUpdate.model_validate(_json_body())
        loan = ledger.update(loan_id, data)
        return jsonify(_loan_json(loan))

    @app.route("/api/loans", methods=["GET"])
    def find_loans():
        """Search loans by isbn or customer."""
        filters = LoanFilter(
            isbn=request.args.get("isbn") or None,
            customer=request.args.get("customer") or None,
        )
        page = ledger.find(filters, _page_request())
        return jsonify(_page_json(page, _loan_json))

    return app
