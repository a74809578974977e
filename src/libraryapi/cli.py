"""Command-line interface for libraryapi.

Built with Typer for commands and Rich for output.
"""

from datetime import date
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from . import __version__
from .catalog import BookCatalog
from .config import get_config
from .db import BookCreate, BookFilter, BookUpdate, Page, PageRequest, get_db
from .exceptions import LibraryError
from .lending import LoanCreate, LoanFilter, LoanLedger
from .logging_setup import configure_logging

# Create the main app
app = typer.Typer(
    name="library",
    help="Manage a lending library: catalog, loans and overdue notices.",
    no_args_is_help=True,
)

# Create sub-apps for command groups
books_app = typer.Typer(help="Manage the book catalog.")
app.add_typer(books_app, name="books")

loans_app = typer.Typer(help="Issue, return and search loans.")
app.add_typer(loans_app, name="loans")

# Rich console for pretty output
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Configure logging before any command runs."""
    config = get_config()
    configure_logging("DEBUG" if verbose else config.log_level)


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    print_error(message)
    raise typer.Exit(1)


def format_book_table(books: list, title: str = "Books") -> Table:
    """Create a rich table for displaying books."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("ISBN", style="yellow")

    for book in books:
        table.add_row(str(book.id), book.title, book.author, book.isbn)

    return table


def format_loan_table(loans: list, title: str = "Loans") -> Table:
    """Create a rich table for displaying loans."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("ISBN", style="yellow")
    table.add_column("Book", style="cyan", max_width=30)
    table.add_column("Customer", style="green")
    table.add_column("Loan Date")
    table.add_column("Status", justify="center")

    for loan in loans:
        status = "[dim]returned[/dim]" if loan.returned else "[bold]active[/bold]"
        table.add_row(
            str(loan.id),
            loan.book.isbn,
            loan.book.title,
            loan.customer,
            loan.loan_date,
            status,
        )

    return table


def print_page_footer(page: Page) -> None:
    """Print page position and totals."""
    print_info(
        f"Page {page.page_number + 1} of {max(page.total_pages, 1)} "
        f"({page.total_elements} total)"
    )


# ============================================================================
# Book Commands
# ============================================================================


@books_app.command("add")
def books_add(
    title: str = typer.Option(..., "--title", "-t", help="Book title"),
    author: str = typer.Option(..., "--author", "-a", help="Book author"),
    isbn: str = typer.Option(..., "--isbn", "-i", help="ISBN"),
) -> None:
    """Add a book to the catalog."""
    catalog = BookCatalog(get_db())
    try:
        book = catalog.create(BookCreate(title=title, author=author, isbn=isbn))
    except ValidationError as e:
        fail(str(e))
    except LibraryError as e:
        fail(e.message)

    print_success(f"Added: {book.title} by {book.author} (id {book.id})")


@books_app.command("show")
def books_show(book_id: int = typer.Argument(..., help="Book ID")) -> None:
    """Show one book and its loan history."""
    db = get_db()
    book = BookCatalog(db).get(book_id)
    if not book:
        fail(f"Book not found: {book_id}")

    console.print(f"[bold cyan]{book.title}[/bold cyan]")
    console.print(f"  Author: {book.author}")
    console.print(f"  ISBN:   {book.isbn}")

    history = LoanLedger(db).get_loans_by_book(book_id, PageRequest(page=0, size=50))
    if history.content:
        console.print(format_loan_table(history.content, title="Loan History"))
    else:
        print_info("Never loaned.")


@books_app.command("update")
def books_update(
    book_id: int = typer.Argument(..., help="Book ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="New author"),
    isbn: Optional[str] = typer.Option(None, "--isbn", "-i", help="New ISBN"),
) -> None:
    """Update a book's title, author or isbn."""
    catalog = BookCatalog(get_db())
    book = catalog.get(book_id)
    if not book:
        fail(f"Book not found: {book_id}")

    try:
        updated = catalog.update(
            book_id,
            BookUpdate(
                title=title or book.title,
                author=author or book.author,
                isbn=isbn or book.isbn,
            ),
        )
    except ValidationError as e:
        fail(str(e))
    except LibraryError as e:
        fail(e.message)

    print_success(f"Updated: {updated.title} by {updated.author} ({updated.isbn})")


@books_app.command("delete")
def books_delete(
    book_id: int = typer.Argument(..., help="Book ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a book from the catalog."""
    catalog = BookCatalog(get_db())
    book = catalog.get(book_id)
    if not book:
        fail(f"Book not found: {book_id}")

    if not force and not typer.confirm(f"Delete '{book.title}'?"):
        raise typer.Abort()

    try:
        catalog.delete(book_id)
    except LibraryError as e:
        fail(e.message)

    print_success(f"Deleted: {book.title}")


@books_app.command("list")
def books_list(
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Title contains"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Author contains"),
    page: int = typer.Option(0, "--page", "-p", min=0, help="Page number (from 0)"),
    size: int = typer.Option(20, "--size", "-s", min=1, help="Page size"),
) -> None:
    """List or search books."""
    result = BookCatalog(get_db()).find(
        BookFilter(title=title, author=author), PageRequest(page=page, size=size)
    )
    if not result.content:
        print_info("No books found.")
        return

    console.print(format_book_table(result.content))
    print_page_footer(result)


# ============================================================================
# Loan Commands
# ============================================================================


@loans_app.command("issue")
def loans_issue(
    isbn: str = typer.Argument(..., help="ISBN of the book to lend"),
    customer: str = typer.Argument(..., help="Customer name or identifier"),
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Customer email"),
    loan_date: Optional[str] = typer.Option(None, "--date", "-d", help="Loan date (YYYY-MM-DD)"),
) -> None:
    """Lend a book to a customer."""
    db = get_db()
    book = BookCatalog(db).get_by_isbn(isbn)
    if not book:
        fail(f"No book with ISBN {isbn}")

    try:
        when = date.fromisoformat(loan_date) if loan_date else None
    except ValueError:
        fail(f"Invalid date: {loan_date}")

    try:
        loan = LoanLedger(db).issue(
            LoanCreate(book_id=book.id, customer=customer, customer_email=email, loan_date=when)
        )
    except ValidationError as e:
        fail(str(e))
    except LibraryError as e:
        fail(e.message)

    print_success(f"Loan {loan.id}: '{book.title}' lent to {loan.customer} on {loan.loan_date}")


@loans_app.command("return")
def loans_return(loan_id: int = typer.Argument(..., help="Loan ID")) -> None:
    """Mark a loan as returned."""
    try:
        loan = LoanLedger(get_db()).mark_returned(loan_id)
    except LibraryError as e:
        fail(e.message)

    print_success(f"Loan {loan.id} returned: '{loan.book.title}'")


@loans_app.command("list")
def loans_list(
    isbn: Optional[str] = typer.Option(None, "--isbn", "-i", help="Exact ISBN"),
    customer: Optional[str] = typer.Option(None, "--customer", "-c", help="Customer contains"),
    page: int = typer.Option(0, "--page", "-p", min=0, help="Page number (from 0)"),
    size: int = typer.Option(20, "--size", "-s", min=1, help="Page size"),
) -> None:
    """List loans matching an isbn or a customer."""
    result = LoanLedger(get_db()).find(
        LoanFilter(isbn=isbn, customer=customer), PageRequest(page=page, size=size)
    )
    if not result.content:
        print_info("No loans found.")
        return

    console.print(format_loan_table(result.content))
    print_page_footer(result)


@loans_app.command("late")
def loans_late(
    days: Optional[int] = typer.Option(None, "--days", "-d", min=0, help="Override late threshold"),
) -> None:
    """Show outstanding loans past the late threshold."""
    ledger = LoanLedger(get_db())
    late = ledger.get_all_late_loans(threshold_days=days)
    if not late:
        print_info("No late loans.")
        return

    console.print(format_loan_table(late, title="Late Loans"))
    threshold = ledger.late_loan_days if days is None else days
    print_info(f"{len(late)} loan(s) older than {threshold} day(s)")


# ============================================================================
# Sweep and Server
# ============================================================================


@app.command()
def sweep() -> None:
    """Run the overdue-loan notification sweep once."""
    from .sweep import build_overdue_sweep

    config = get_config()
    result = build_overdue_sweep(get_db(), config).run()

    if result.late_loans == 0:
        print_info("No late loans, nothing sent.")
        return
    if not result.sent:
        fail(f"Notice for {result.late_loans} late loan(s) not sent: {result.error}")

    print_success(
        f"Notified {len(result.recipients)} recipient(s) about {result.late_loans} late loan(s)"
    )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(5000, "--port", "-p", help="Port"),
    no_sweep: bool = typer.Option(False, "--no-sweep", help="Do not schedule the overdue sweep"),
    debug: bool = typer.Option(False, "--debug", help="Flask debug mode"),
) -> None:
    """Run the REST API with the overdue sweep scheduled in the background."""
    from .api import create_app
    from .sweep import SweepScheduler, build_overdue_sweep

    config = get_config()
    errors = config.validate()
    if errors:
        for error in errors:
            print_error(error)
        raise typer.Exit(1)

    db = get_db(str(config.db_path))
    flask_app = create_app(db, config)

    scheduler = None
    if not no_sweep:
        scheduler = SweepScheduler(build_overdue_sweep(db, config), config.sweep_interval)
        scheduler.start()

    console.print(f"\n[bold]Library API[/bold] running at http://{host}:{port}")
    print_info("Press Ctrl+C to stop\n")
    try:
        flask_app.run(host=host, port=port, debug=debug, use_reloader=False)
    finally:
        if scheduler:
            scheduler.stop()


@app.command()
def version() -> None:
    """Show version."""
    console.print(f"libraryapi {__version__}")


if __name__ == "__main__":
    app()
