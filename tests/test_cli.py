"""Tests for the CLI interface."""

import os
import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from libraryapi import cli
from libraryapi.cli import app
from libraryapi.config import reset_config
from libraryapi.db.sqlite import reset_db


@pytest.fixture(autouse=True)
def setup_test_db(monkeypatch):
    """Set up a test database for each test."""
    reset_db()
    reset_config()

    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    os.environ["LIBRARY_DB_PATH"] = db_path
    # Keep pytest's log capture handlers on the root logger
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)

    yield

    # Cleanup
    reset_db()
    reset_config()
    if "LIBRARY_DB_PATH" in os.environ:
        del os.environ["LIBRARY_DB_PATH"]
    if Path(db_path).exists():
        Path(db_path).unlink()


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


def add_book(runner: CliRunner, title: str = "Dom Casmurro", author: str = "Machado de Assis", isbn: str = "001"):
    return runner.invoke(app, ["books", "add", "-t", title, "-a", author, "-i", isbn])


class TestCLIBasics:
    """Tests for basic CLI functionality."""

    def test_help(self, runner: CliRunner):
        """Test that help command works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "lending library" in result.stdout

    def test_version(self, runner: CliRunner):
        """Test version command."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.stdout


class TestBookCommands:
    """Tests for the books command group."""

    def test_add(self, runner: CliRunner):
        result = add_book(runner)
        assert result.exit_code == 0
        assert "Added: Dom Casmurro by Machado de Assis (id 1)" in result.stdout

    def test_add_duplicate_isbn(self, runner: CliRunner):
        add_book(runner)
        result = add_book(runner, title="Other")
        assert result.exit_code == 1
        assert "Isbn already registered" in result.stdout

    def test_add_blank_title(self, runner: CliRunner):
        result = add_book(runner, title="  ")
        assert result.exit_code == 1

    def test_list(self, runner: CliRunner):
        add_book(runner)
        add_book(runner, title="Vidas Secas", author="Graciliano Ramos", isbn="002")

        result = runner.invoke(app, ["books", "list", "--author", "machado"])

        assert result.exit_code == 0
        assert "Dom Casmurro" in result.stdout
        assert "Vidas Secas" not in result.stdout
        assert "(1 total)" in result.stdout

    def test_list_empty(self, runner: CliRunner):
        result = runner.invoke(app, ["books", "list"])
        assert result.exit_code == 0
        assert "No books found" in result.stdout

    def test_show(self, runner: CliRunner):
        add_book(runner)
        result = runner.invoke(app, ["books", "show", "1"])
        assert result.exit_code == 0
        assert "Dom Casmurro" in result.stdout
        assert "Never loaned" in result.stdout

    def test_show_not_found(self, runner: CliRunner):
        result = runner.invoke(app, ["books", "show", "99"])
        assert result.exit_code == 1

    def test_update(self, runner: CliRunner):
        add_book(runner)
        result = runner.invoke(app, ["books", "update", "1", "--title", "Memorias"])
        assert result.exit_code == 0
        assert "Updated: Memorias by Machado de Assis (001)" in result.stdout

    def test_delete(self, runner: CliRunner):
        add_book(runner)
        result = runner.invoke(app, ["books", "delete", "1", "--force"])
        assert result.exit_code == 0
        assert "Deleted: Dom Casmurro" in result.stdout

    def test_delete_with_loans(self, runner: CliRunner):
        add_book(runner)
        runner.invoke(app, ["loans", "issue", "001", "Fulano"])

        result = runner.invoke(app, ["books", "delete", "1", "--force"])

        assert result.exit_code == 1
        assert "cannot be deleted" in result.stdout


class TestLoanCommands:
    """Tests for the loans command group."""

    def test_issue_and_return(self, runner: CliRunner):
        add_book(runner)

        result = runner.invoke(app, ["loans", "issue", "001", "Fulano", "--email", "fulano@email.com"])
        assert result.exit_code == 0
        assert "Loan 1: 'Dom Casmurro' lent to Fulano" in result.stdout

        result = runner.invoke(app, ["loans", "return", "1"])
        assert result.exit_code == 0
        assert "Loan 1 returned: 'Dom Casmurro'" in result.stdout

    def test_issue_unknown_isbn(self, runner: CliRunner):
        result = runner.invoke(app, ["loans", "issue", "999", "Fulano"])
        assert result.exit_code == 1
        assert "No book with ISBN 999" in result.stdout

    def test_issue_already_loaned(self, runner: CliRunner):
        add_book(runner)
        runner.invoke(app, ["loans", "issue", "001", "Fulano"])

        result = runner.invoke(app, ["loans", "issue", "001", "Ciclano"])

        assert result.exit_code == 1
        assert "Book already loaned" in result.stdout

    def test_issue_bad_date(self, runner: CliRunner):
        add_book(runner)
        result = runner.invoke(app, ["loans", "issue", "001", "Fulano", "--date", "yesterday"])
        assert result.exit_code == 1
        assert "Invalid date" in result.stdout

    def test_return_not_found(self, runner: CliRunner):
        result = runner.invoke(app, ["loans", "return", "99"])
        assert result.exit_code == 1

    def test_list(self, runner: CliRunner):
        add_book(runner)
        runner.invoke(app, ["loans", "issue", "001", "Fulano"])

        result = runner.invoke(app, ["loans", "list", "--customer", "fulano"])

        assert result.exit_code == 0
        assert "Fulano" in result.stdout
        assert "(1 total)" in result.stdout

    def test_late(self, runner: CliRunner):
        add_book(runner)
        old = (date.today() - timedelta(days=10)).isoformat()
        runner.invoke(app, ["loans", "issue", "001", "Fulano", "--date", old])

        result = runner.invoke(app, ["loans", "late"])

        assert result.exit_code == 0
        assert "Late Loans" in result.stdout
        assert "1 loan(s) older than 4 day(s)" in result.stdout

    def test_late_none(self, runner: CliRunner):
        result = runner.invoke(app, ["loans", "late"])
        assert result.exit_code == 0
        assert "No late loans" in result.stdout


class TestSweepCommand:
    """Tests for the sweep command."""

    def test_sweep_no_late_loans(self, runner: CliRunner):
        add_book(runner)
        runner.invoke(app, ["loans", "issue", "001", "Fulano"])

        result = runner.invoke(app, ["sweep"])

        assert result.exit_code == 0
        assert "No late loans, nothing sent." in result.stdout

    def test_sweep_send_failure(self, runner: CliRunner, monkeypatch):
        """Test an unreachable SMTP server gives a non-zero exit."""
        monkeypatch.setenv("LIBRARY_SMTP_HOST", "127.0.0.1")
        monkeypatch.setenv("LIBRARY_SMTP_PORT", "1")
        add_book(runner)
        old = (date.today() - timedelta(days=10)).isoformat()
        runner.invoke(app, ["loans", "issue", "001", "fulano@email.com", "--date", old])

        result = runner.invoke(app, ["sweep"])

        assert result.exit_code == 1
        assert "not sent" in result.stdout
