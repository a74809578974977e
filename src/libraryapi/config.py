"""Configuration management for libraryapi.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

SMTP_SECURITY_MODES = ("starttls", "ssl", "none")


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path

    # Lending
    late_loan_days: int

    # Mail
    mail_from: str
    mail_subject: str
    smtp_host: str
    smtp_port: int
    smtp_username: Optional[str]
    smtp_password: Optional[str]
    smtp_security: str

    # Sweep
    sweep_interval: int  # seconds

    # Logging
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get(
            "LIBRARY_DB_PATH",
            str(Path.home() / ".libraryapi" / "library.db"),
        )
        db_path = Path(db_path_str) if db_path_str == ":memory:" else Path(db_path_str).expanduser()

        return cls(
            db_path=db_path,
            late_loan_days=int(os.environ.get("LIBRARY_LATE_LOAN_DAYS", "4")),
            mail_from=os.environ.get("LIBRARY_MAIL_FROM", "mail@library-api.com"),
            mail_subject=os.environ.get("LIBRARY_MAIL_SUBJECT", "Book with overdue loan"),
            smtp_host=os.environ.get("LIBRARY_SMTP_HOST", "localhost"),
            smtp_port=int(os.environ.get("LIBRARY_SMTP_PORT", "25")),
            smtp_username=os.environ.get("LIBRARY_SMTP_USERNAME"),
            smtp_password=os.environ.get("LIBRARY_SMTP_PASSWORD"),
            smtp_security=os.environ.get("LIBRARY_SMTP_SECURITY", "none").strip().lower(),
            sweep_interval=int(os.environ.get("LIBRARY_SWEEP_INTERVAL", "86400")),
            log_level=os.environ.get("LIBRARY_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.late_loan_days < 0:
            errors.append("LIBRARY_LATE_LOAN_DAYS must not be negative")

        if self.sweep_interval <= 0:
            errors.append("LIBRARY_SWEEP_INTERVAL must be a positive number of seconds")

        if self.smtp_security not in SMTP_SECURITY_MODES:
            errors.append(
                f"LIBRARY_SMTP_SECURITY must be one of {', '.join(SMTP_SECURITY_MODES)}"
            )

        # Check database directory is writable
        if str(self.db_path) != ":memory:" and not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        return errors

    def has_smtp_credentials(self) -> bool:
        """Check if SMTP login credentials are present."""
        return bool(self.smtp_username and self.smtp_password)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
