"""Database module for local SQLite storage."""

from .models import Base, Book
from .pagination import Page, PageRequest
from .schemas import BookCreate, BookFilter, BookResponse, BookUpdate
from .sqlite import Database, get_db, reset_db

__all__ = [
    "Base",
    "Book",
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookFilter",
    "Page",
    "PageRequest",
    "Database",
    "get_db",
    "reset_db",
]
