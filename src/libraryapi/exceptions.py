"""
Exception classes for the library domain.

Business rule violations are raised before any write happens; the HTTP and
CLI layers translate them into 404/400 responses or a non-zero exit code.
"""


class LibraryError(Exception):
    """Base exception for all library errors"""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(LibraryError):
    """Raised when a requested book or loan does not exist"""

    def __init__(self, entity: str, entity_id, message: str | None = None):
        details = {"entity": entity, "id": entity_id}
        msg = message or f"{entity} not found: {entity_id}"
        super().__init__(msg, details)


class BusinessError(LibraryError):
    """Raised when an operation would break a lending rule"""


class ConflictError(BusinessError):
    """Raised when a write collides with an existing record"""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, details)


class TransportError(LibraryError):
    """Raised when the mail transport rejects a send"""

    def __init__(self, message: str, recipients: list[str] | None = None):
        details = {"recipients": list(recipients or [])}
        super().__init__(message, details)
