"""Book lending module.

Provides functionality for:
- Issuing loans, at most one outstanding loan per book
- Returning loans
- Searching loans by isbn or customer
- Finding overdue loans
"""

from .manager import LoanLedger
from .models import Loan
from .schemas import (
    LoanCreate,
    LoanFilter,
    LoanRequest,
    LoanResponse,
    LoanStatus,
    LoanUpdate,
)

__all__ = [
    "LoanLedger",
    "Loan",
    "LoanCreate",
    "LoanFilter",
    "LoanRequest",
    "LoanResponse",
    "LoanStatus",
    "LoanUpdate",
]
