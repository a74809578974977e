"""Pydantic schemas for book lending."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


def _strip(v):
    if isinstance(v, str):
        return v.strip()
    return v


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class LoanStatus(str, Enum):
    """Status of a loan."""

    ACTIVE = "active"
    RETURNED = "returned"


class LoanCreate(BaseModel):
    """Schema for issuing a loan."""

    book_id: int
    customer: str = Field(..., min_length=1, max_length=200)
    customer_email: Optional[EmailStr] = None
    loan_date: Optional[date] = None

    @field_validator("customer", mode="before")
    @classmethod
    def strip_customer(cls, v):
        """Strip surrounding whitespace so blank customers fail min_length."""
        return _strip(v)

    @field_validator("customer_email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        return _blank_to_none(v)


class LoanRequest(BaseModel):
    """Loan issuance request addressed by isbn, as sent to the API."""

    isbn: str = Field(..., min_length=1, max_length=20)
    customer: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None

    @field_validator("isbn", "customer", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return _strip(v)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        return _blank_to_none(v)


class LoanUpdate(BaseModel):
    """Schema for updating a loan.

    Only the returned flag can change after issuance.
    """

    returned: bool

    model_config = {"extra": "forbid"}


class LoanFilter(BaseModel):
    """Loan search filter.

    ``isbn`` is an exact match on the loaned book, ``customer`` a
    case-insensitive substring match. When both are set either may match.
    """

    isbn: Optional[str] = None
    customer: Optional[str] = None


class LoanResponse(BaseModel):
    """Schema for loan responses."""

    id: int
    book_id: int
    isbn: str
    customer: str
    customer_email: Optional[str]
    loan_date: date
    returned: bool
    status: LoanStatus

    @classmethod
    def from_loan(cls, loan) -> "LoanResponse":
        return cls(
            id=loan.id,
            book_id=loan.book_id,
            isbn=loan.book.isbn,
            customer=loan.customer,
            customer_email=loan.customer_email,
            loan_date=date.fromisoformat(loan.loan_date),
            returned=loan.returned,
            status=LoanStatus.RETURNED if loan.returned else LoanStatus.ACTIVE,
        )
