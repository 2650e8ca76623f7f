"""
Ledger exceptions.

Every rule the ledger enforces (amount ceilings, required fields, open
events) is reported with one of these before anything is written.

Exception Hierarchy:
    LedgerError (base)
    ├── LedgerValidationError - Missing fields, non-positive amounts, bad months
    ├── OverpaymentError - Payment larger than what is still owed for its key
    ├── InsufficientBalance - Expense larger than the available balance
    ├── EventClosed - Payment or expense against a closed event
    └── RecordNotFound - Floor, event or payment lookup failures

Usage:
    from core.exceptions import OverpaymentError

    if amount > remaining:
        raise OverpaymentError(required=remaining, attempted=amount)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler


class LedgerError(Exception):
    """
    Base exception for all ledger operations.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context
    """

    default_error_code: str = "LEDGER_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class LedgerValidationError(LedgerError):
    default_error_code: str = "VALIDATION_ERROR"


class OverpaymentError(LedgerError):
    """
    Raised when a payment exceeds the amount still owed for its key.

    Attributes:
        required: Amount still owed for the (floor, month) or (event, floor) key
        attempted: Amount that was submitted
    """

    default_error_code: str = "OVERPAYMENT"

    def __init__(self, required: Decimal, attempted: Decimal, details: dict[str, Any] | None = None):
        self.required = required
        self.attempted = attempted
        full_details = {"remaining": str(required), "attempted": str(attempted)}
        if details:
            full_details.update(details)
        super().__init__(
            message=f"Amount {attempted} exceeds the remaining amount {required}",
            details=full_details,
        )


class InsufficientBalance(LedgerError):
    """
    Raised when an expense would take the shared balance below zero.

    Attributes:
        required: Amount the expense needs
        available: Balance at the time of the check
    """

    default_error_code: str = "INSUFFICIENT_BALANCE"

    def __init__(self, required: Decimal, available: Decimal):
        self.required = required
        self.available = available
        super().__init__(
            message=f"Amount {required} exceeds the available balance {available}",
            details={"required": str(required), "available": str(available)},
        )


class EventClosed(LedgerError):
    default_error_code: str = "EVENT_CLOSED"


class RecordNotFound(LedgerError):
    default_error_code: str = "NOT_FOUND"
    status_code: int = status.HTTP_404_NOT_FOUND


def ledger_exception_handler(exc, context):
    """Render LedgerError subclasses the same way DRF renders its own errors."""
    if isinstance(exc, LedgerError):
        return Response(exc.to_dict(), status=exc.status_code)
    return exception_handler(exc, context)
