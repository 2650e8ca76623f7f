# core/services/money.py
from __future__ import annotations
from decimal import Decimal, InvalidOperation

from core.exceptions import LedgerValidationError

CENT = Decimal("0.01")
# largest value a DecimalField(max_digits=12, decimal_places=2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


def to_money(value, field: str = "amount") -> Decimal:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise LedgerValidationError(f"{field} is required", details={"field": field})
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            raise InvalidOperation
        if abs(amount) > MAX_AMOUNT:
            raise LedgerValidationError(f"{field} must not exceed {MAX_AMOUNT}", details={"field": field})
        quantized = amount.quantize(CENT)
    except (InvalidOperation, ValueError):
        raise LedgerValidationError(f"{field} must be a number", details={"field": field})
    if quantized != amount:
        raise LedgerValidationError(f"{field} must have at most 2 decimal places", details={"field": field})
    return quantized


def positive_money(value, field: str = "amount") -> Decimal:
    amount = to_money(value, field)
    if amount <= 0:
        raise LedgerValidationError(f"{field} must be greater than zero", details={"field": field})
    return amount


def required_text(value, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise LedgerValidationError(f"{field} is required", details={"field": field})
    return text
