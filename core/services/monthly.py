# core/services/monthly.py
from __future__ import annotations
import logging
import re
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum

from core.exceptions import LedgerValidationError, OverpaymentError
from core.models import ZERO, Floor, MonthlyDueConfig, MonthlyPayment
from core.services.audit import log_activity
from core.services.balance import apply_credit, lock_balance
from core.services.money import positive_money

logger = logging.getLogger(__name__)

MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def parse_month(value) -> str:
    month = (value or "").strip() if isinstance(value, str) else ""
    if not MONTH_RE.match(month):
        raise LedgerValidationError("month must be 'YYYY-MM'", details={"field": "month"})
    return month


def get_required() -> Decimal:
    config = MonthlyDueConfig.objects.filter(pk=1).first()
    return config.required if config else ZERO


def payments_for(floor: Floor, month: str):
    return MonthlyPayment.objects.filter(floor=floor, month=month)


def get_remaining(floor: Floor, month: str) -> Decimal:
    # the most recently written record carries the residual for the key
    latest = payments_for(floor, month).order_by("-id").first()
    if latest is not None:
        return latest.remaining_amount
    return get_required()


@transaction.atomic
def record_payment(floor: Floor, month: str, amount, user=None) -> MonthlyPayment:
    month = parse_month(month)
    amount = positive_money(amount)

    lock_balance()
    remaining = get_remaining(floor, month)
    if amount > remaining:
        logger.warning("Rejected monthly payment of %s for %s %s, remaining %s", amount, floor, month, remaining)
        raise OverpaymentError(required=remaining, attempted=amount, details={"floor": floor.pk, "month": month})

    new_remaining = remaining - amount
    payment = MonthlyPayment.objects.create(
        floor=floor,
        month=month,
        amount_paid=amount,
        remaining_amount=new_remaining,
        is_complete=new_remaining <= 0,
    )
    apply_credit(amount)
    log_activity(user, "MONTHLY_PAYMENT_RECORDED", f"{floor} {month}: {amount}")
    return payment


def total_collected() -> Decimal:
    return MonthlyPayment.objects.aggregate(s=Sum("amount_paid"))["s"] or ZERO


def month_status(month: str) -> list[dict]:
    """Per-floor view of one month's dues, ordered by floor number."""
    month = parse_month(month)
    required = get_required()

    by_floor: dict[int, list[MonthlyPayment]] = {}
    for payment in MonthlyPayment.objects.filter(month=month).order_by("id"):
        by_floor.setdefault(payment.floor_id, []).append(payment)

    rows = []
    for floor in Floor.objects.all():
        records = by_floor.get(floor.pk, [])
        latest = records[-1] if records else None
        rows.append({
            "floor": floor.pk,
            "floor_number": floor.floor_number,
            "floor_name": str(floor),
            "has_paid": bool(records),
            "amount_paid": sum((p.amount_paid for p in records), ZERO),
            "remaining_amount": latest.remaining_amount if latest else required,
            "is_complete": latest.is_complete if latest else False,
            "last_payment_date": latest.payment_date if latest else None,
        })
    return rows
