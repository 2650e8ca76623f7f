"""
Edit and delete reconciliation for payment records.

A payment already credited the balance when it was recorded, so changing or
removing it applies only the difference:

    edit:   balance += new_amount - old_amount
    delete: balance -= old_amount

``old_amount`` is always re-read from the database under lock, never taken
from the client.

Payments of one key ((floor, month) for dues, (event, floor) for events)
form a sequence whose last ``remaining_amount`` is what the floor still
owes. After an edit or delete the sequence is re-derived from the key's
locked-in required amount: the amount implied by its first record
(``amount_paid + remaining_amount``). A later change to the monthly due or
to an event's cost does not rewrite existing keys.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction

from core.exceptions import LedgerValidationError, OverpaymentError, RecordNotFound
from core.models import EventPayment, MonthlyPayment
from core.services import monthly
from core.services.audit import log_activity
from core.services.balance import apply_delta, lock_balance
from core.services.money import positive_money

logger = logging.getLogger(__name__)

Payment = MonthlyPayment | EventPayment


def key_queryset(payment: Payment, month: str | None = None):
    if isinstance(payment, MonthlyPayment):
        return MonthlyPayment.objects.filter(floor_id=payment.floor_id, month=month or payment.month)
    return EventPayment.objects.filter(event_id=payment.event_id, floor_id=payment.floor_id)


def required_for(records, payment: Payment) -> Decimal:
    first = records.order_by("id").first()
    if first is not None:
        return first.amount_paid + first.remaining_amount
    if isinstance(payment, MonthlyPayment):
        return monthly.get_required()
    return payment.event.cost_per_floor


def resequence(records, required: Decimal) -> None:
    remaining = required
    for record in records.order_by("id"):
        remaining -= record.amount_paid
        complete = remaining <= 0
        if record.remaining_amount != remaining or record.is_complete != complete:
            record.remaining_amount = remaining
            record.is_complete = complete
            record.save(update_fields=["remaining_amount", "is_complete"])


def _locked(payment: Payment) -> Payment:
    model = type(payment)
    try:
        return model.objects.select_for_update().get(pk=payment.pk)
    except model.DoesNotExist:
        raise RecordNotFound(f"Payment {payment.pk} not found", details={"payment": payment.pk})


def _action_name(payment: Payment, verb: str) -> str:
    prefix = "MONTHLY" if isinstance(payment, MonthlyPayment) else "EVENT"
    return f"{prefix}_PAYMENT_{verb}"


@transaction.atomic
def edit_payment(payment: Payment, new_amount, new_month=None, user=None) -> Payment:
    """
    Change a payment's amount (and, for monthly dues, its month).

    A ``new_amount`` of None keeps the stored amount.

    Raises:
        OverpaymentError: If the key's payments would exceed its required amount
    """
    if new_amount is not None:
        new_amount = positive_money(new_amount)
    lock_balance()
    current = _locked(payment)
    old_amount = current.amount_paid
    if new_amount is None:
        new_amount = old_amount

    old_records = key_queryset(current)
    old_required = required_for(old_records, current)

    target_month = None
    if new_month is not None:
        if not isinstance(current, MonthlyPayment):
            raise LedgerValidationError("only monthly payments have a month", details={"field": "month"})
        target_month = monthly.parse_month(new_month)

    moving = target_month is not None and target_month != current.month
    if moving:
        new_records = key_queryset(current, month=target_month)
        new_required = required_for(new_records, current)
    else:
        new_records, new_required = old_records, old_required

    others = sum((r.amount_paid for r in new_records.exclude(pk=current.pk)), Decimal("0"))
    if others + new_amount > new_required:
        logger.warning("Rejected payment edit %s -> %s for payment %s", old_amount, new_amount, current.pk)
        raise OverpaymentError(required=new_required - others, attempted=new_amount, details={"payment": current.pk})

    current.amount_paid = new_amount
    fields = ["amount_paid"]
    if moving:
        current.month = target_month
        fields.append("month")
    current.save(update_fields=fields)

    resequence(old_records, old_required)
    if moving:
        resequence(new_records, new_required)

    delta = new_amount - old_amount
    if delta:
        apply_delta(delta)
    log_activity(user, _action_name(current, "UPDATED"), f"Payment {current.pk}: {old_amount} -> {new_amount}")
    current.refresh_from_db()
    return current


@transaction.atomic
def delete_payment(payment: Payment, user=None) -> Decimal:
    """
    Delete a payment and take its credit back out of the balance.

    Returns:
        The amount removed from the balance
    """
    lock_balance()
    current = _locked(payment)
    records = key_queryset(current)
    required = required_for(records, current)
    old_amount = current.amount_paid
    pk = current.pk

    current.delete()
    resequence(records, required)
    apply_delta(-old_amount)
    log_activity(user, _action_name(payment, "DELETED"), f"Payment {pk}: {old_amount}")
    return old_amount
