# core/services/expenses.py
from __future__ import annotations
import logging
from decimal import Decimal

from django.db import transaction

from core.exceptions import EventClosed, InsufficientBalance, LedgerValidationError, RecordNotFound
from core.models import Expense, MaintenanceEvent
from core.services.audit import log_activity
from core.services.balance import apply_debit, apply_delta, lock_balance
from core.services.money import positive_money, required_text

logger = logging.getLogger(__name__)


def _choice(value, choices, field: str) -> str:
    allowed = [choice for choice, _ in choices]
    if value not in allowed:
        raise LedgerValidationError(f"{field} must be one of {allowed}", details={"field": field})
    return value


@transaction.atomic
def record_expense(expense_type, description, amount, paid_through=Expense.CASH, event: MaintenanceEvent | None = None, user=None) -> Expense:
    """
    Record an expense and debit it from the balance.

    Monthly and event expenses both come out of the same balance; an event
    expense must name an open event and a monthly one must not name any.
    """
    expense_type = _choice(expense_type, Expense.TYPE_CHOICES, "type")
    paid_through = _choice(paid_through, Expense.PAID_THROUGH_CHOICES, "paid_through")
    description = required_text(description, "description")
    amount = positive_money(amount)

    if expense_type == Expense.EVENT:
        if event is None:
            raise LedgerValidationError("event is required for event expenses", details={"field": "event"})
        if event.status != MaintenanceEvent.OPEN:
            raise EventClosed(f"Event '{event.name}' is closed", details={"event": event.pk})
    elif event is not None:
        raise LedgerValidationError("monthly expenses cannot reference an event", details={"field": "event"})

    apply_debit(amount)
    expense = Expense.objects.create(
        type=expense_type,
        event=event,
        description=description,
        amount=amount,
        paid_through=paid_through,
    )
    log_activity(user, "EXPENSE_RECORDED", f"{expense.get_type_display()}: {amount}")
    return expense


def _locked(expense: Expense) -> Expense:
    try:
        return Expense.objects.select_for_update().get(pk=expense.pk)
    except Expense.DoesNotExist:
        raise RecordNotFound(f"Expense {expense.pk} not found", details={"expense": expense.pk})


@transaction.atomic
def edit_expense(expense: Expense, new_amount, new_description=None, new_paid_through=None, user=None) -> Expense:
    """
    Change an expense's amount; the balance moves by ``old - new``.

    A ``new_amount`` of None keeps the stored amount.

    Raises:
        InsufficientBalance: If the increase is larger than the balance
    """
    if new_amount is not None:
        new_amount = positive_money(new_amount)
    balance = lock_balance()
    current = _locked(expense)
    old_amount = current.amount
    if new_amount is None:
        new_amount = old_amount

    increase = new_amount - old_amount
    if increase > balance.total_balance:
        logger.warning("Rejected expense edit %s -> %s, balance %s", old_amount, new_amount, balance.total_balance)
        raise InsufficientBalance(required=increase, available=balance.total_balance)

    current.amount = new_amount
    if new_description is not None:
        current.description = required_text(new_description, "description")
    if new_paid_through is not None:
        current.paid_through = _choice(new_paid_through, Expense.PAID_THROUGH_CHOICES, "paid_through")
    current.save(update_fields=["amount", "description", "paid_through"])

    if increase:
        apply_delta(-increase)
    log_activity(user, "EXPENSE_UPDATED", f"Expense {current.pk}: {old_amount} -> {new_amount}")
    return current


@transaction.atomic
def delete_expense(expense: Expense, user=None) -> Decimal:
    """Delete an expense and return its amount to the balance."""
    lock_balance()
    current = _locked(expense)
    old_amount = current.amount
    current.delete()
    apply_delta(old_amount)
    log_activity(user, "EXPENSE_DELETED", f"Expense {expense.pk}: {old_amount}")
    return old_amount
