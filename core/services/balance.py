"""
Balance mutation primitives for the association's shared balance.

Every payment credits the singleton ``SystemBalance`` row and every expense
debits it. All writes go through ``apply_delta`` which locks the row with
``select_for_update()``, so two admins submitting at the same time are
serialised instead of overwriting each other's update.

Callers that also write a payment or expense record wrap both writes in one
``transaction.atomic()`` block; if either fails, neither is committed.

Usage:
    from core.services.balance import apply_credit, apply_debit

    with transaction.atomic():
        MonthlyPayment.objects.create(...)
        apply_credit(amount)
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum

from core.exceptions import InsufficientBalance
from core.models import ZERO, EventPayment, Expense, MonthlyPayment, SystemBalance
from core.services.money import positive_money, to_money

logger = logging.getLogger(__name__)


def get_balance() -> SystemBalance:
    """Return the balance singleton; a missing row counts as a zero balance."""
    return SystemBalance.load()


@transaction.atomic
def lock_balance() -> SystemBalance:
    """
    Lock the balance row for the rest of the enclosing transaction.

    Creates the row first when it does not exist yet.
    """
    SystemBalance.objects.get_or_create(pk=1)
    return SystemBalance.objects.select_for_update().get(pk=1)


@transaction.atomic
def apply_delta(signed_amount) -> Decimal:
    """
    Add ``signed_amount`` (positive or negative) to the balance.

    Used directly by edit/delete reconciliation. Returns the new balance.
    """
    amount = to_money(signed_amount)
    balance = lock_balance()
    balance.total_balance = balance.total_balance + amount
    balance.save(update_fields=["total_balance", "last_updated"])
    logger.info("Balance changed by %s, now %s", amount, balance.total_balance)
    return balance.total_balance


def apply_credit(amount) -> Decimal:
    """Credit a payment's amount to the balance."""
    return apply_delta(positive_money(amount))


@transaction.atomic
def apply_debit(amount) -> Decimal:
    """
    Debit an expense's amount from the balance.

    Raises:
        InsufficientBalance: If the amount is larger than the balance
    """
    amount = positive_money(amount)
    balance = lock_balance()
    if amount > balance.total_balance:
        logger.warning("Rejected debit of %s, balance is %s", amount, balance.total_balance)
        raise InsufficientBalance(required=amount, available=balance.total_balance)
    return apply_delta(-amount)


def reconstruct_balance() -> Decimal:
    """Replay live records: all payments minus all expenses."""
    monthly = MonthlyPayment.objects.aggregate(s=Sum("amount_paid"))["s"] or ZERO
    events = EventPayment.objects.aggregate(s=Sum("amount_paid"))["s"] or ZERO
    expenses = Expense.objects.aggregate(s=Sum("amount"))["s"] or ZERO
    return monthly + events - expenses


def audit_balance() -> dict:
    stored = get_balance().total_balance
    reconstructed = reconstruct_balance()
    return {
        "stored": stored,
        "reconstructed": reconstructed,
        "drift": stored - reconstructed,
    }


@transaction.atomic
def reconcile_balance() -> dict:
    """Overwrite the stored balance with the value replayed from live records."""
    balance = lock_balance()
    before = balance.total_balance
    balance.total_balance = reconstruct_balance()
    balance.save(update_fields=["total_balance", "last_updated"])
    if before != balance.total_balance:
        logger.warning("Balance reconciled from %s to %s", before, balance.total_balance)
    return {"stored": before, "reconstructed": balance.total_balance, "drift": before - balance.total_balance}
