"""
Maintenance events: cost allocation, per-floor payments and cascading delete.

An event's cost is split evenly across the building's floors with ceiling
rounding, so ``cost_per_floor * floor_count >= total_cost``. Each floor pays
its share through one or more ``EventPayment`` records, exactly like monthly
dues but keyed by (event, floor).

Deleting an event removes its payments and expenses and reverses their
effect on the shared balance in the same transaction.
"""

from __future__ import annotations

import logging
from decimal import ROUND_CEILING, Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from core.exceptions import EventClosed, LedgerValidationError, OverpaymentError
from core.models import ZERO, EventPayment, Expense, Floor, MaintenanceEvent
from core.services.audit import log_activity
from core.services.balance import apply_credit, apply_delta, lock_balance
from core.services.money import CENT, positive_money, required_text

logger = logging.getLogger(__name__)


def allocate_cost(total_cost: Decimal, floor_count: int) -> Decimal:
    """
    Split ``total_cost`` across ``floor_count`` floors, rounding up.

    Example:
        allocate_cost(Decimal("1000"), 7)  # Decimal("143.00")
    """
    if floor_count <= 0:
        raise LedgerValidationError("No floors are registered for the building", details={"field": "floors"})
    share = (total_cost / Decimal(floor_count)).to_integral_value(rounding=ROUND_CEILING)
    return share.quantize(CENT)


def _validate_status(value) -> str:
    statuses = {choice for choice, _ in MaintenanceEvent.STATUS_CHOICES}
    if value not in statuses:
        raise LedgerValidationError(f"status must be one of {sorted(statuses)}", details={"field": "status"})
    return value


@transaction.atomic
def create_event(name, description, total_cost, date=None, user=None) -> MaintenanceEvent:
    name = required_text(name, "name")
    description = required_text(description, "description")
    total_cost = positive_money(total_cost, "total_cost")

    event = MaintenanceEvent.objects.create(
        name=name,
        description=description,
        total_cost=total_cost,
        cost_per_floor=allocate_cost(total_cost, Floor.objects.count()),
        date=date or timezone.now(),
        status=MaintenanceEvent.OPEN,
    )
    logger.info("Created event %s with cost %s (%s per floor)", event.pk, total_cost, event.cost_per_floor)
    log_activity(user, "EVENT_CREATED", f"{event.name}: {total_cost}")
    return event


@transaction.atomic
def edit_event(event: MaintenanceEvent, name, description, total_cost, status, user=None) -> MaintenanceEvent:
    """
    Update an event and recompute its per-floor share.

    Payment records already written for the event keep the remaining
    amounts they were written with.
    """
    event.name = required_text(name, "name")
    event.description = required_text(description, "description")
    event.total_cost = positive_money(total_cost, "total_cost")
    event.status = _validate_status(status)
    event.cost_per_floor = allocate_cost(event.total_cost, Floor.objects.count())
    event.save(update_fields=["name", "description", "total_cost", "cost_per_floor", "status"])
    log_activity(user, "EVENT_UPDATED", f"{event.name}: {event.total_cost} ({event.status})")
    return event


def payments_for(event: MaintenanceEvent, floor: Floor):
    return EventPayment.objects.filter(event=event, floor=floor)


def get_remaining(event: MaintenanceEvent, floor: Floor) -> Decimal:
    latest = payments_for(event, floor).order_by("-id").first()
    if latest is not None:
        return latest.remaining_amount
    return event.cost_per_floor


def _latest_by_floor(event: MaintenanceEvent) -> dict[int, list[EventPayment]]:
    by_floor: dict[int, list[EventPayment]] = {}
    for payment in EventPayment.objects.filter(event=event).order_by("id"):
        by_floor.setdefault(payment.floor_id, []).append(payment)
    return by_floor


def payable_floors(event: MaintenanceEvent) -> list[Floor]:
    """Floors that still owe something for this event."""
    by_floor = _latest_by_floor(event)
    floors = []
    for floor in Floor.objects.all():
        records = by_floor.get(floor.pk)
        remaining = records[-1].remaining_amount if records else event.cost_per_floor
        if remaining > 0:
            floors.append(floor)
    return floors


@transaction.atomic
def record_payment(event: MaintenanceEvent, floor: Floor, amount, user=None) -> EventPayment:
    amount = positive_money(amount)
    if event.status != MaintenanceEvent.OPEN:
        raise EventClosed(f"Event '{event.name}' is closed", details={"event": event.pk})

    lock_balance()
    remaining = get_remaining(event, floor)
    if amount > remaining:
        logger.warning("Rejected event payment of %s for %s / %s, remaining %s", amount, event.pk, floor, remaining)
        raise OverpaymentError(required=remaining, attempted=amount, details={"event": event.pk, "floor": floor.pk})

    new_remaining = remaining - amount
    payment = EventPayment.objects.create(
        event=event,
        floor=floor,
        amount_paid=amount,
        remaining_amount=new_remaining,
        is_complete=new_remaining <= 0,
    )
    apply_credit(amount)
    log_activity(user, "EVENT_PAYMENT_RECORDED", f"{event.name} / {floor}: {amount}")
    return payment


def get_collected_amount(event: MaintenanceEvent) -> Decimal:
    return EventPayment.objects.filter(event=event).aggregate(s=Sum("amount_paid"))["s"] or ZERO


def event_status(event: MaintenanceEvent) -> list[dict]:
    by_floor = _latest_by_floor(event)
    rows = []
    for floor in Floor.objects.all():
        records = by_floor.get(floor.pk, [])
        latest = records[-1] if records else None
        rows.append({
            "floor": floor.pk,
            "floor_number": floor.floor_number,
            "floor_name": str(floor),
            "amount_paid": sum((p.amount_paid for p in records), ZERO),
            "remaining_amount": latest.remaining_amount if latest else event.cost_per_floor,
            "is_complete": latest.is_complete if latest else False,
            "last_payment_date": latest.payment_date if latest else None,
        })
    return rows


@transaction.atomic
def delete_event(event: MaintenanceEvent, user=None) -> Decimal:
    """
    Delete an event with all its payments and expenses.

    Payments had credited the balance and expenses had debited it, so the
    balance moves by ``-sum(payments) + sum(expenses)``. The sums are read
    after the balance row is locked and before anything is deleted.

    Returns:
        The adjustment applied to the balance
    """
    lock_balance()
    payments = EventPayment.objects.filter(event=event)
    expenses = Expense.objects.filter(type=Expense.EVENT, event=event)

    paid = payments.aggregate(s=Sum("amount_paid"))["s"] or ZERO
    spent = expenses.aggregate(s=Sum("amount"))["s"] or ZERO
    adjustment = -paid + spent

    payments.delete()
    expenses.delete()
    name = event.name
    event.delete()

    if adjustment:
        apply_delta(adjustment)
    logger.info("Deleted event '%s': payments %s, expenses %s", name, paid, spent)
    log_activity(user, "EVENT_DELETED", f"{name}: balance adjusted by {adjustment}")
    return adjustment
