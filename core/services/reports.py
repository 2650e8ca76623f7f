# core/services/reports.py
from __future__ import annotations

from django.db.models import Sum

from core.models import ZERO, EventPayment, Expense, MaintenanceEvent, MonthlyPayment
from core.services import monthly
from core.services.balance import get_balance


def recent_payments(limit: int = 5) -> list[dict]:
    """Monthly and event payments merged, newest first."""
    rows = [
        {
            "id": p.pk,
            "type": "monthly",
            "floor": p.floor_id,
            "floor_name": str(p.floor),
            "month": p.month,
            "amount_paid": p.amount_paid,
            "payment_date": p.payment_date,
        }
        for p in MonthlyPayment.objects.select_related("floor").order_by("-payment_date", "-id")[:limit]
    ]
    rows += [
        {
            "id": p.pk,
            "type": "event",
            "floor": p.floor_id,
            "floor_name": str(p.floor),
            "event": p.event_id,
            "event_name": p.event.name,
            "amount_paid": p.amount_paid,
            "payment_date": p.payment_date,
        }
        for p in EventPayment.objects.select_related("floor", "event").order_by("-payment_date", "-id")[:limit]
    ]
    rows.sort(key=lambda row: row["payment_date"], reverse=True)
    return rows[:limit]


def recent_expenses(limit: int = 5) -> list[dict]:
    return [
        {
            "id": e.pk,
            "type": e.type,
            "event": e.event_id,
            "description": e.description,
            "amount": e.amount,
            "paid_through": e.paid_through,
            "date": e.date,
        }
        for e in Expense.objects.order_by("-date", "-id")[:limit]
    ]


def financial_summary(limit: int = 5) -> dict:
    balance = get_balance()
    return {
        "total_balance": balance.total_balance,
        "last_updated": balance.last_updated,
        "monthly_required": monthly.get_required(),
        "monthly_collected": monthly.total_collected(),
        "total_expenses": Expense.objects.aggregate(s=Sum("amount"))["s"] or ZERO,
        "open_events": MaintenanceEvent.objects.filter(status=MaintenanceEvent.OPEN).count(),
        "recent_payments": recent_payments(limit),
        "recent_expenses": recent_expenses(limit),
    }
