# core/services/audit.py
from __future__ import annotations

from core.models import ActivityLog


def log_activity(user, action: str, details: str | None = None) -> ActivityLog:
    if user is not None and not getattr(user, "is_authenticated", False):
        user = None
    return ActivityLog.objects.create(user=user, action=action, details=details)
