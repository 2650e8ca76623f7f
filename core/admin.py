from django.contrib import admin
from .models import (
    ActivityLog, EventPayment, Expense, Floor, MaintenanceEvent,
    MonthlyDueConfig, MonthlyPayment, SystemBalance,
)


class LedgerReadOnlyAdmin(admin.ModelAdmin):
    """
    Ledger records change the balance, so they are only written through the API services.
    """
    def has_add_permission(self, request): return False
    def has_change_permission(self, request, obj=None): return False
    def has_delete_permission(self, request, obj=None): return False


@admin.register(Floor)
class FloorAdmin(admin.ModelAdmin):
    list_display = ("id", "floor_number", "__str__")

@admin.register(MonthlyDueConfig)
class MonthlyDueConfigAdmin(admin.ModelAdmin):
    list_display = ("id", "required")
    def has_add_permission(self, request): return not MonthlyDueConfig.objects.exists()
    def has_delete_permission(self, request, obj=None): return False

@admin.register(MaintenanceEvent)
class MaintenanceEventAdmin(LedgerReadOnlyAdmin):
    list_display = ("id", "name", "total_cost", "cost_per_floor", "date", "status")
    list_filter = ("status",)
    search_fields = ("name", "description")

@admin.register(MonthlyPayment)
class MonthlyPaymentAdmin(LedgerReadOnlyAdmin):
    list_display = ("id", "floor", "month", "amount_paid", "remaining_amount", "is_complete", "payment_date")
    list_filter = ("month", "is_complete")

@admin.register(EventPayment)
class EventPaymentAdmin(LedgerReadOnlyAdmin):
    list_display = ("id", "event", "floor", "amount_paid", "remaining_amount", "is_complete", "payment_date")
    list_filter = ("event", "is_complete")

@admin.register(Expense)
class ExpenseAdmin(LedgerReadOnlyAdmin):
    list_display = ("id", "type", "event", "description", "amount", "paid_through", "date")
    list_filter = ("type", "paid_through")
    search_fields = ("description",)

@admin.register(SystemBalance)
class SystemBalanceAdmin(LedgerReadOnlyAdmin):
    list_display = ("id", "total_balance", "last_updated")

@admin.register(ActivityLog)
class ActivityLogAdmin(LedgerReadOnlyAdmin):
    list_display = ("timestamp", "user", "action", "details")
    list_filter = ("action",)
    search_fields = ("user__username", "details")
