from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

ZERO = Decimal("0.00")

# --- LEDGER MODELS ---

class Floor(models.Model):
    floor_number = models.PositiveIntegerField(unique=True, help_text="0 is the ground floor")
    class Meta:
        ordering = ["floor_number"]
    def __str__(self): return "Ground floor" if self.floor_number == 0 else f"Floor {self.floor_number}"

class MaintenanceEvent(models.Model):
    OPEN, CLOSED = "open", "closed"
    STATUS_CHOICES = [(OPEN, "Open"), (CLOSED, "Closed")]
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    total_cost = models.DecimalField(max_digits=12, decimal_places=2)
    cost_per_floor = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=6, choices=STATUS_CHOICES, default=OPEN)
    class Meta:
        ordering = ["-date"]
    def __str__(self): return self.name

class MonthlyPayment(models.Model):
    floor = models.ForeignKey(Floor, on_delete=models.PROTECT, related_name="monthly_payments")
    month = models.CharField(max_length=7, help_text="YYYY-MM")
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2)
    payment_date = models.DateTimeField(default=timezone.now)
    remaining_amount = models.DecimalField(max_digits=12, decimal_places=2)
    is_complete = models.BooleanField(default=False)
    class Meta:
        ordering = ["-payment_date", "-id"]
        indexes = [models.Index(fields=["floor", "month"], name="monthly_payment_key_idx")]
    def __str__(self): return f"{self.floor} {self.month} {self.amount_paid}"

class EventPayment(models.Model):
    event = models.ForeignKey(MaintenanceEvent, on_delete=models.PROTECT, related_name="payments")
    floor = models.ForeignKey(Floor, on_delete=models.PROTECT, related_name="event_payments")
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2)
    payment_date = models.DateTimeField(default=timezone.now)
    remaining_amount = models.DecimalField(max_digits=12, decimal_places=2)
    is_complete = models.BooleanField(default=False)
    class Meta:
        ordering = ["-payment_date", "-id"]
        indexes = [models.Index(fields=["event", "floor"], name="event_payment_key_idx")]
    def __str__(self): return f"{self.event} {self.floor} {self.amount_paid}"

class Expense(models.Model):
    MONTHLY, EVENT = "monthly", "event"
    TYPE_CHOICES = [(MONTHLY, "Monthly"), (EVENT, "Event")]
    CASH, BANK = "cash", "bank"
    PAID_THROUGH_CHOICES = [(CASH, "Cash"), (BANK, "Bank")]
    type = models.CharField(max_length=7, choices=TYPE_CHOICES, default=MONTHLY)
    event = models.ForeignKey(MaintenanceEvent, on_delete=models.PROTECT, null=True, blank=True, related_name="expenses")
    description = models.TextField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateTimeField(default=timezone.now)
    paid_through = models.CharField(max_length=4, choices=PAID_THROUGH_CHOICES, default=CASH)
    class Meta:
        ordering = ["-date", "-id"]
    def __str__(self): return f"{self.get_type_display()} {self.amount}"


class SingletonModel(models.Model):
    """Single-row table; the row always has pk=1."""
    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj

class SystemBalance(SingletonModel):
    total_balance = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    last_updated = models.DateTimeField(auto_now=True)
    def __str__(self): return f"Balance {self.total_balance}"

class MonthlyDueConfig(SingletonModel):
    required = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    def __str__(self): return f"Monthly due {self.required}"


class ActivityLog(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=255)
    timestamp = models.DateTimeField(auto_now_add=True)
    details = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ['-timestamp']
    def __str__(self): return f'{self.user} - {self.action} at {self.timestamp.strftime("%Y-%m-%d %H:%M")}'
