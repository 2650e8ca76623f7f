from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import (
    ActivityLog, EventPayment, Expense, Floor, MaintenanceEvent,
    MonthlyDueConfig, MonthlyPayment, SystemBalance,
)
from .services import events as event_service

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "is_active", "is_staff", "date_joined"]


class FloorSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="__str__", read_only=True)

    class Meta:
        model = Floor
        fields = ["id", "floor_number", "name"]


class MaintenanceEventSerializer(serializers.ModelSerializer):
    collected_amount = serializers.SerializerMethodField()

    class Meta:
        model = MaintenanceEvent
        fields = [
            "id", "name", "description", "total_cost", "cost_per_floor",
            "date", "status", "collected_amount",
        ]
        read_only_fields = ["id", "cost_per_floor", "collected_amount"]

    def validate(self, data):
        if self.instance is None:
            if data.get("status", MaintenanceEvent.OPEN) != MaintenanceEvent.OPEN:
                raise serializers.ValidationError({"status": "New events are always open."})
        elif "date" in data and data["date"] != self.instance.date:
            raise serializers.ValidationError({"date": "The date of an event cannot be changed."})
        return data

    def get_collected_amount(self, obj):
        # list views annotate the sum; single objects compute it
        value = getattr(obj, "collected_amount", None)
        if value is None:
            value = event_service.get_collected_amount(obj)
        return str(value)


class MonthlyPaymentSerializer(serializers.ModelSerializer):
    floor_name = serializers.CharField(source="floor.__str__", read_only=True)

    class Meta:
        model = MonthlyPayment
        fields = [
            "id", "floor", "floor_name", "month", "amount_paid",
            "payment_date", "remaining_amount", "is_complete",
        ]
        read_only_fields = ["id", "payment_date", "remaining_amount", "is_complete"]

    def validate(self, data):
        if self.instance and "floor" in data and data["floor"] != self.instance.floor:
            raise serializers.ValidationError({"floor": "The floor of a payment cannot be changed."})
        return data


class EventPaymentSerializer(serializers.ModelSerializer):
    floor_name = serializers.CharField(source="floor.__str__", read_only=True)
    event_name = serializers.CharField(source="event.name", read_only=True)

    class Meta:
        model = EventPayment
        fields = [
            "id", "event", "event_name", "floor", "floor_name", "amount_paid",
            "payment_date", "remaining_amount", "is_complete",
        ]
        read_only_fields = ["id", "payment_date", "remaining_amount", "is_complete"]

    def validate(self, data):
        if self.instance:
            for field in ("event", "floor"):
                if field in data and data[field] != getattr(self.instance, field):
                    raise serializers.ValidationError({field: "This field cannot be changed."})
        return data


class ExpenseSerializer(serializers.ModelSerializer):
    event_name = serializers.CharField(source="event.name", read_only=True, allow_null=True)

    class Meta:
        model = Expense
        fields = ["id", "type", "event", "event_name", "description", "amount", "date", "paid_through"]
        read_only_fields = ["id", "date"]

    def validate(self, data):
        if self.instance:
            for field in ("type", "event"):
                if field in data and data[field] != getattr(self.instance, field):
                    raise serializers.ValidationError({field: "This field cannot be changed."})
        return data


class SystemBalanceSerializer(serializers.ModelSerializer):
    class Meta:
        model = SystemBalance
        fields = ["total_balance", "last_updated"]
        read_only_fields = fields


class MonthlyDueConfigSerializer(serializers.ModelSerializer):
    required = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)

    class Meta:
        model = MonthlyDueConfig
        fields = ["required"]


class ActivityLogSerializer(serializers.ModelSerializer):
    user_username = serializers.CharField(source="user.username", read_only=True, allow_null=True)

    class Meta:
        model = ActivityLog
        fields = ["id", "user", "user_username", "action", "timestamp", "details"]
        read_only_fields = fields


# --- Serializers that only compose report responses ---

class FloorStatusSerializer(serializers.Serializer):
    floor = serializers.IntegerField()
    floor_number = serializers.IntegerField()
    floor_name = serializers.CharField()
    has_paid = serializers.BooleanField(required=False)
    amount_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    remaining_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    is_complete = serializers.BooleanField()
    last_payment_date = serializers.DateTimeField(allow_null=True)


class RecentPaymentSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    type = serializers.CharField()
    floor = serializers.IntegerField()
    floor_name = serializers.CharField()
    month = serializers.CharField(required=False)
    event = serializers.IntegerField(required=False)
    event_name = serializers.CharField(required=False)
    amount_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_date = serializers.DateTimeField()


class RecentExpenseSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    type = serializers.CharField()
    event = serializers.IntegerField(allow_null=True)
    description = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_through = serializers.CharField()
    date = serializers.DateTimeField()


class FinancialSummarySerializer(serializers.Serializer):
    total_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    last_updated = serializers.DateTimeField(allow_null=True)
    monthly_required = serializers.DecimalField(max_digits=14, decimal_places=2)
    monthly_collected = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=14, decimal_places=2)
    open_events = serializers.IntegerField()
    recent_payments = RecentPaymentSerializer(many=True)
    recent_expenses = RecentExpenseSerializer(many=True)
