# core/views.py

from django.contrib.auth import authenticate, get_user_model
from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .exceptions import LedgerValidationError, RecordNotFound
from .models import (
    ZERO, ActivityLog, EventPayment, Expense, Floor, MaintenanceEvent,
    MonthlyDueConfig, MonthlyPayment,
)
from .permissions import IsAdmin, IsAdminOrReadOnly
from .serializers import (
    ActivityLogSerializer, EventPaymentSerializer, ExpenseSerializer,
    FinancialSummarySerializer, FloorSerializer, FloorStatusSerializer,
    MaintenanceEventSerializer, MonthlyDueConfigSerializer,
    MonthlyPaymentSerializer, SystemBalanceSerializer, UserSerializer,
)
from .services import events as event_service
from .services import expenses as expense_service
from .services import monthly, reconciliation, reports
from .services.audit import log_activity
from .services.balance import get_balance

User = get_user_model()


def _lookup(model, value, field):
    try:
        pk = int(value)
    except (TypeError, ValueError):
        raise LedgerValidationError(f"{field} is required", details={"field": field})
    try:
        return model.objects.get(pk=pk)
    except model.DoesNotExist:
        raise RecordNotFound(f"{field} {pk} not found", details={"field": field})


class LoginView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    def post(self, request):
        data = request.data
        identifier = (data.get("email") or data.get("username") or "").strip()
        password = (data.get("password") or "").strip()
        if not identifier or not password:
            return Response({"detail": "Missing credentials"}, status=status.HTTP_400_BAD_REQUEST)
        user_lookup = {"email__iexact": identifier} if "@" in identifier else {"username__iexact": identifier}
        user_obj = User.objects.filter(**user_lookup).first()
        if not user_obj:
            return Response({"detail": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)
        user = authenticate(request, username=user_obj.username, password=password)
        if not user:
            return Response({"detail": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)
        log_activity(user, "USER_LOGIN_SUCCESS")
        refresh = RefreshToken.for_user(user)
        return Response({"access": str(refresh.access_token), "refresh": str(refresh)})


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    def post(self, request):
        log_activity(request.user, "USER_LOGOUT")
        return Response({"detail": "Logged out."})


class MeViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]
    def list(self, request):
        return Response(UserSerializer(request.user).data)


class FloorViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Floor.objects.all()
    serializer_class = FloorSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None


class MaintenanceEventViewSet(viewsets.ModelViewSet):
    queryset = MaintenanceEvent.objects.annotate(
        collected_amount=Coalesce(
            Sum("payments__amount_paid"), Value(ZERO),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    )
    serializer_class = MaintenanceEventSerializer
    permission_classes = [IsAdminOrReadOnly]
    filterset_fields = ["status"]
    search_fields = ["name", "description"]

    def perform_create(self, serializer):
        data = serializer.validated_data
        serializer.instance = event_service.create_event(
            data.get("name"), data.get("description"), data.get("total_cost"),
            date=data.get("date"), user=self.request.user,
        )

    def perform_update(self, serializer):
        event, data = serializer.instance, serializer.validated_data
        serializer.instance = event_service.edit_event(
            event,
            data.get("name", event.name),
            data.get("description", event.description),
            data.get("total_cost", event.total_cost),
            data.get("status", event.status),
            user=self.request.user,
        )

    def perform_destroy(self, instance):
        event_service.delete_event(instance, user=self.request.user)

    @action(detail=True, methods=["get"], url_path="floor-status")
    def floor_status(self, request, pk=None):
        rows = event_service.event_status(self.get_object())
        return Response(FloorStatusSerializer(rows, many=True).data)

    @action(detail=True, methods=["get"], url_path="payable-floors")
    def payable_floors(self, request, pk=None):
        floors = event_service.payable_floors(self.get_object())
        return Response(FloorSerializer(floors, many=True).data)


class MonthlyPaymentViewSet(viewsets.ModelViewSet):
    queryset = MonthlyPayment.objects.select_related("floor").all()
    serializer_class = MonthlyPaymentSerializer
    permission_classes = [IsAdminOrReadOnly]
    filterset_fields = ["floor", "month", "is_complete"]

    def perform_create(self, serializer):
        data = serializer.validated_data
        serializer.instance = monthly.record_payment(
            data["floor"], data["month"], data["amount_paid"], user=self.request.user,
        )

    def perform_update(self, serializer):
        payment, data = serializer.instance, serializer.validated_data
        serializer.instance = reconciliation.edit_payment(
            payment, data.get("amount_paid"),
            new_month=data.get("month"), user=self.request.user,
        )

    def perform_destroy(self, instance):
        reconciliation.delete_payment(instance, user=self.request.user)

    @action(detail=False, methods=["get"])
    def remaining(self, request):
        floor = _lookup(Floor, request.query_params.get("floor"), "floor")
        month = monthly.parse_month(request.query_params.get("month"))
        return Response({
            "floor": floor.pk,
            "month": month,
            "required": str(monthly.get_required()),
            "remaining_amount": str(monthly.get_remaining(floor, month)),
        })


class EventPaymentViewSet(viewsets.ModelViewSet):
    queryset = EventPayment.objects.select_related("floor", "event").all()
    serializer_class = EventPaymentSerializer
    permission_classes = [IsAdminOrReadOnly]
    filterset_fields = ["event", "floor", "is_complete"]

    def perform_create(self, serializer):
        data = serializer.validated_data
        serializer.instance = event_service.record_payment(
            data["event"], data["floor"], data["amount_paid"], user=self.request.user,
        )

    def perform_update(self, serializer):
        payment, data = serializer.instance, serializer.validated_data
        serializer.instance = reconciliation.edit_payment(
            payment, data.get("amount_paid"), user=self.request.user,
        )

    def perform_destroy(self, instance):
        reconciliation.delete_payment(instance, user=self.request.user)

    @action(detail=False, methods=["get"])
    def remaining(self, request):
        event = _lookup(MaintenanceEvent, request.query_params.get("event"), "event")
        floor = _lookup(Floor, request.query_params.get("floor"), "floor")
        return Response({
            "event": event.pk,
            "floor": floor.pk,
            "required": str(event.cost_per_floor),
            "remaining_amount": str(event_service.get_remaining(event, floor)),
        })


class ExpenseViewSet(viewsets.ModelViewSet):
    queryset = Expense.objects.select_related("event").all()
    serializer_class = ExpenseSerializer
    permission_classes = [IsAdminOrReadOnly]
    filterset_fields = ["type", "event", "paid_through"]
    search_fields = ["description"]

    def perform_create(self, serializer):
        data = serializer.validated_data
        serializer.instance = expense_service.record_expense(
            data.get("type", Expense.MONTHLY), data.get("description"), data.get("amount"),
            paid_through=data.get("paid_through", Expense.CASH),
            event=data.get("event"), user=self.request.user,
        )

    def perform_update(self, serializer):
        expense, data = serializer.instance, serializer.validated_data
        serializer.instance = expense_service.edit_expense(
            expense, data.get("amount"),
            new_description=data.get("description"),
            new_paid_through=data.get("paid_through"),
            user=self.request.user,
        )

    def perform_destroy(self, instance):
        expense_service.delete_expense(instance, user=self.request.user)


class BalanceView(APIView):
    permission_classes = [permissions.AllowAny]
    def get(self, request):
        return Response(SystemBalanceSerializer(get_balance()).data)


class MonthlyDueView(APIView):
    def get_permissions(self):
        return [permissions.AllowAny()] if self.request.method == "GET" else [IsAdmin()]
    def get(self, request):
        return Response({"required": str(monthly.get_required())})
    def put(self, request):
        config = MonthlyDueConfig.load()
        ser = MonthlyDueConfigSerializer(config, data=request.data)
        ser.is_valid(raise_exception=True)
        ser.save()
        log_activity(request.user, "MONTHLY_DUE_UPDATED", f"Required: {config.required}")
        return Response(ser.data)


class MonthlyStatusView(APIView):
    permission_classes = [permissions.AllowAny]
    def get(self, request):
        month = request.query_params.get("month") or timezone.now().strftime("%Y-%m")
        rows = monthly.month_status(month)
        return Response({"month": month, "floors": FloorStatusSerializer(rows, many=True).data})


class DashboardStatsView(APIView):
    permission_classes = [IsAdmin]
    def get(self, request):
        return Response(FinancialSummarySerializer(reports.financial_summary()).data)


class ActivityLogViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = ActivityLog.objects.select_related("user").all()
    serializer_class = ActivityLogSerializer
    permission_classes = [IsAdmin]
