"""
API tests for the ledger endpoints.

Sections:
    - Authentication
    - Monthly payments
    - Events and event payments
    - Expenses
    - Reports and configuration
"""

from decimal import Decimal

import pytest
from rest_framework import status

from core.models import ActivityLog, EventPayment, MaintenanceEvent, MonthlyPayment
from core.services import events as event_service
from core.services import monthly
from core.services.balance import get_balance


# ==========================================================================
# Authentication
# ==========================================================================


@pytest.mark.django_db
class TestAuth:
    def test_login_returns_token_pair(self, api_client, admin_user):
        response = api_client.post(
            "/api/auth/login/", {"username": "admin", "password": "password123"}, format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert "access" in response.data
        assert "refresh" in response.data
        assert ActivityLog.objects.filter(action="USER_LOGIN_SUCCESS", user=admin_user).exists()

    def test_login_by_email(self, api_client, admin_user):
        response = api_client.post(
            "/api/auth/login/", {"email": "admin@example.com", "password": "password123"}, format="json",
        )

        assert response.status_code == status.HTTP_200_OK

    def test_login_with_wrong_password(self, api_client, admin_user):
        response = api_client.post(
            "/api/auth/login/", {"username": "admin", "password": "nope"}, format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_without_credentials(self, api_client):
        response = api_client.post("/api/auth/login/", {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_me(self, admin_client):
        response = admin_client.get("/api/me/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["username"] == "admin"
        assert response.data["is_staff"] is True


# ==========================================================================
# Monthly payments
# ==========================================================================


@pytest.mark.django_db
class TestMonthlyPaymentsAPI:
    url = "/api/monthly-payments/"

    def test_anonymous_cannot_record(self, api_client, floors, monthly_due):
        response = api_client.post(
            self.url, {"floor": floors[0].pk, "month": "2024-03", "amount_paid": "200"}, format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_resident_cannot_record(self, resident_client, floors, monthly_due):
        response = resident_client.post(
            self.url, {"floor": floors[0].pk, "month": "2024-03", "amount_paid": "200"}, format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not MonthlyPayment.objects.exists()

    def test_admin_records_payment(self, admin_client, floors, monthly_due):
        response = admin_client.post(
            self.url, {"floor": floors[0].pk, "month": "2024-03", "amount_paid": "200"}, format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["remaining_amount"] == "300.00"
        assert response.data["is_complete"] is False
        assert response.data["floor_name"] == "Ground floor"
        assert get_balance().total_balance == Decimal("200.00")

    def test_overpayment_is_rejected(self, admin_client, floors, monthly_due):
        response = admin_client.post(
            self.url, {"floor": floors[0].pk, "month": "2024-03", "amount_paid": "600"}, format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "OVERPAYMENT"
        assert response.data["details"]["remaining"] == "500.00"

    def test_malformed_month_is_rejected(self, admin_client, floors, monthly_due):
        response = admin_client.post(
            self.url, {"floor": floors[0].pk, "month": "2024-3", "amount_paid": "100"}, format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "VALIDATION_ERROR"

    def test_list_is_public_and_paginated(self, api_client, floors, monthly_due):
        monthly.record_payment(floors[0], "2024-03", Decimal("200"))
        monthly.record_payment(floors[1], "2024-03", Decimal("500"))

        response = api_client.get(self.url, {"is_complete": "true"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 1
        assert response.data["results"][0]["floor"] == floors[1].pk

    def test_patch_applies_difference(self, admin_client, floors, monthly_due):
        payment = monthly.record_payment(floors[0], "2024-03", Decimal("200"))

        response = admin_client.patch(f"{self.url}{payment.pk}/", {"amount_paid": "350"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["remaining_amount"] == "150.00"
        assert get_balance().total_balance == Decimal("350.00")

    def test_patch_cannot_change_floor(self, admin_client, floors, monthly_due):
        payment = monthly.record_payment(floors[0], "2024-03", Decimal("200"))

        response = admin_client.patch(f"{self.url}{payment.pk}/", {"floor": floors[1].pk}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_patch_month_only_keeps_amount(self, admin_client, floors, monthly_due):
        payment = monthly.record_payment(floors[0], "2024-03", Decimal("200"))

        response = admin_client.patch(f"{self.url}{payment.pk}/", {"month": "2024-04"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["month"] == "2024-04"
        assert response.data["amount_paid"] == "200.00"
        assert response.data["remaining_amount"] == "300.00"
        assert get_balance().total_balance == Decimal("200.00")

    def test_delete_removes_credit(self, admin_client, floors, monthly_due):
        payment = monthly.record_payment(floors[0], "2024-03", Decimal("200"))

        response = admin_client.delete(f"{self.url}{payment.pk}/")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert get_balance().total_balance == Decimal("0.00")

    def test_remaining(self, api_client, floors, monthly_due):
        monthly.record_payment(floors[2], "2024-03", Decimal("125"))

        response = api_client.get(f"{self.url}remaining/", {"floor": floors[2].pk, "month": "2024-03"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["required"] == "500.00"
        assert response.data["remaining_amount"] == "375.00"

    def test_remaining_unknown_floor(self, api_client, floors, monthly_due):
        response = api_client.get(f"{self.url}remaining/", {"floor": 9999, "month": "2024-03"})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "NOT_FOUND"

    def test_remaining_without_floor(self, api_client, floors, monthly_due):
        response = api_client.get(f"{self.url}remaining/", {"month": "2024-03"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# ==========================================================================
# Events and event payments
# ==========================================================================


@pytest.mark.django_db
class TestEventsAPI:
    def test_create_event(self, admin_client, floors):
        response = admin_client.post(
            "/api/events/",
            {"name": "Elevator", "description": "New cables", "total_cost": "1000"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["cost_per_floor"] == "250.00"
        assert response.data["status"] == "open"
        assert response.data["collected_amount"] == "0.00"

    def test_resident_cannot_create_event(self, resident_client, floors):
        response = resident_client.post(
            "/api/events/",
            {"name": "Elevator", "description": "New cables", "total_cost": "1000"},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_filter_by_status(self, api_client, event, other_event):
        event_service.edit_event(other_event, other_event.name, other_event.description, other_event.total_cost, "closed")

        response = api_client.get("/api/events/", {"status": "open"})

        assert response.status_code == status.HTTP_200_OK
        assert [row["id"] for row in response.data["results"]] == [event.pk]

    def test_delete_event_adjusts_balance(self, admin_client, event, floors):
        event_service.record_payment(event, floors[0], Decimal("250"))

        response = admin_client.delete(f"/api/events/{event.pk}/")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert get_balance().total_balance == Decimal("0.00")

    def test_floor_status(self, api_client, event, floors):
        event_service.record_payment(event, floors[0], Decimal("250"))

        response = api_client.get(f"/api/events/{event.pk}/floor-status/")

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 4
        assert response.data[0]["is_complete"] is True
        assert "has_paid" not in response.data[0]

    def test_payable_floors(self, api_client, event, floors):
        event_service.record_payment(event, floors[0], Decimal("250"))

        response = api_client.get(f"/api/events/{event.pk}/payable-floors/")

        assert [row["floor_number"] for row in response.data] == [1, 2, 3]

    def test_record_event_payment(self, admin_client, event, floors):
        response = admin_client.post(
            "/api/event-payments/",
            {"event": event.pk, "floor": floors[1].pk, "amount_paid": "100"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["remaining_amount"] == "150.00"
        assert response.data["event_name"] == "Roof repair"

    def test_event_payment_on_closed_event(self, admin_client, event, floors):
        event_service.edit_event(event, event.name, event.description, event.total_cost, "closed")

        response = admin_client.post(
            "/api/event-payments/",
            {"event": event.pk, "floor": floors[1].pk, "amount_paid": "100"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "EVENT_CLOSED"

    def test_event_remaining(self, api_client, event, floors):
        response = api_client.get("/api/event-payments/remaining/", {"event": event.pk, "floor": floors[0].pk})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["remaining_amount"] == "250.00"

    def test_new_event_cannot_start_closed(self, admin_client, floors):
        response = admin_client.post(
            "/api/events/",
            {"name": "Elevator", "description": "New cables", "total_cost": "1000", "status": "closed"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "status" in response.data
        assert not MaintenanceEvent.objects.exists()

    def test_event_date_cannot_change(self, admin_client, event):
        original_date = event.date

        response = admin_client.patch(
            f"/api/events/{event.pk}/", {"date": "2020-01-01T00:00:00Z"}, format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "date" in response.data
        event.refresh_from_db()
        assert event.date == original_date

    def test_patch_event_recomputes_share(self, admin_client, event, floors):
        payment = event_service.record_payment(event, floors[0], Decimal("100"))

        response = admin_client.patch(f"/api/events/{event.pk}/", {"total_cost": "2000"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["cost_per_floor"] == "500.00"
        payment.refresh_from_db()
        assert payment.remaining_amount == Decimal("150.00")

    def test_close_event(self, admin_client, event):
        response = admin_client.patch(f"/api/events/{event.pk}/", {"status": "closed"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        event.refresh_from_db()
        assert event.status == MaintenanceEvent.CLOSED

    def test_patch_event_payment_applies_difference(self, admin_client, event, floors):
        payment = event_service.record_payment(event, floors[0], Decimal("100"))

        response = admin_client.patch(
            f"/api/event-payments/{payment.pk}/", {"amount_paid": "250"}, format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["remaining_amount"] == "0.00"
        assert response.data["is_complete"] is True
        assert get_balance().total_balance == Decimal("250.00")

    def test_patch_event_payment_cannot_change_key(self, admin_client, event, other_event, floors):
        payment = event_service.record_payment(event, floors[0], Decimal("100"))
        url = f"/api/event-payments/{payment.pk}/"

        floor_response = admin_client.patch(url, {"floor": floors[1].pk}, format="json")
        event_response = admin_client.patch(url, {"event": other_event.pk}, format="json")

        assert floor_response.status_code == status.HTTP_400_BAD_REQUEST
        assert event_response.status_code == status.HTTP_400_BAD_REQUEST

        payment.refresh_from_db()
        assert payment.floor == floors[0]
        assert payment.event == event
        assert get_balance().total_balance == Decimal("100.00")

    def test_delete_event_payment_removes_credit(self, admin_client, event, floors):
        payment = event_service.record_payment(event, floors[0], Decimal("100"))

        response = admin_client.delete(f"/api/event-payments/{payment.pk}/")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not EventPayment.objects.exists()
        assert get_balance().total_balance == Decimal("0.00")


# ==========================================================================
# Expenses
# ==========================================================================


@pytest.mark.django_db
class TestExpensesAPI:
    def test_expense_over_balance(self, admin_client, funded_balance):
        response = admin_client.post(
            "/api/expenses/",
            {"type": "monthly", "description": "Boiler", "amount": "1500"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INSUFFICIENT_BALANCE"

    def test_record_and_edit_expense(self, admin_client, funded_balance):
        created = admin_client.post(
            "/api/expenses/",
            {"type": "monthly", "description": "Boiler", "amount": "400", "paid_through": "bank"},
            format="json",
        )
        assert created.status_code == status.HTTP_201_CREATED
        assert get_balance().total_balance == Decimal("600.00")

        edited = admin_client.patch(f"/api/expenses/{created.data['id']}/", {"amount": "300"}, format="json")

        assert edited.status_code == status.HTTP_200_OK
        assert edited.data["amount"] == "300.00"
        assert get_balance().total_balance == Decimal("700.00")

    def test_delete_expense(self, admin_client, funded_balance):
        created = admin_client.post(
            "/api/expenses/", {"type": "monthly", "description": "Boiler", "amount": "400"}, format="json",
        )

        response = admin_client.delete(f"/api/expenses/{created.data['id']}/")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert get_balance().total_balance == Decimal("1000.00")


# ==========================================================================
# Reports and configuration
# ==========================================================================


@pytest.mark.django_db
class TestReportsAPI:
    def test_balance_is_public(self, api_client, funded_balance):
        response = api_client.get("/api/balance/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["total_balance"] == "1000.00"

    def test_monthly_due_read_and_update(self, api_client, admin_client, monthly_due):
        assert api_client.get("/api/monthly-due/").data == {"required": "500.00"}

        response = admin_client.put("/api/monthly-due/", {"required": "650"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert monthly.get_required() == Decimal("650.00")

    def test_resident_cannot_change_monthly_due(self, resident_client, monthly_due):
        response = resident_client.put("/api/monthly-due/", {"required": "650"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_monthly_status(self, api_client, floors, monthly_due):
        monthly.record_payment(floors[0], "2024-03", Decimal("500"))

        response = api_client.get("/api/reports/monthly-status/", {"month": "2024-03"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["month"] == "2024-03"
        assert len(response.data["floors"]) == 4
        assert response.data["floors"][0]["has_paid"] is True
        assert response.data["floors"][1]["remaining_amount"] == "500.00"

    def test_dashboard_requires_admin(self, resident_client):
        response = resident_client.get("/api/reports/dashboard-stats/")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_dashboard_stats(self, admin_client, floors, monthly_due):
        monthly.record_payment(floors[0], "2024-03", Decimal("500"))

        response = admin_client.get("/api/reports/dashboard-stats/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["total_balance"] == "500.00"
        assert response.data["recent_payments"][0]["type"] == "monthly"

    def test_activity_log_is_admin_only(self, admin_client, resident_client, floors, monthly_due, admin_user):
        monthly.record_payment(floors[0], "2024-03", Decimal("500"), user=admin_user)

        assert resident_client.get("/api/activity-logs/").status_code == status.HTTP_403_FORBIDDEN

        response = admin_client.get("/api/activity-logs/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["results"][0]["action"] == "MONTHLY_PAYMENT_RECORDED"
