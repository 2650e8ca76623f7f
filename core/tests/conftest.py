"""
Pytest fixtures for ledger tests.

Sections:
    - Building Fixtures: floors, monthly due, funded balance
    - Event Fixtures: maintenance events
    - Client Fixtures: API clients with and without admin rights
"""

from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from core.models import MonthlyDueConfig, SystemBalance
from core.services import events as event_service
from core.tests.factories import FloorFactory, UserFactory


# ==========================================================================
# Building Fixtures
# ==========================================================================


@pytest.fixture
def floors(db):
    """Four floors: ground floor plus floors 1-3."""
    return [FloorFactory(floor_number=n) for n in range(4)]


@pytest.fixture
def monthly_due(db):
    """Monthly due of 500 per floor."""
    config = MonthlyDueConfig.load()
    config.required = Decimal("500.00")
    config.save()
    return config


@pytest.fixture
def funded_balance(db):
    """Balance of 1000 without any backing records."""
    balance = SystemBalance.load()
    balance.total_balance = Decimal("1000.00")
    balance.save()
    return balance


# ==========================================================================
# Event Fixtures
# ==========================================================================


@pytest.fixture
def event(floors):
    """Open event costing 1000, i.e. 250 per floor."""
    return event_service.create_event("Roof repair", "Fix the roof leak", Decimal("1000"))


@pytest.fixture
def other_event(floors):
    return event_service.create_event("Facade paint", "Repaint the facade", Decimal("400"))


# ==========================================================================
# Client Fixtures
# ==========================================================================


def _client_for(user) -> APIClient:
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    return UserFactory(username="admin", is_staff=True)


@pytest.fixture
def admin_client(admin_user) -> APIClient:
    return _client_for(admin_user)


@pytest.fixture
def resident_client(db) -> APIClient:
    return _client_for(UserFactory(username="resident"))
