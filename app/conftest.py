"""
Shared pytest configuration for every app.

Provides:
    - automatic unit/integration/e2e markers based on file name
    - a clean cache per test (throttle counters live in the cache)
    - role-based users and authenticated API clients
    - a recording notification sink in place of email
"""

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full payment/refund/payout journeys)
    - test_views.py, test_services.py, test_tasks.py, etc. → integration
    - test_models.py, test_pricing.py, test_adapters.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_tasks.py",
        "test_permissions.py",
        "test_webhooks.py",
        "test_handlers.py",
        "test_payment_service.py",
        "test_payout_service.py",
        "test_refund_service.py",
        "test_payment_card_service.py",
        "test_throttling.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_pricing.py",
        "test_adapters.py",
        "test_paystack_adapter.py",
        "test_state_transitions.py",
        "test_exceptions.py",
        "test_sinks.py",
    ]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def clear_cache():
    """Reset the cache so throttle history never leaks between tests."""
    cache.clear()
    yield
    cache.clear()


# =============================================================================
# Users and clients
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture
def customer(db):
    from authentication.tests.factories import CustomerFactory

    return CustomerFactory()


@pytest.fixture
def provider_user(db):
    from authentication.tests.factories import ProviderUserFactory

    return ProviderUserFactory()


@pytest.fixture
def admin_user(db):
    from authentication.tests.factories import AdminUserFactory

    return AdminUserFactory()


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def customer_client(customer):
    return _client_for(customer)


@pytest.fixture
def provider_client(provider_user):
    return _client_for(provider_user)


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def provider(provider_user):
    """Approved provider profile owned by provider_user."""
    from marketplace.tests.factories import ProviderFactory

    return ProviderFactory(user=provider_user)


# =============================================================================
# Notifications
# =============================================================================


class RecordingSink:
    """Notification sink that keeps messages in memory."""

    def __init__(self):
        self.sent = []

    def send(self, to, subject, body):
        self.sent.append({"to": to, "subject": subject, "body": body})
        return True

    @property
    def subjects(self):
        return [message["subject"] for message in self.sent]


@pytest.fixture(autouse=True)
def notification_sink():
    """Capture notifications instead of sending email."""
    from notifications.services import NotificationService

    sink = RecordingSink()
    NotificationService.set_sink(sink)
    yield sink
    NotificationService.set_sink(None)
