"""
Test configuration and fixtures for authentication tests.

Role users and authenticated clients (customer, provider_user,
admin_user, *_client) come from app/conftest.py.
"""

import pytest
from rest_framework.test import APIRequestFactory

from authentication.models import UserStatus
from authentication.tests.factories import UserFactory


@pytest.fixture
def request_factory():
    return APIRequestFactory()


@pytest.fixture
def suspended_user(db):
    """An authenticated-capable user whose account status blocks access."""
    return UserFactory(status=UserStatus.SUSPENDED)


@pytest.fixture
def deactivated_user(db):
    """A user with Django's is_active flag cleared."""
    return UserFactory(is_active=False)
