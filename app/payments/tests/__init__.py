"""
Tests for the payments app.

Service tests run against a mocked PaystackAdapter (see conftest.py);
the adapter itself is tested in payments/adapters/tests.

Usage:
    pytest payments/tests/
    pytest payments/tests/test_webhooks.py
"""
