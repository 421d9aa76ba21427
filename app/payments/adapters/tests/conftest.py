"""
Pytest fixtures for Paystack adapter tests.

The adapter's httpx client is replaced with one backed by
httpx.MockTransport, so tests exercise the real request building and
error translation without touching the network.

Sections:
    - Paystack Stub
"""

import json

import httpx
import pytest

from payments.adapters import PaystackAdapter


# =============================================================================
# Paystack Stub
# =============================================================================


class PaystackStub:
    """
    Routes (method, path) to canned responses and records every request.

    Usage:
        paystack.add("POST", "/refund", json=ok({"reference": "rf_1"}))
        PaystackAdapter.create_refund("ref_1")
        assert paystack.last_json == {"transaction": "ref_1"}
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, status_code=200, json=None, text=None, exc=None):
        self.routes[(method, path)] = (status_code, json, text, exc)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, body, text, exc = self.routes[(request.method, request.url.path)]
        if exc is not None:
            raise exc
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json=body)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_json(self) -> dict:
        return json.loads(self.last_request.content)


@pytest.fixture
def paystack():
    """Install a MockTransport-backed client on the adapter."""
    stub = PaystackStub()
    client = httpx.Client(
        base_url="https://api.paystack.test",
        transport=httpx.MockTransport(stub.handler),
        headers={"Authorization": "Bearer sk_test_secret"},
    )
    PaystackAdapter.set_client(client)
    yield stub
    PaystackAdapter.set_client(None)
    client.close()

