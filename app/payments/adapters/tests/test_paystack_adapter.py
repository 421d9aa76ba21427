"""
Tests for Paystack adapter.

Tests cover:
- Minor unit conversion and backoff helpers
- Request building for each API operation
- Error translation for each failure type
- Webhook signature verification
"""

import hashlib
import hmac
from decimal import Decimal

import httpx
import pytest
from django.test import override_settings

from payments.adapters import (
    PaystackAdapter,
    backoff_delay,
    from_minor_units,
    is_retryable_gateway_error,
    to_minor_units,
)
from payments.exceptions import (
    GatewayAPIUnavailableError,
    GatewayInvalidRequestError,
    GatewayRateLimitError,
    GatewayTimeoutError,
    PaymentValidationError,
)


def ok(data):
    """Paystack success envelope."""
    return {"status": True, "message": "Success", "data": data}


def rejected(message, code=None):
    """Paystack failure envelope."""
    body = {"status": False, "message": message}
    if code:
        body["code"] = code
    return body


# =============================================================================
# Helper Tests
# =============================================================================


class TestMinorUnits:
    def test_to_minor_units(self):
        assert to_minor_units(Decimal("450.00")) == 45000
        assert to_minor_units("10.005") == 1001
        assert to_minor_units(12) == 1200

    def test_from_minor_units(self):
        assert from_minor_units(45000) == Decimal("450.00")
        assert from_minor_units("1999") == Decimal("19.99")

    def test_from_minor_units_none(self):
        assert from_minor_units(None) is None


class TestBackoffDelay:
    """Tests for backoff delay calculation."""

    def test_exponential_growth(self, mocker):
        """Should double the delay with each attempt (no jitter)."""
        mocker.patch("payments.adapters.paystack_adapter.random.uniform", return_value=0)

        assert backoff_delay(1, base=60, max_delay=3600) == 60
        assert backoff_delay(2, base=60, max_delay=3600) == 120
        assert backoff_delay(3, base=60, max_delay=3600) == 240

    def test_respects_max_delay(self):
        for attempt in range(1, 30):
            assert backoff_delay(attempt, base=60, max_delay=3600) <= 3600

    def test_jitter_added(self):
        delays = {backoff_delay(2, base=60, max_delay=3600) for _ in range(20)}

        assert all(120 <= delay <= 150 for delay in delays)


class TestIsRetryableGatewayError:
    def test_retryable_errors(self):
        assert is_retryable_gateway_error(GatewayRateLimitError("slow down"))
        assert is_retryable_gateway_error(GatewayAPIUnavailableError("down"))
        assert is_retryable_gateway_error(GatewayTimeoutError("timeout"))

    def test_non_retryable_errors(self):
        assert not is_retryable_gateway_error(GatewayInvalidRequestError("bad"))
        assert not is_retryable_gateway_error(PaymentValidationError("no"))
        assert not is_retryable_gateway_error(ValueError("other"))


# =============================================================================
# Operation Tests
# =============================================================================


class TestInitializeTransaction:
    def test_sends_amount_in_minor_units(self, paystack):
        paystack.add(
            "POST",
            "/transaction/initialize",
            json=ok(
                {
                    "authorization_url": "https://checkout.paystack.com/abc",
                    "access_code": "abc",
                    "reference": "pay-1",
                }
            ),
        )

        result = PaystackAdapter.initialize_transaction(
            email="thandi@example.com",
            amount=Decimal("500.00"),
            reference="pay-1",
            metadata={"booking_id": "bk-1"},
        )

        assert result.authorization_url == "https://checkout.paystack.com/abc"
        assert result.access_code == "abc"
        assert result.reference == "pay-1"
        assert paystack.last_json["amount"] == 50000
        assert paystack.last_json["email"] == "thandi@example.com"
        assert paystack.last_json["metadata"] == {"booking_id": "bk-1"}

    @override_settings(PAYSTACK_CALLBACK_URL="https://movers.example.com/paid")
    def test_includes_callback_url_from_settings(self, paystack):
        paystack.add(
            "POST",
            "/transaction/initialize",
            json=ok({"authorization_url": "https://x", "access_code": "a", "reference": "r"}),
        )

        PaystackAdapter.initialize_transaction(
            email="a@example.com", amount=Decimal("1.00"), reference="r"
        )

        assert paystack.last_json["callback_url"] == "https://movers.example.com/paid"


class TestVerifyTransaction:
    def test_success(self, paystack):
        paystack.add(
            "GET",
            "/transaction/verify/pay-1",
            json=ok(
                {
                    "status": "success",
                    "amount": 50000,
                    "reference": "pay-1",
                    "paid_at": "2026-03-06T10:00:00.000Z",
                }
            ),
        )

        result = PaystackAdapter.verify_transaction("pay-1")

        assert result.is_success
        assert result.amount == Decimal("500.00")
        assert result.paid_at == "2026-03-06T10:00:00.000Z"

    def test_abandoned_is_not_success(self, paystack):
        paystack.add(
            "GET",
            "/transaction/verify/pay-1",
            json=ok({"status": "abandoned", "amount": 50000, "reference": "pay-1"}),
        )

        result = PaystackAdapter.verify_transaction("pay-1")

        assert not result.is_success
        assert result.status == "abandoned"


class TestTransfers:
    def test_create_transfer_recipient(self, paystack):
        paystack.add(
            "POST",
            "/transferrecipient",
            json=ok(
                {
                    "recipient_code": "RCP_123",
                    "name": "Sipho Movers",
                    "details": {"account_name": "SIPHO MOVERS", "bank_name": "Capitec Bank"},
                }
            ),
        )

        result = PaystackAdapter.create_transfer_recipient(
            name="Sipho Movers", account_number="1234567890", bank_code="470010"
        )

        assert result.recipient_code == "RCP_123"
        assert result.account_name == "SIPHO MOVERS"
        assert paystack.last_json["type"] == "nuban"
        assert paystack.last_json["currency"] == "ZAR"

    def test_create_transfer(self, paystack):
        paystack.add(
            "POST",
            "/transfer",
            json=ok({"transfer_code": "TRF_1", "reference": "po-1", "status": "pending"}),
        )

        result = PaystackAdapter.create_transfer(
            amount=Decimal("450.00"),
            recipient_code="RCP_123",
            reason="Payout for booking 1",
            reference="po-1",
        )

        assert result.transfer_code == "TRF_1"
        assert result.reference == "po-1"
        assert result.status == "pending"
        assert paystack.last_json == {
            "source": "balance",
            "amount": 45000,
            "recipient": "RCP_123",
            "reason": "Payout for booking 1",
            "reference": "po-1",
        }


class TestRefunds:
    def test_create_refund(self, paystack):
        paystack.add(
            "POST",
            "/refund",
            json=ok({"id": 9001, "status": "Pending", "amount": 50000}),
        )

        result = PaystackAdapter.create_refund("pay-ref-1")

        assert result.reference == "9001"
        assert result.status == "pending"
        assert result.amount == Decimal("500.00")
        assert paystack.last_json == {"transaction": "pay-ref-1"}

    def test_fetch_refund_keeps_requested_reference(self, paystack):
        paystack.add("GET", "/refund/9001", json=ok({"status": "processed"}))

        result = PaystackAdapter.fetch_refund("9001")

        assert result.reference == "9001"
        assert result.status == "processed"
        assert result.amount is None


# =============================================================================
# Error Translation Tests
# =============================================================================


class TestPaystackAdapterErrorTranslation:
    """Tests that HTTP and transport failures become domain exceptions."""

    def test_rejected_request(self, paystack):
        paystack.add(
            "POST",
            "/transfer",
            status_code=400,
            json=rejected("Insufficient balance", code="insufficient_balance"),
        )

        with pytest.raises(GatewayInvalidRequestError) as exc_info:
            PaystackAdapter.create_transfer(
                amount=Decimal("1.00"), recipient_code="RCP_1", reason="x"
            )

        assert exc_info.value.message == "Insufficient balance"
        assert exc_info.value.gateway_code == "insufficient_balance"
        assert exc_info.value.is_retryable is False

    def test_status_false_with_200(self, paystack):
        paystack.add("GET", "/refund/r1", json=rejected("Refund not found"))

        with pytest.raises(GatewayInvalidRequestError, match="Refund not found"):
            PaystackAdapter.fetch_refund("r1")

    def test_rate_limit(self, paystack):
        paystack.add("GET", "/refund/r1", status_code=429, json=rejected("Too many"))

        with pytest.raises(GatewayRateLimitError) as exc_info:
            PaystackAdapter.fetch_refund("r1")

        assert exc_info.value.is_retryable is True

    def test_server_error(self, paystack):
        paystack.add("GET", "/refund/r1", status_code=503, json=rejected("Down"))

        with pytest.raises(GatewayAPIUnavailableError):
            PaystackAdapter.fetch_refund("r1")

    def test_non_json_response(self, paystack):
        paystack.add("GET", "/refund/r1", status_code=200, text="<html>oops</html>")

        with pytest.raises(GatewayAPIUnavailableError):
            PaystackAdapter.fetch_refund("r1")

    def test_timeout(self, paystack):
        paystack.add("GET", "/refund/r1", exc=httpx.ReadTimeout("timed out"))

        with pytest.raises(GatewayTimeoutError):
            PaystackAdapter.fetch_refund("r1")

    def test_connection_error(self, paystack):
        paystack.add("GET", "/refund/r1", exc=httpx.ConnectError("refused"))

        with pytest.raises(GatewayAPIUnavailableError) as exc_info:
            PaystackAdapter.fetch_refund("r1")

        assert exc_info.value.gateway_code == "api_connection_error"


# =============================================================================
# Webhook Signature Tests
# =============================================================================


class TestVerifyWebhookSignature:
    payload = b'{"event":"charge.success","data":{"reference":"pay-1"}}'

    def _sign(self, payload, secret="sk_test_secret"):
        return hmac.new(secret.encode(), payload, hashlib.sha512).hexdigest()

    @override_settings(PAYSTACK_SECRET_KEY="sk_test_secret")
    def test_valid_signature(self):
        assert PaystackAdapter.verify_webhook_signature(self.payload, self._sign(self.payload))

    @override_settings(PAYSTACK_SECRET_KEY="sk_test_secret")
    def test_signature_from_other_secret(self):
        signature = self._sign(self.payload, secret="sk_other")

        assert not PaystackAdapter.verify_webhook_signature(self.payload, signature)

    @override_settings(PAYSTACK_SECRET_KEY="sk_test_secret")
    def test_tampered_body(self):
        signature = self._sign(self.payload)

        assert not PaystackAdapter.verify_webhook_signature(self.payload + b" ", signature)

    @pytest.mark.parametrize("signature", [None, ""])
    def test_missing_signature(self, signature):
        assert not PaystackAdapter.verify_webhook_signature(self.payload, signature)
