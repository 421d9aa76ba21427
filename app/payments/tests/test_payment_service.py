"""
Tests for PaymentService.

Tests cover:
- Checkout initiation and reuse of the booking's payment
- Ownership and booking state checks
- Webhook signature and payload validation
- Verification outcomes and the no-regression rule
"""

import hashlib
import hmac
import json
import logging
from decimal import Decimal

import pytest

from core.exceptions import NotFoundError, PermissionDeniedError
from marketplace.models import Booking, BookingStatus
from payments.adapters import TransactionVerifyResult
from payments.exceptions import GatewayInvalidRequestError, PaymentValidationError
from payments.models import Payment, PaymentEvent
from payments.services import PaymentService
from payments.state_machines import PaymentEventType, PaymentStatus
from payments.tests.factories import PaymentFactory


# =============================================================================
# Initiation
# =============================================================================


@pytest.mark.django_db
class TestInitiatePayment:
    def test_creates_pending_payment_for_quoted_total(self, gateway, booking, customer):
        result = PaymentService.initiate_payment(booking.id, user=customer)

        payment = Payment.objects.get(booking=booking)
        assert payment.status == PaymentStatus.PENDING
        assert payment.amount == Decimal("500.00")
        assert payment.provider == booking.provider
        assert result == {
            "provider": "paystack",
            "authorization_url": f"https://checkout.paystack.com/{payment.id}",
            "reference": str(payment.id),
        }

    def test_sends_payment_id_as_reference(self, gateway, booking, customer):
        PaymentService.initiate_payment(booking.id, user=customer)

        payment = Payment.objects.get(booking=booking)
        kwargs = gateway.initialize_transaction.call_args.kwargs
        assert kwargs["email"] == customer.email
        assert kwargs["amount"] == Decimal("500.00")
        assert kwargs["reference"] == str(payment.id)
        assert kwargs["metadata"]["booking_id"] == str(booking.id)
        assert payment.gateway_reference == str(payment.id)

    def test_logs_initiated_event(self, gateway, booking, customer):
        PaymentService.initiate_payment(booking.id, user=customer)

        payment = Payment.objects.get(booking=booking)
        assert PaymentEvent.objects.filter(
            payment=payment, event_type=PaymentEventType.PAYMENT_INITIATED
        ).count() == 1

    def test_initiation_is_logged_with_context(
        self, gateway, booking, customer, caplog, monkeypatch
    ):
        monkeypatch.setattr(logging.getLogger("payments"), "propagate", True)
        caplog.set_level(logging.INFO, logger="payments")

        result = PaymentService.initiate_payment(booking.id, user=customer)

        record = next(r for r in caplog.records if r.getMessage() == "Payment initiated")
        assert record.payment_id == result["reference"]
        assert record.booking_id == str(booking.id)
        assert record.payment_created is True

    def test_repeat_initiation_reuses_payment(self, gateway, booking, customer):
        first = PaymentService.initiate_payment(booking.id, user=customer)
        second = PaymentService.initiate_payment(booking.id, user=customer)

        assert first["reference"] == second["reference"]
        assert Payment.objects.filter(booking=booking).count() == 1
        assert gateway.initialize_transaction.call_count == 2

    def test_failed_payment_can_be_retried(self, gateway, booking, customer):
        payment = PaymentFactory(booking=booking, status=PaymentStatus.FAILED)

        result = PaymentService.initiate_payment(booking.id, user=customer)

        assert result["reference"] == str(payment.id)

    def test_booking_not_found(self, gateway, customer):
        import uuid

        with pytest.raises(NotFoundError) as exc_info:
            PaymentService.initiate_payment(uuid.uuid4(), user=customer)

        assert exc_info.value.error_code == "BOOKING_NOT_FOUND"
        gateway.initialize_transaction.assert_not_called()

    def test_other_customers_booking_forbidden(self, gateway, booking):
        from authentication.tests.factories import CustomerFactory

        with pytest.raises(PermissionDeniedError):
            PaymentService.initiate_payment(booking.id, user=CustomerFactory())

        assert not Payment.objects.filter(booking=booking).exists()

    def test_admin_may_initiate_for_any_booking(self, gateway, booking, admin_user):
        result = PaymentService.initiate_payment(booking.id, user=admin_user)

        assert result["provider"] == "paystack"

    def test_cancelled_booking_rejected(self, gateway, booking, customer):
        Booking.objects.filter(pk=booking.pk).update(status=BookingStatus.CANCELLED)

        with pytest.raises(PaymentValidationError) as exc_info:
            PaymentService.initiate_payment(booking.id, user=customer)

        assert exc_info.value.error_code == "BOOKING_CANCELLED"

    def test_paid_booking_rejected(self, gateway, paid_payment, customer):
        with pytest.raises(PaymentValidationError) as exc_info:
            PaymentService.initiate_payment(paid_payment.booking_id, user=customer)

        assert exc_info.value.error_code == "BOOKING_ALREADY_PAID"
        gateway.initialize_transaction.assert_not_called()

    def test_refunded_payment_rejected(self, gateway, booking, customer):
        PaymentFactory(booking=booking, status=PaymentStatus.REFUNDED)

        with pytest.raises(PaymentValidationError) as exc_info:
            PaymentService.initiate_payment(booking.id, user=customer)

        assert exc_info.value.error_code == "PAYMENT_ALREADY_SETTLED"

    def test_gateway_error_propagates(self, gateway, booking, customer):
        gateway.initialize_transaction.side_effect = GatewayInvalidRequestError("Invalid email")

        with pytest.raises(GatewayInvalidRequestError):
            PaymentService.initiate_payment(booking.id, user=customer)

        payment = Payment.objects.get(booking=booking)
        assert payment.status == PaymentStatus.PENDING
        assert payment.gateway_reference is None


# =============================================================================
# Webhooks
# =============================================================================


@pytest.mark.django_db
class TestHandleWebhook:
    def _sign(self, body):
        return hmac.new(b"sk_test_secret", body, hashlib.sha512).hexdigest()

    def test_invalid_signature(self, pending_payment):
        body = json.dumps({"event": "charge.success", "data": {"reference": "x"}}).encode()

        with pytest.raises(PaymentValidationError) as exc_info:
            PaymentService.handle_webhook(body, "not-a-signature")

        assert exc_info.value.error_code == "INVALID_SIGNATURE"
        assert exc_info.value.message == "Invalid signature"
        assert not PaymentEvent.objects.exists()

    def test_missing_signature(self):
        with pytest.raises(PaymentValidationError):
            PaymentService.handle_webhook(b"{}", None)

    def test_invalid_json(self):
        body = b"not json"

        with pytest.raises(PaymentValidationError) as exc_info:
            PaymentService.handle_webhook(body, self._sign(body))

        assert exc_info.value.error_code == "INVALID_PAYLOAD"

    def test_missing_event_type(self):
        body = json.dumps({"data": {}}).encode()

        with pytest.raises(PaymentValidationError) as exc_info:
            PaymentService.handle_webhook(body, self._sign(body))

        assert exc_info.value.error_code == "INVALID_PAYLOAD"

    def test_unknown_event_accepted(self):
        body = json.dumps({"event": "subscription.create", "data": {}}).encode()

        result = PaymentService.handle_webhook(body, self._sign(body))

        assert result == {"event": "subscription.create", "handled": False}

    def test_charge_success_dispatched(self, pending_payment):
        pending_payment.gateway_reference = str(pending_payment.id)
        pending_payment.save()
        body = json.dumps(
            {"event": "charge.success", "data": {"reference": str(pending_payment.id)}}
        ).encode()

        result = PaymentService.handle_webhook(body, self._sign(body))

        assert result["handled"] is True
        assert result["result"] == "paid"
        assert Payment.objects.get(pk=pending_payment.pk).status == PaymentStatus.PAID


# =============================================================================
# Verification
# =============================================================================


@pytest.mark.django_db
class TestVerifyPayment:
    def test_success_marks_paid(self, gateway, pending_payment, customer):
        result = PaymentService.verify_payment(pending_payment.id, user=customer)

        payment = Payment.objects.get(pk=pending_payment.pk)
        assert payment.status == PaymentStatus.PAID
        assert payment.paid_at is not None
        assert Booking.objects.get(pk=payment.booking_id).payment_status == PaymentStatus.PAID
        assert result["status"] == PaymentStatus.PAID
        assert result["amount"] == Decimal("500.00")

    def test_verifies_by_payment_id_without_gateway_reference(
        self, gateway, pending_payment, customer
    ):
        PaymentService.verify_payment(pending_payment.id, user=customer)

        gateway.verify_transaction.assert_called_once_with(str(pending_payment.id))

    def test_non_success_marks_failed(self, gateway, pending_payment, customer):
        gateway.verify_transaction.return_value = TransactionVerifyResult(
            status="abandoned", amount=Decimal("0.00"), reference=str(pending_payment.id)
        )

        result = PaymentService.verify_payment(pending_payment.id, user=customer)

        payment = Payment.objects.get(pk=pending_payment.pk)
        assert payment.status == PaymentStatus.FAILED
        assert Booking.objects.get(pk=payment.booking_id).payment_status == PaymentStatus.FAILED
        assert result["status"] == PaymentStatus.FAILED

    def test_paid_payment_never_regressed(self, gateway, paid_payment, customer):
        gateway.verify_transaction.return_value = TransactionVerifyResult(
            status="failed", amount=Decimal("0.00"), reference="ref"
        )

        result = PaymentService.verify_payment(paid_payment.id, user=customer)

        assert result["status"] == PaymentStatus.PAID
        assert Payment.objects.get(pk=paid_payment.pk).status == PaymentStatus.PAID

    def test_reverification_keeps_original_paid_at(self, gateway, paid_payment, customer):
        original_paid_at = paid_payment.paid_at

        PaymentService.verify_payment(paid_payment.id, user=customer)

        assert Payment.objects.get(pk=paid_payment.pk).paid_at == original_paid_at

    def test_every_verification_is_logged(self, gateway, pending_payment, customer):
        PaymentService.verify_payment(pending_payment.id, user=customer)
        PaymentService.verify_payment(pending_payment.id, user=customer)

        assert PaymentEvent.objects.filter(
            payment=pending_payment, event_type=PaymentEventType.VERIFICATION
        ).count() == 2

    def test_other_customer_forbidden(self, gateway, pending_payment):
        from authentication.tests.factories import CustomerFactory

        with pytest.raises(PermissionDeniedError):
            PaymentService.verify_payment(pending_payment.id, user=CustomerFactory())

        gateway.verify_transaction.assert_not_called()

    def test_admin_may_verify(self, gateway, pending_payment, admin_user):
        result = PaymentService.verify_payment(pending_payment.id, user=admin_user)

        assert result["status"] == PaymentStatus.PAID

    def test_unknown_payment(self, gateway, customer):
        import uuid

        from payments.exceptions import PaymentNotFoundError

        with pytest.raises(PaymentNotFoundError):
            PaymentService.verify_payment(uuid.uuid4(), user=customer)
