"""
Payment service: charge initiation, webhook intake and verification.

Flow:
    1. initiate_payment() creates (or reuses) the booking's Payment and
       opens a Paystack hosted checkout with reference = payment id
    2. Paystack posts charge.success to the webhook; handle_webhook()
       verifies the HMAC signature and dispatches the event
    3. verify_payment() asks Paystack directly and is the recovery path
       when a webhook never arrives

All three entry points are safe to repeat. Payment and Booking rows are
written in one transaction; the gateway is always called outside it.

Usage:
    from payments.services import PaymentService

    checkout = PaymentService.initiate_payment(booking.id, user=customer)
    # {"provider": "paystack", "authorization_url": "...", "reference": "<payment id>"}

    result = PaymentService.verify_payment(payment.id, user=customer)
    # {"status": "PAID", "amount": Decimal("500.00"), "reference": "...", "paid_at": ...}
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from django.utils.dateparse import parse_datetime
from django_fsm import can_proceed

from authentication.models import UserRole
from core.exceptions import NotFoundError, PermissionDeniedError
from core.services import BaseService
from marketplace.models import Booking, BookingStatus
from payments.adapters import PaystackAdapter
from payments.exceptions import PaymentValidationError
from payments.models import Payment, PaymentEvent
from payments.services.lookups import get_payment
from payments.state_machines import Gateway, PaymentEventType, PaymentStatus
from payments.webhooks.handlers import dispatch_webhook

if TYPE_CHECKING:
    from authentication.models import User


class PaymentService(BaseService):
    """
    Service for customer charges.

    The gateway is a class attribute so tests can inject a fake:

        PaymentService.set_gateway(FakeGateway)
    """

    _gateway: type | None = None

    @classmethod
    def get_gateway(cls) -> type:
        """Get the gateway adapter class."""
        return cls._gateway or PaystackAdapter

    @classmethod
    def set_gateway(cls, gateway: type | None) -> None:
        """Set the gateway adapter class (for testing)."""
        cls._gateway = gateway

    # =========================================================================
    # Initiation
    # =========================================================================

    @classmethod
    def initiate_payment(cls, booking_id, user: User) -> dict[str, Any]:
        """
        Open a hosted checkout for a booking.

        Creates the booking's Payment on first call and reuses it after,
        so retries never produce a second row.

        Args:
            booking_id: Booking to charge
            user: Requesting user; customers may only pay their own bookings

        Returns:
            Dict with provider, authorization_url and reference (the payment id)

        Raises:
            NotFoundError: Booking does not exist
            PermissionDeniedError: Customer does not own the booking
            PaymentValidationError: Booking is cancelled or already paid
            GatewayError: Paystack rejected or failed the request
        """
        logger = cls.get_logger()

        booking = (
            Booking.objects.select_related("customer", "provider")
            .filter(pk=booking_id)
            .first()
        )
        if booking is None:
            raise NotFoundError("Booking not found", error_code="BOOKING_NOT_FOUND")
        if user.role == UserRole.CUSTOMER and booking.customer_id != user.pk:
            raise PermissionDeniedError("Forbidden: not your booking")
        if booking.status == BookingStatus.CANCELLED:
            raise PaymentValidationError(
                "Cannot pay for a cancelled booking",
                error_code="BOOKING_CANCELLED",
            )
        if booking.payment_status == PaymentStatus.PAID:
            raise PaymentValidationError(
                "Booking is already paid",
                error_code="BOOKING_ALREADY_PAID",
            )

        payment, created = Payment.objects.get_or_create(
            booking=booking,
            defaults={
                "provider": booking.provider,
                "amount": booking.quoted_total,
            },
        )
        if not created and payment.status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
            raise PaymentValidationError(
                f"Payment is already {payment.status}",
                error_code="PAYMENT_ALREADY_SETTLED",
            )

        result = cls.get_gateway().initialize_transaction(
            email=booking.customer.email,
            amount=payment.amount,
            reference=str(payment.id),
            metadata={"booking_id": str(booking.id), "payment_id": str(payment.id)},
        )

        payment.gateway_reference = result.reference
        payment.save(update_fields=["gateway_reference", "updated_at"])
        PaymentEvent.log(
            payment,
            PaymentEventType.PAYMENT_INITIATED,
            payload=result.raw_response,
        )

        logger.info(
            "Payment initiated",
            extra={
                "payment_id": str(payment.id),
                "booking_id": str(booking.id),
                "amount": str(payment.amount),
                "payment_created": created,
            },
        )

        return {
            "provider": Gateway.PAYSTACK.value.lower(),
            "authorization_url": result.authorization_url,
            "reference": str(payment.id),
        }

    # =========================================================================
    # Webhooks
    # =========================================================================

    @classmethod
    def handle_webhook(cls, raw_body: bytes, signature: str | None) -> dict[str, Any]:
        """
        Verify and dispatch a Paystack webhook delivery.

        Nothing is written for a delivery with a bad signature.

        Args:
            raw_body: Request body exactly as received
            signature: Value of the x-paystack-signature header

        Returns:
            Handler result; unknown events return ``{"handled": False}``

        Raises:
            PaymentValidationError: Signature mismatch or malformed payload
        """
        logger = cls.get_logger()

        if not cls.get_gateway().verify_webhook_signature(raw_body, signature):
            logger.warning("Webhook signature verification failed")
            raise PaymentValidationError("Invalid signature", error_code="INVALID_SIGNATURE")

        try:
            event = json.loads(raw_body)
        except (TypeError, ValueError) as e:
            logger.warning("Webhook payload is not valid JSON", extra={"error": str(e)})
            raise PaymentValidationError(
                "Invalid webhook payload",
                error_code="INVALID_PAYLOAD",
            ) from e

        if not isinstance(event, dict) or not event.get("event"):
            raise PaymentValidationError(
                "Invalid webhook payload",
                error_code="INVALID_PAYLOAD",
            )

        return dispatch_webhook(event)

    # =========================================================================
    # Verification
    # =========================================================================

    @classmethod
    def verify_payment(cls, payment_id, user: User) -> dict[str, Any]:
        """
        Ask Paystack for the outcome of a payment and record it.

        "success" marks the payment PAID; any other status marks a PENDING
        or FAILED payment FAILED. PAID and REFUNDED payments are never
        regressed.

        Raises:
            PaymentNotFoundError: Payment does not exist
            PermissionDeniedError: Customer does not own the payment
            GatewayError: Paystack rejected or failed the request
        """
        logger = cls.get_logger()

        payment = get_payment(payment_id)
        if user.role == UserRole.CUSTOMER and payment.booking.customer_id != user.pk:
            raise PermissionDeniedError("Forbidden: not your payment")

        result = cls.get_gateway().verify_transaction(payment.verification_reference)

        with cls.atomic():
            payment = Payment.objects.select_for_update().get(pk=payment.pk)
            previous_status = payment.status

            if result.is_success and can_proceed(payment.mark_paid):
                payment.mark_paid(paid_at=parse_datetime(result.paid_at or ""))
            elif not result.is_success and can_proceed(payment.mark_failed):
                payment.mark_failed()

            if payment.status != previous_status:
                payment.save()
                payment.sync_booking()

            PaymentEvent.log(
                payment,
                PaymentEventType.VERIFICATION,
                payload=result.raw_response,
            )

        logger.info(
            "Payment verified",
            extra={
                "payment_id": str(payment.id),
                "gateway_status": result.status,
                "from_status": previous_status,
                "to_status": payment.status,
            },
        )

        return {
            "status": payment.status,
            "amount": result.amount,
            "reference": result.reference,
            "paid_at": payment.paid_at,
        }
