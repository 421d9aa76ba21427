"""
Refund service for returning a payment to the customer.

Refunds are always full. Initiation submits the refund to Paystack,
records it as INITIATED and hands it to the refund poller
(payments.tasks.poll_refund_status), which alone finalizes it.

A payment whose refund_reference is set already has a refund in
flight; initiating again returns that refund without calling Paystack.

Usage:
    from payments.services import RefundService

    refund, created = RefundService.initiate_refund(payment.id)
    latest = RefundService.check_refund_status(payment.id, user)
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from authentication.models import UserRole
from core.exceptions import PermissionDeniedError
from core.services import BaseService
from payments.adapters import PaystackAdapter
from payments.exceptions import (
    PaymentNotFoundError,
    PaymentProcessingError,
    PaymentValidationError,
)
from payments.models import Payment, PaymentEvent, Refund
from payments.services.lookups import get_payment
from payments.state_machines import Gateway, PaymentEventType, RefundStatus

if TYPE_CHECKING:
    from authentication.models import User


class RefundService(BaseService):
    """Service for customer refunds."""

    _gateway: type | None = None

    @classmethod
    def get_gateway(cls) -> type:
        """Get the gateway adapter class."""
        return cls._gateway or PaystackAdapter

    @classmethod
    def set_gateway(cls, gateway: type | None) -> None:
        """Set the gateway adapter class (for testing)."""
        cls._gateway = gateway

    @classmethod
    def initiate_refund(cls, payment_id) -> tuple[Refund, bool]:
        """
        Submit a full refund for a PAID payment.

        Returns:
            (refund, created); created is False when a refund was
            already in flight and nothing new was submitted

        Raises:
            PaymentNotFoundError: Payment does not exist
            PaymentValidationError: Payment is not PAID or has no gateway reference
            GatewayError: Paystack rejected or failed the refund
            PaymentProcessingError: The refund was recorded but its poll could not be queued
        """
        logger = cls.get_logger()

        payment = get_payment(payment_id)
        if not payment.is_paid:
            raise PaymentValidationError(
                "Only PAID payments can be refunded",
                error_code="PAYMENT_NOT_REFUNDABLE",
                details={"status": payment.status},
            )

        existing = cls._latest_refund(payment) if payment.refund_reference else None
        if existing is not None:
            logger.info(
                "Refund already initiated",
                extra={"payment_id": str(payment.id), "refund_id": str(existing.id)},
            )
            if cls._poll_was_lost(existing):
                logger.warning(
                    "Refund was never polled, re-queueing",
                    extra={"payment_id": str(payment.id), "refund_id": str(existing.id)},
                )
                cls._enqueue_poll(existing)
            return existing, False

        if not payment.gateway_reference:
            raise PaymentValidationError(
                "Missing gateway reference for refund",
                error_code="MISSING_GATEWAY_REFERENCE",
            )

        result = cls.get_gateway().create_refund(payment.gateway_reference)

        with cls.atomic():
            payment = Payment.objects.select_for_update().get(pk=payment.pk)
            if payment.refund_reference:
                existing = cls._latest_refund(payment)
                if existing is not None:
                    logger.warning(
                        "Concurrent refund initiation, keeping the first refund",
                        extra={
                            "payment_id": str(payment.id),
                            "refund_id": str(existing.id),
                            "discarded_reference": result.reference,
                        },
                    )
                    return existing, False

            refund = Refund.objects.create(
                payment=payment,
                amount=payment.amount,
                gateway=Gateway.PAYSTACK,
                gateway_ref=result.reference,
            )
            payment.refund_reference = result.reference
            payment.save(update_fields=["refund_reference", "updated_at"])
            PaymentEvent.log(
                payment,
                PaymentEventType.REFUND_REQUEST,
                payload=result.raw_response,
            )

        logger.info(
            "Refund initiated",
            extra={
                "payment_id": str(payment.id),
                "refund_id": str(refund.id),
                "refund_reference": refund.gateway_ref,
                "gateway_status": result.status,
            },
        )

        cls._enqueue_poll(refund)
        return refund, True

    @classmethod
    def check_refund_status(cls, payment_id, user: User | None = None) -> Refund:
        """
        Latest refund for a payment.

        Providers may only look at refunds of their own payments.

        Raises:
            PaymentNotFoundError: Payment or refund does not exist
            PermissionDeniedError: Provider does not own the payment
        """
        payment = get_payment(payment_id)
        if (
            user is not None
            and user.role == UserRole.PROVIDER
            and payment.provider.user_id != user.pk
        ):
            raise PermissionDeniedError("Forbidden: not your payment")

        refund = cls._latest_refund(payment)
        if refund is None:
            raise PaymentNotFoundError("No refund found", error_code="REFUND_NOT_FOUND")
        return refund

    @staticmethod
    def _latest_refund(payment: Payment) -> Refund | None:
        return Refund.objects.filter(payment=payment).order_by("-created_at").first()

    @staticmethod
    def _poll_was_lost(refund: Refund) -> bool:
        """
        True for an INITIATED refund whose first poll is overdue.

        The first poll runs REFUND_POLL_BASE_DELAY_SECONDS after creation;
        a refund older than that which was never polled has no poll queued.
        """
        if refund.status != RefundStatus.INITIATED or refund.poll_attempts:
            return False
        due = refund.created_at + timedelta(seconds=settings.REFUND_POLL_BASE_DELAY_SECONDS)
        return timezone.now() >= due

    @classmethod
    def _enqueue_poll(cls, refund: Refund) -> None:
        """
        Hand the refund to the poller.

        Raises:
            PaymentProcessingError: The poll could not be queued. The refund
                stays INITIATED; initiating it again once the first poll is
                overdue queues it again.
        """
        # Import here to avoid circular imports
        from payments.tasks import poll_refund_status

        try:
            poll_refund_status.apply_async(
                kwargs={
                    "refund_id": str(refund.id),
                    "payment_id": str(refund.payment_id),
                    "refund_reference": refund.gateway_ref,
                },
                countdown=settings.REFUND_POLL_BASE_DELAY_SECONDS,
                queue="refunds",
            )
        except Exception as e:
            cls.get_logger().exception(
                "Failed to enqueue refund poll",
                extra={"refund_id": str(refund.id)},
            )
            raise PaymentProcessingError(
                "Refund submitted but status polling could not be scheduled",
                error_code="REFUND_POLL_NOT_SCHEDULED",
                details={"refund_id": str(refund.id)},
            ) from e
