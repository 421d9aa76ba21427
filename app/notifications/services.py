"""
Notification service layer.

Composes the transactional messages and hands them to the configured
sink. Every method is best-effort: it returns True when the message was
handed off and False otherwise, and logs instead of raising.

Design Principles:
    - Services are stateless (use class methods)
    - The sink is a class attribute with get_/set_ accessors so tests can
      inject a recording sink
    - Callers invoke these after their transaction commits

Usage:
    from notifications.services import NotificationService

    NotificationService.notify_payment_success(payment)
    NotificationService.notify_refund_finalized(refund)
    NotificationService.notify_payout_failed(payout)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.services import BaseService
from notifications.sinks import EmailNotificationSink, NotificationSink
from payments.state_machines import RefundStatus

if TYPE_CHECKING:
    from marketplace.models import Booking
    from payments.models import Payment, Payout, Refund


class NotificationService(BaseService):
    """Transactional notifications for bookings, payments, refunds and payouts."""

    _sink: NotificationSink | None = None

    @classmethod
    def get_sink(cls) -> NotificationSink:
        """Get the delivery sink (email unless one was injected)."""
        if cls._sink is None:
            cls._sink = EmailNotificationSink()
        return cls._sink

    @classmethod
    def set_sink(cls, sink: NotificationSink | None) -> None:
        """Set the delivery sink (None resets to email)."""
        cls._sink = sink

    # =========================================================================
    # Messages
    # =========================================================================

    @classmethod
    def notify_booking_created(cls, booking: Booking) -> bool:
        customer = booking.customer
        provider_user = booking.provider.user
        customer_sent = cls._deliver(
            customer.email,
            "Booking Confirmation",
            (
                f"Hi {customer.display_name}, your booking is confirmed.\n"
                f"Pickup: {booking.pickup}, Dropoff: {booking.dropoff}."
            ),
            context={"booking_id": str(booking.id)},
        )
        provider_sent = cls._deliver(
            provider_user.email,
            "New Booking Assigned",
            (
                f"Hi {booking.provider.company or provider_user.display_name}, "
                f"new booking assigned.\n"
                f"Pickup: {booking.pickup}, Dropoff: {booking.dropoff}."
            ),
            context={"booking_id": str(booking.id)},
        )
        return customer_sent and provider_sent

    @classmethod
    def notify_payment_success(cls, payment: Payment) -> bool:
        """Tell the customer their payment went through."""
        booking = payment.booking
        customer = booking.customer
        return cls._deliver(
            customer.email,
            "Payment Successful",
            (
                f"Hi {customer.display_name}, your payment of {payment.amount} "
                f"was successful.\nBooking ID: {booking.id}."
            ),
            context={"payment_id": str(payment.id)},
        )

    @classmethod
    def notify_refund_finalized(cls, refund: Refund) -> bool:
        """
        Tell the customer a refund reached COMPLETED or FAILED.

        Other statuses (including STUCK) are not customer-facing and are
        skipped.
        """
        customer = refund.payment.booking.customer
        if refund.status == RefundStatus.COMPLETED:
            subject = "Refund Completed"
            body = (
                f"Hi {customer.display_name}, your refund of {refund.amount} "
                f"has been successfully processed.\nReference: {refund.gateway_ref}."
            )
        elif refund.status == RefundStatus.FAILED:
            subject = "Refund Failed"
            body = (
                f"Hi {customer.display_name}, your refund of {refund.amount} "
                f"could not be processed.\n"
                f"Please contact support with reference: {refund.gateway_ref}."
            )
        else:
            cls.get_logger().warning(
                "Refund is not final, no notification sent",
                extra={"refund_id": str(refund.id), "status": refund.status},
            )
            return False

        return cls._deliver(
            customer.email,
            subject,
            body,
            context={"refund_id": str(refund.id)},
        )

    @classmethod
    def notify_payout_failed(cls, payout: Payout) -> bool:
        """Tell the provider a payout did not go through."""
        provider_user = payout.provider.user
        return cls._deliver(
            provider_user.email,
            "Payout Failed",
            (
                f"Hi {payout.provider.company or provider_user.display_name}, "
                f"your payout of {payout.amount} could not be processed.\n"
                f"Please check your bank details. Reference: {payout.id}."
            ),
            context={"payout_id": str(payout.id)},
        )

    # =========================================================================
    # Delivery
    # =========================================================================

    @classmethod
    def _deliver(cls, to: str, subject: str, body: str, context: dict) -> bool:
        logger = cls.get_logger()
        try:
            sent = cls.get_sink().send(to, subject, body)
        except Exception:
            logger.exception(
                "Notification delivery raised",
                extra={**context, "subject": subject},
            )
            return False

        if not sent:
            logger.warning(
                "Notification not delivered",
                extra={**context, "subject": subject},
            )
        return bool(sent)
