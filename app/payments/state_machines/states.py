"""
State enums for payment models.

These are Django TextChoices used both for database storage and for the
django-fsm fields on Payment, Refund and Payout.

State Machines Overview:

Payment:
    PENDING → PAID (webhook charge.success or verification)
    PENDING → FAILED (verification reports anything but success)
    FAILED → PAID (late success seen on re-verification)
    PAID → REFUNDED (refund poller sees the refund complete)

Refund:
    INITIATED → COMPLETED / FAILED (gateway reports a final status)
    INITIATED → STUCK (poll attempts exhausted, needs an operator)

Payout:
    PENDING → PROCESSING (transfer accepted by the gateway)
    PENDING → FAILED (transfer rejected)
    PROCESSING → COMPLETED / FAILED
"""

from django.db import models


class PaymentStatus(models.TextChoices):
    """
    States for the Payment model.

    Booking.payment_status uses the same values and is written alongside.
    """

    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    FAILED = "FAILED", "Failed"
    REFUNDED = "REFUNDED", "Refunded"


class RefundStatus(models.TextChoices):
    """
    States for the Refund model.

    Terminal states: COMPLETED, FAILED, STUCK
    """

    INITIATED = "INITIATED", "Initiated"
    COMPLETED = "COMPLETED", "Completed"
    FAILED = "FAILED", "Failed"
    STUCK = "STUCK", "Stuck"

    @classmethod
    def terminal_states(cls) -> frozenset:
        return frozenset({cls.COMPLETED, cls.FAILED, cls.STUCK})


class PayoutStatus(models.TextChoices):
    """
    States for the Payout model.

    A payout row exists in PENDING before the transfer call so the
    attempt is always recorded, even when the gateway rejects it.
    """

    PENDING = "PENDING", "Pending"
    PROCESSING = "PROCESSING", "Processing"
    COMPLETED = "COMPLETED", "Completed"
    FAILED = "FAILED", "Failed"

    @classmethod
    def active_states(cls) -> frozenset:
        """States that mean the covered payments are already being paid out."""
        return frozenset({cls.PENDING, cls.PROCESSING, cls.COMPLETED})


class PaymentEventType(models.TextChoices):
    """Kinds of rows in the append-only payment event log."""

    PAYMENT_INITIATED = "PAYMENT_INITIATED", "Payment initiated"
    WEBHOOK_SUCCESS = "WEBHOOK_SUCCESS", "Webhook success"
    VERIFICATION = "VERIFICATION", "Verification"
    REFUND_REQUEST = "REFUND_REQUEST", "Refund request"
    REFUND_UPDATE = "REFUND_UPDATE", "Refund update"


class Gateway(models.TextChoices):
    PAYSTACK = "PAYSTACK", "Paystack"
