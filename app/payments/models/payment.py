"""
Payment model: one customer charge per booking.

The payment id doubles as the Paystack transaction reference, so a
payment can be verified even when no gateway reference was stored.

State Flow:
    PENDING -> PAID (charge.success webhook or verification)
    PENDING -> FAILED (verification reports a non-success status)
    FAILED -> PAID (a late success seen on re-verification)
    PAID -> REFUNDED (refund poller sees the refund complete)

Usage:
    payment = Payment.objects.create(
        booking=booking,
        provider=booking.provider,
        amount=booking.quoted_total,
    )

    payment.mark_paid()
    payment.save()
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone
from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import Gateway, PaymentStatus


class Payment(UUIDPrimaryKeyMixin, BaseModel):
    """
    A customer's payment for a booking.

    Fields:
        booking: The booking being paid for (one payment per booking)
        provider: Provider who will be paid out for this booking
        amount: Amount charged, equal to the booking's quoted total
        status: Current FSM state
        gateway_reference: Paystack transaction reference
        refund_reference: Paystack refund reference once a refund starts
        paid_at: When the gateway confirmed the charge
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    booking = models.OneToOneField(
        "marketplace.Booking",
        on_delete=models.PROTECT,
        related_name="payment",
        help_text="Booking this payment settles",
    )
    provider = models.ForeignKey(
        "marketplace.Provider",
        on_delete=models.PROTECT,
        related_name="payments",
        help_text="Provider who performs the booking",
    )

    # ==========================================================================
    # Amount & State
    # ==========================================================================

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Amount charged in major currency units",
    )
    status = FSMField(
        default=PaymentStatus.PENDING,
        choices=PaymentStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the payment (managed by FSM)",
    )

    # ==========================================================================
    # Gateway Integration
    # ==========================================================================

    gateway = models.CharField(
        max_length=16,
        choices=Gateway.choices,
        default=Gateway.PAYSTACK,
        help_text="Gateway processing this payment",
    )
    gateway_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
        help_text="Gateway transaction reference",
    )
    refund_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Gateway refund reference; set once a refund is initiated",
    )
    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the gateway confirmed the charge",
    )

    class Meta(BaseModel.Meta):
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Payment({self.id}, {self.status}, {self.amount})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=[PaymentStatus.PENDING, PaymentStatus.FAILED, PaymentStatus.PAID],
        target=PaymentStatus.PAID,
    )
    def mark_paid(self, paid_at=None):
        """
        Record a confirmed charge.

        Transition: PENDING/FAILED/PAID -> PAID

        Re-marking a PAID payment keeps the original paid_at.
        """
        if self.paid_at is None:
            self.paid_at = paid_at or timezone.now()

    @transition(
        field=status,
        source=[PaymentStatus.PENDING, PaymentStatus.FAILED],
        target=PaymentStatus.FAILED,
    )
    def mark_failed(self):
        """
        Record a charge the gateway did not complete.

        Transition: PENDING/FAILED -> FAILED
        """

    @transition(
        field=status,
        source=PaymentStatus.PAID,
        target=PaymentStatus.REFUNDED,
    )
    def mark_refunded(self):
        """
        Record a completed refund.

        Transition: PAID -> REFUNDED
        """

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID

    @property
    def verification_reference(self) -> str:
        """Reference to verify with: the stored gateway reference, else our id."""
        return self.gateway_reference or str(self.id)

    def sync_booking(self) -> None:
        """Mirror this payment's status onto its booking."""
        self.booking.__class__.objects.filter(pk=self.booking_id).update(
            payment_status=self.status,
            updated_at=timezone.now(),
        )
        self.booking.payment_status = self.status
