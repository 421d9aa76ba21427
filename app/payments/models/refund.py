"""
Refund model: money going back to the customer.

A refund is created after the gateway accepts the refund request and is
then driven to a final state by the refund poller.

State Flow:
    INITIATED -> COMPLETED (gateway reports success)
    INITIATED -> FAILED (gateway reports failure)
    INITIATED -> STUCK (poll attempts exhausted)
"""

from __future__ import annotations

from django.db import models
from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import Gateway, RefundStatus


class Refund(UUIDPrimaryKeyMixin, BaseModel):
    """
    A refund of a payment.

    Fields:
        payment: Payment being refunded
        amount: Refunded amount (always the full payment amount)
        gateway / gateway_ref: Where the refund lives and how to poll it
        status: Current FSM state
        poll_attempts: Number of status polls so far
        last_polled_at: When the poller last asked the gateway
    """

    payment = models.ForeignKey(
        "payments.Payment",
        on_delete=models.PROTECT,
        related_name="refunds",
        help_text="Payment being refunded",
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Refunded amount in major currency units",
    )
    gateway = models.CharField(
        max_length=16,
        choices=Gateway.choices,
        default=Gateway.PAYSTACK,
        help_text="Gateway processing the refund",
    )
    gateway_ref = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Gateway refund reference",
    )
    status = FSMField(
        default=RefundStatus.INITIATED,
        choices=RefundStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the refund (managed by FSM)",
    )
    poll_attempts = models.PositiveIntegerField(
        default=0,
        help_text="Number of status polls made",
    )
    last_polled_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the gateway was last polled",
    )

    class Meta(BaseModel.Meta):
        verbose_name = "Refund"
        verbose_name_plural = "Refunds"
        constraints = [
            models.UniqueConstraint(
                fields=["payment"],
                condition=models.Q(status=RefundStatus.INITIATED),
                name="unique_open_refund_per_payment",
            ),
        ]

    def __str__(self) -> str:
        return f"Refund({self.id}, {self.status}, {self.amount})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(field=status, source=RefundStatus.INITIATED, target=RefundStatus.COMPLETED)
    def complete(self):
        """Transition: INITIATED -> COMPLETED"""

    @transition(field=status, source=RefundStatus.INITIATED, target=RefundStatus.FAILED)
    def fail(self):
        """Transition: INITIATED -> FAILED"""

    @transition(field=status, source=RefundStatus.INITIATED, target=RefundStatus.STUCK)
    def mark_stuck(self):
        """
        Park a refund the gateway never finalized.

        Transition: INITIATED -> STUCK

        STUCK refunds are not polled again; operators resolve them.
        """

    @property
    def is_terminal(self) -> bool:
        return self.status in RefundStatus.terminal_states()
