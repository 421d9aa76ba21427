"""
Payout model for tracking money transfers to providers.

A Payout is created in PENDING before the transfer call, so every
attempt is on record even when the gateway rejects it. The payments it
covers are linked through ``payments``; the weekly batch skips payments
already linked to a PENDING, PROCESSING or COMPLETED payout.

Usage:
    payout = Payout.objects.create(
        provider=provider,
        payment_card=card,
        amount=Decimal("450.00"),
        reason="Payout for booking ...",
    )
    payout.payments.add(payment)

    payout.start_processing(transfer_code="TRF_xxx", reference=str(payout.id))
    payout.save()
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone
from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import PayoutStatus


class Payout(UUIDPrimaryKeyMixin, BaseModel):
    """
    Money sent from the platform balance to a provider's bank account.

    State Flow:
        PENDING -> PROCESSING (gateway accepted the transfer)
        PENDING -> FAILED (gateway rejected the transfer)
        PROCESSING -> COMPLETED (transfer.success webhook)
        PROCESSING -> FAILED (transfer.failed / transfer.reversed webhook)

    Fields:
        provider: Provider being paid
        payment_card: Bank account the transfer went to
        payments: Payments this payout covers
        amount: Amount transferred
        status: Current FSM state
        transfer_code: Paystack transfer code (TRF_xxx)
        reference: Transfer reference (the payout id)
        reason: Narration sent with the transfer
        failure_reason: Error details if failed
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    provider = models.ForeignKey(
        "marketplace.Provider",
        on_delete=models.PROTECT,
        related_name="payouts",
        help_text="Provider receiving the payout",
    )
    payment_card = models.ForeignKey(
        "payments.PaymentCard",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payouts",
        help_text="Bank account the transfer was sent to",
    )
    payments = models.ManyToManyField(
        "payments.Payment",
        blank=True,
        related_name="payouts",
        help_text="Payments covered by this payout",
    )

    # ==========================================================================
    # Amount & State
    # ==========================================================================

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Payout amount in major currency units",
    )
    status = FSMField(
        default=PayoutStatus.PENDING,
        choices=PayoutStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the payout (managed by FSM)",
    )

    # ==========================================================================
    # Gateway Integration
    # ==========================================================================

    transfer_code = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
        help_text="Gateway transfer code",
    )
    reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
        help_text="Gateway transfer reference",
    )
    reason = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Narration sent with the transfer",
    )

    # ==========================================================================
    # Timestamps & Error Info
    # ==========================================================================

    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the transfer completed",
    )
    failed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the payout failed",
    )
    failure_reason = models.TextField(
        null=True,
        blank=True,
        help_text="Detailed reason if the payout failed",
    )

    class Meta(BaseModel.Meta):
        verbose_name = "Payout"
        verbose_name_plural = "Payouts"
        indexes = [
            models.Index(fields=["provider", "status"], name="payout_provider_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payout_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Payout({self.id}, {self.status}, {self.amount})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=PayoutStatus.PENDING,
        target=PayoutStatus.PROCESSING,
    )
    def start_processing(self, transfer_code: str, reference: str):
        """
        Record that the gateway accepted the transfer.

        Transition: PENDING -> PROCESSING
        """
        self.transfer_code = transfer_code
        self.reference = reference

    @transition(
        field=status,
        source=PayoutStatus.PROCESSING,
        target=PayoutStatus.COMPLETED,
    )
    def complete(self):
        """
        Mark the transfer as settled.

        Transition: PROCESSING -> COMPLETED
        """
        self.completed_at = timezone.now()

    @transition(
        field=status,
        source=[PayoutStatus.PENDING, PayoutStatus.PROCESSING],
        target=PayoutStatus.FAILED,
    )
    def fail(self, reason: str | None = None):
        """
        Mark the payout as failed.

        Transition: PENDING/PROCESSING -> FAILED

        Args:
            reason: Failure details for operators
        """
        self.failed_at = timezone.now()
        if reason:
            self.failure_reason = reason

    @property
    def is_active(self) -> bool:
        """True while the covered payments count as paid out."""
        return self.status in PayoutStatus.active_states()
