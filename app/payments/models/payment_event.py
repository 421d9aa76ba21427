"""
Append-only log of everything the gateway told us about a payment.

Events carrying a gateway reference are unique per (gateway, gateway_ref).
That uniqueness is what makes webhook handling idempotent: a redelivered
charge.success finds its event already recorded and changes nothing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import Gateway, PaymentEventType

if TYPE_CHECKING:
    from typing import Any


class PaymentEvent(UUIDPrimaryKeyMixin, BaseModel):
    """
    A single gateway interaction for a payment.

    Fields:
        payment: Payment the event belongs to
        event_type: What happened (initiated, webhook, verification, refund)
        gateway: Gateway the event came from
        gateway_ref: Deduplication key; null for events that may repeat
        payload: Gateway data as received
    """

    payment = models.ForeignKey(
        "payments.Payment",
        on_delete=models.PROTECT,
        related_name="events",
        help_text="Payment this event belongs to",
    )
    event_type = models.CharField(
        max_length=32,
        choices=PaymentEventType.choices,
        db_index=True,
        help_text="Kind of event",
    )
    gateway = models.CharField(
        max_length=16,
        choices=Gateway.choices,
        default=Gateway.PAYSTACK,
        help_text="Gateway the event came from",
    )
    gateway_ref = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Gateway reference used to suppress duplicates",
    )
    payload = models.JSONField(
        default=dict,
        blank=True,
        help_text="Gateway data as received",
    )

    class Meta(BaseModel.Meta):
        verbose_name = "Payment event"
        verbose_name_plural = "Payment events"
        constraints = [
            models.UniqueConstraint(
                fields=["gateway", "gateway_ref"],
                name="unique_payment_event_gateway_ref",
            ),
        ]

    def __str__(self) -> str:
        return f"PaymentEvent({self.event_type}, {self.gateway_ref})"

    @classmethod
    def log(
        cls,
        payment,
        event_type: str,
        payload: dict[str, Any] | None = None,
        gateway_ref: str | None = None,
        gateway: str = Gateway.PAYSTACK,
    ) -> tuple[PaymentEvent, bool]:
        """
        Append an event.

        Events with a gateway_ref are recorded at most once; the second
        element of the result says whether this call created the row.
        """
        payload = payload or {}
        if gateway_ref is None:
            event = cls.objects.create(
                payment=payment,
                event_type=event_type,
                gateway=gateway,
                payload=payload,
            )
            return event, True

        return cls.objects.get_or_create(
            gateway=gateway,
            gateway_ref=gateway_ref,
            defaults={
                "payment": payment,
                "event_type": event_type,
                "payload": payload,
            },
        )
