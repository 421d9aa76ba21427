"""
Raw log of every webhook delivery, written before any verification.

Kept for debugging and disputes; processing never depends on it.
"""

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import Gateway


class WebhookLog(UUIDPrimaryKeyMixin, BaseModel):
    gateway = models.CharField(
        max_length=16,
        choices=Gateway.choices,
        db_index=True,
        help_text="Gateway the delivery claims to come from",
    )
    payload = models.JSONField(
        default=dict,
        blank=True,
        help_text="Parsed body, or {'raw': text} when it was not JSON",
    )
    headers = models.JSONField(
        default=dict,
        blank=True,
        help_text="Request headers as received",
    )

    class Meta(BaseModel.Meta):
        verbose_name = "Webhook log"
        verbose_name_plural = "Webhook logs"

    def __str__(self) -> str:
        return f"WebhookLog({self.gateway}, {self.created_at})"
