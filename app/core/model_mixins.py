"""
Model mixins combined with core.models.BaseModel.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key
"""

from __future__ import annotations

import uuid

from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of an auto-increment integer.

    Payment ids double as the gateway transaction reference, so they must
    be non-guessable and known before the row reaches the gateway.

    Usage:
        class Payout(UUIDPrimaryKeyMixin, BaseModel):
            amount = models.DecimalField(max_digits=12, decimal_places=2)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True
