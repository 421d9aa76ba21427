"""
Raw webhook delivery log.

Every delivery is stored in WebhookLog before it is verified, so
rejected or unknown events can still be inspected. Logging is
best-effort and never blocks processing.

Usage:
    from payments.webhooks.logger import log_webhook_delivery

    log_webhook_delivery(Gateway.PAYSTACK, request)
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from payments.models import WebhookLog

if TYPE_CHECKING:
    from django.http import HttpRequest

logger = logging.getLogger(__name__)


def log_webhook_delivery(gateway: str, request: HttpRequest) -> WebhookLog | None:
    """
    Store a webhook delivery.

    The payload is the parsed JSON body, or ``{"raw": <text>}`` when the
    body is not JSON.

    Returns:
        The WebhookLog, or None if it could not be written
    """
    body = request.body
    try:
        payload = json.loads(body)
    except (TypeError, ValueError):
        payload = {"raw": body.decode("utf-8", errors="replace")}

    try:
        return WebhookLog.objects.create(
            gateway=gateway,
            payload=payload,
            headers=dict(request.headers),
        )
    except Exception:
        logger.exception("Failed to log webhook delivery", extra={"gateway": gateway})
        return None
