"""
Webhook endpoint views for Paystack.

The view:
1. Logs the raw delivery (WebhookLog)
2. Verifies the x-paystack-signature HMAC over the raw body
3. Dispatches the event synchronously
4. Returns 200 for accepted or ignored events, 400 for bad deliveries

Usage:
    # In urls.py
    from payments.webhooks.views import paystack_webhook

    urlpatterns = [
        path("webhooks/paystack/", paystack_webhook, name="paystack_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.exceptions import PaymentValidationError
from payments.services import PaymentService
from payments.state_machines import Gateway
from payments.webhooks.logger import log_webhook_delivery

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-paystack-signature"


@csrf_exempt
@require_POST
def paystack_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive a Paystack webhook.

    Security:
    - Signature verification prevents spoofed webhooks; nothing but the
      raw delivery log is written before it passes
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Idempotency:
    - charge.success is deduplicated on the transaction reference, so
      Paystack's retries are answered 200 without reprocessing

    Returns:
        JsonResponse with status:
        - 200: Event accepted (handled, duplicate or ignored)
        - 400: Invalid signature or payload
    """
    log_webhook_delivery(Gateway.PAYSTACK, request)

    signature = request.headers.get(SIGNATURE_HEADER)
    try:
        result = PaymentService.handle_webhook(request.body, signature)
    except PaymentValidationError as e:
        return JsonResponse(e.to_dict(), status=400)

    logger.info(
        f"Paystack webhook processed: {result.get('event')}",
        extra={"handled": result.get("handled"), "result": result.get("result")},
    )
    return JsonResponse({"received": True, "handled": result.get("handled", False)})
