"""
Webhook event handlers for Paystack events.

This module provides a handler registry and implementations for the
Paystack events the platform acts on:

    charge.success     -> Payment PAID, booking mirrored, customer notified
    transfer.success   -> Payout COMPLETED
    transfer.failed    -> Payout FAILED, provider notified
    transfer.reversed  -> Payout FAILED, provider notified

Unregistered events are accepted and ignored.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    # Register a custom handler
    @register_handler("refund.processed")
    def handle_refund_processed(event: dict) -> dict:
        ...

    # Dispatch a parsed event to its handler
    result = dispatch_webhook({"event": "charge.success", "data": {...}})
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable

from django.db import transaction
from django.db.models import F
from django.utils.dateparse import parse_datetime
from django_fsm import can_proceed

from marketplace.models import Provider
from notifications.services import NotificationService
from payments.models import Payment, PaymentEvent, Payout
from payments.state_machines import PaymentEventType, PayoutStatus

logger = logging.getLogger(__name__)


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {}


def register_handler(event_type: str) -> Callable:
    """
    Decorator to register a webhook event handler.

    Args:
        event_type: The Paystack event type (e.g., "charge.success")

    Returns:
        Decorator function that registers the handler
    """

    def decorator(func: Callable[[dict[str, Any]], dict[str, Any]]) -> Callable:
        WEBHOOK_HANDLERS[event_type] = func
        logger.debug(f"Registered webhook handler for {event_type}")
        return func

    return decorator


def dispatch_webhook(event: dict[str, Any]) -> dict[str, Any]:
    """
    Dispatch a parsed webhook event to the appropriate handler.

    If no handler is registered, logs and returns ``handled: False``
    (unknown events must not fail the delivery).
    """
    event_type = event.get("event", "")
    handler = WEBHOOK_HANDLERS.get(event_type)

    if not handler:
        logger.info(f"No handler registered for event type: {event_type}")
        return {"event": event_type, "handled": False}

    logger.info(f"Dispatching {event_type} to handler")
    result = handler(event)
    return {"event": event_type, "handled": True, **result}


# =============================================================================
# Charge Handlers
# =============================================================================


def _find_payment(reference: str, metadata: Any) -> Payment | None:
    """Match a charge to a payment by gateway reference, then by booking id."""
    payment = Payment.objects.filter(gateway_reference=reference).first()
    if payment is not None:
        return payment

    # Paystack passes metadata through as sent; it may be a string or list
    if not isinstance(metadata, dict):
        return None
    booking_id = metadata.get("booking_id")
    try:
        booking_id = uuid.UUID(str(booking_id))
    except ValueError:
        return None
    return Payment.objects.filter(booking_id=booking_id).first()


@register_handler("charge.success")
def handle_charge_success(event: dict[str, Any]) -> dict[str, Any]:
    """
    Handle a successful charge.

    The WEBHOOK_SUCCESS event is keyed by (gateway, reference), so a
    redelivered webhook finds the event already logged and changes
    nothing.
    """
    data = event.get("data") or {}
    reference = data.get("reference")

    if not reference:
        logger.error("charge.success: missing reference")
        return {"result": "missing_reference"}

    payment = _find_payment(reference, data.get("metadata"))
    if payment is None:
        logger.warning("charge.success: no matching payment", extra={"reference": reference})
        return {"result": "payment_not_found"}

    with transaction.atomic():
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        _, created = PaymentEvent.log(
            payment,
            PaymentEventType.WEBHOOK_SUCCESS,
            payload=event,
            gateway_ref=reference,
        )
        if not created:
            logger.info(
                "charge.success: duplicate delivery ignored",
                extra={"payment_id": str(payment.id), "reference": reference},
            )
            return {"result": "duplicate"}

        if not can_proceed(payment.mark_paid):
            logger.warning(
                "charge.success: payment cannot be marked paid",
                extra={"payment_id": str(payment.id), "status": payment.status},
            )
            return {"result": "ignored"}

        payment.mark_paid(paid_at=parse_datetime(data.get("paid_at") or ""))
        payment.save()
        payment.sync_booking()

    logger.info(
        "Payment confirmed by webhook",
        extra={"payment_id": str(payment.id), "booking_id": str(payment.booking_id)},
    )
    NotificationService.notify_payment_success(payment)
    return {"result": "paid", "payment_id": str(payment.id)}


# =============================================================================
# Transfer Handlers
# =============================================================================


def _find_payout(data: dict[str, Any]) -> Payout | None:
    transfer_code = data.get("transfer_code")
    if transfer_code:
        payout = Payout.objects.filter(transfer_code=transfer_code).first()
        if payout is not None:
            return payout
    reference = data.get("reference")
    if reference:
        return Payout.objects.filter(reference=reference).first()
    return None


@register_handler("transfer.success")
def handle_transfer_success(event: dict[str, Any]) -> dict[str, Any]:
    """Mark a PROCESSING payout COMPLETED."""
    payout = _find_payout(event.get("data") or {})
    if payout is None:
        logger.warning("transfer.success: no matching payout")
        return {"result": "payout_not_found"}

    with transaction.atomic():
        payout = Payout.objects.select_for_update().get(pk=payout.pk)
        if not can_proceed(payout.complete):
            logger.info(
                "transfer.success: payout not processing, ignored",
                extra={"payout_id": str(payout.id), "status": payout.status},
            )
            return {"result": "ignored"}
        payout.complete()
        payout.save()

    logger.info("Payout completed", extra={"payout_id": str(payout.id)})
    return {"result": "completed", "payout_id": str(payout.id)}


@register_handler("transfer.failed")
@register_handler("transfer.reversed")
def handle_transfer_failed(event: dict[str, Any]) -> dict[str, Any]:
    """
    Mark a payout FAILED after Paystack gave up on the transfer.

    The provider's earnings are reduced by the amount that never arrived
    and the covered payments become eligible for the next weekly batch.
    """
    data = event.get("data") or {}
    payout = _find_payout(data)
    if payout is None:
        logger.warning(f"{event.get('event')}: no matching payout")
        return {"result": "payout_not_found"}

    with transaction.atomic():
        payout = Payout.objects.select_for_update().get(pk=payout.pk)
        if not can_proceed(payout.fail):
            logger.info(
                "Transfer failure for a settled payout ignored",
                extra={"payout_id": str(payout.id), "status": payout.status},
            )
            return {"result": "ignored"}

        was_processing = payout.status == PayoutStatus.PROCESSING
        payout.fail(reason=data.get("reason") or event.get("event"))
        payout.save()
        if was_processing:
            Provider.objects.filter(pk=payout.provider_id).update(
                earnings=F("earnings") - payout.amount
            )

    logger.error(
        "Payout failed by gateway",
        extra={"payout_id": str(payout.id), "event": event.get("event")},
    )
    NotificationService.notify_payout_failed(payout)
    return {"result": "failed", "payout_id": str(payout.id)}
