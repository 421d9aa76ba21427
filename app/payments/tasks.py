"""
Celery tasks for payment processing.

This module provides async tasks for:
- Polling Paystack until a refund is finalized
- The weekly provider payout batch (scheduled via django-celery-beat)

Usage:
    from payments.tasks import poll_refund_status

    # Queued by RefundService.initiate_refund()
    poll_refund_status.apply_async(
        kwargs={
            "refund_id": str(refund.id),
            "payment_id": str(payment.id),
            "refund_reference": refund.gateway_ref,
        },
        queue="refunds",
    )

    # Normally triggered by celery-beat on Fridays at 10:00
    from payments.tasks import process_weekly_payouts_task
    process_weekly_payouts_task.delay()
"""

from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django_fsm import can_proceed

from notifications.services import NotificationService
from payments.adapters import backoff_delay, is_retryable_gateway_error
from payments.exceptions import GatewayError
from payments.models import Payment, PaymentEvent, Refund
from payments.services import PayoutService, RefundService
from payments.state_machines import PaymentEventType, RefundStatus

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

REFUND_QUEUE = "refunds"

# Paystack refund vocabulary -> Refund.status
GATEWAY_REFUND_STATUSES = {
    "pending": RefundStatus.INITIATED,
    "processing": RefundStatus.INITIATED,
    "success": RefundStatus.COMPLETED,
    "processed": RefundStatus.COMPLETED,
    "failed": RefundStatus.FAILED,
}


def map_refund_status(gateway_status: str | None) -> str:
    """
    Translate a Paystack refund status.

    Unknown values are treated as still in progress.
    """
    status = GATEWAY_REFUND_STATUSES.get((gateway_status or "").lower())
    if status is None:
        logger.warning(
            "Unknown refund status from gateway, treating as in progress",
            extra={"gateway_status": gateway_status},
        )
        return RefundStatus.INITIATED
    return status


# =============================================================================
# Refund Polling
# =============================================================================


@shared_task(acks_late=True)
def poll_refund_status(
    refund_id: str,
    payment_id: str,
    refund_reference: str,
    attempt: int = 1,
) -> dict:
    """
    Poll Paystack once for a refund and record the outcome.

    - success: Refund COMPLETED, Payment REFUNDED, customer notified
    - failed: Refund FAILED, customer notified
    - a permanent gateway error (bad reference): Refund STUCK at once
    - anything else (or a transient gateway error): poll again with exponential
      backoff, until REFUND_POLL_MAX_ATTEMPTS marks the refund STUCK

    Args:
        refund_id: Refund to poll
        payment_id: Payment the refund belongs to
        refund_reference: Paystack refund reference
        attempt: 1-based poll attempt

    Returns:
        Dict with the refund status after this poll
    """
    context = {
        "refund_id": str(refund_id),
        "payment_id": str(payment_id),
        "refund_reference": refund_reference,
        "attempt": attempt,
    }

    refund = Refund.objects.filter(pk=refund_id).first()
    if refund is None:
        logger.error("Refund not found, polling stopped", extra=context)
        return {"status": "not_found", "refund_id": str(refund_id)}

    if refund.is_terminal:
        logger.info(
            "Refund already final, skipping poll",
            extra={**context, "refund_status": refund.status},
        )
        return {"status": "skipped", "refund_status": refund.status}

    gateway_status = None
    try:
        result = RefundService.get_gateway().fetch_refund(refund_reference)
        gateway_status = result.status
        mapped_status = map_refund_status(gateway_status)
    except GatewayError as e:
        if is_retryable_gateway_error(e):
            logger.warning(
                "Refund poll failed, will retry",
                extra={**context, "error_code": e.error_code},
            )
            mapped_status = RefundStatus.INITIATED
        else:
            # Paystack rejected the lookup itself; polling again cannot help
            logger.error(
                "Refund poll rejected by gateway, parking refund",
                extra={**context, "error_code": e.error_code, "gateway_message": e.message},
            )
            mapped_status = RefundStatus.STUCK

    refund, changed = _record_poll(refund_id, mapped_status, attempt, gateway_status)

    if not changed and refund.is_terminal:
        logger.info(
            "Refund finalized by another poll",
            extra={**context, "refund_status": refund.status},
        )
        return {"status": "skipped", "refund_status": refund.status}

    if refund.status in (RefundStatus.COMPLETED, RefundStatus.FAILED):
        logger.info("Refund finalized", extra={**context, "refund_status": refund.status})
        NotificationService.notify_refund_finalized(refund)
        return {"status": refund.status, "refund_id": str(refund.id)}

    if refund.status == RefundStatus.STUCK:
        logger.error(
            "Refund stuck, operator action required",
            extra={**context, "max_attempts": settings.REFUND_POLL_MAX_ATTEMPTS},
        )
        return {"status": refund.status, "refund_id": str(refund.id)}

    delay = backoff_delay(
        attempt,
        base=settings.REFUND_POLL_BASE_DELAY_SECONDS,
        max_delay=settings.REFUND_POLL_MAX_DELAY_SECONDS,
    )
    poll_refund_status.apply_async(
        kwargs={
            "refund_id": str(refund_id),
            "payment_id": str(payment_id),
            "refund_reference": refund_reference,
            "attempt": attempt + 1,
        },
        countdown=delay,
        queue=REFUND_QUEUE,
    )
    logger.info(
        "Refund still in progress, poll re-enqueued",
        extra={**context, "gateway_status": gateway_status, "delay_seconds": round(delay, 1)},
    )
    return {"status": refund.status, "refund_id": str(refund.id), "next_attempt": attempt + 1}


def _record_poll(
    refund_id, mapped_status: str, attempt: int, gateway_status: str | None
) -> tuple[Refund, bool]:
    """
    Apply one poll result to the refund (and its payment) in one transaction.

    Returns the refund and whether this poll moved it to a final state.
    A refund some other delivery already finalized is returned untouched.
    """
    with transaction.atomic():
        refund = Refund.objects.select_for_update().get(pk=refund_id)
        if refund.is_terminal:
            return refund, False

        refund.poll_attempts = attempt
        refund.last_polled_at = timezone.now()

        if mapped_status == RefundStatus.COMPLETED:
            refund.complete()
            payment = Payment.objects.select_for_update().get(pk=refund.payment_id)
            if can_proceed(payment.mark_refunded):
                payment.mark_refunded()
                payment.save()
                payment.sync_booking()
        elif mapped_status == RefundStatus.FAILED:
            refund.fail()
        elif mapped_status == RefundStatus.STUCK or attempt >= settings.REFUND_POLL_MAX_ATTEMPTS:
            refund.mark_stuck()

        refund.save()

        if refund.status == RefundStatus.INITIATED:
            return refund, False

        PaymentEvent.log(
            refund.payment,
            PaymentEventType.REFUND_UPDATE,
            payload={
                "refund_id": str(refund.id),
                "status": refund.status,
                "gateway_status": gateway_status,
                "attempt": attempt,
            },
        )

    return refund, True


# =============================================================================
# Payout Tasks
# =============================================================================


@shared_task
def process_weekly_payouts_task() -> dict:
    """
    Run the weekly provider payout batch.

    Scheduled via django-celery-beat (Friday 10:00).

    Returns:
        Batch summary from PayoutService.process_weekly_payouts()
    """
    logger.info("Starting weekly payout batch")
    return PayoutService.process_weekly_payouts()
