"""
Payout service for sending money to providers.

A payout moves money from the platform's Paystack balance to a
provider's default bank account (PaymentCard with a recipient code).

Payout Lifecycle:
    PENDING -> PROCESSING (Paystack accepted the transfer)
    PENDING -> FAILED (Paystack rejected the transfer)
    PROCESSING -> COMPLETED / FAILED (transfer.* webhooks)

The PENDING row is committed before the transfer call, so a crash in
between leaves a record operators can find rather than a silent gap.

Two entry points build on create_payout():
    - payout_for_completed_booking(): one booking, platform fee deducted
    - process_weekly_payouts(): all uncovered PAID payments of the last
      week per provider, paid gross

Usage:
    from payments.services import PayoutService

    payout = PayoutService.create_payout(provider.id, Decimal("450.00"))

    summary = PayoutService.process_weekly_payouts()
    # {"processed": 3, "succeeded": 2, "failed": 1, "skipped": 0}
"""

from __future__ import annotations

from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from core.services import BaseService
from marketplace.models import Provider, ProviderStatus
from notifications.services import NotificationService
from payments.adapters import PaystackAdapter
from payments.exceptions import GatewayError, PaymentValidationError
from payments.models import Payment, PaymentCard, Payout
from payments.services.lookups import get_owned_provider, get_provider
from payments.state_machines import PaymentStatus, PayoutStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from django.db.models import QuerySet

    from authentication.models import User
    from marketplace.models import Booking


def net_of_platform_fee(amount: Decimal) -> Decimal:
    """Amount left after the platform fee (PLATFORM_FEE_PERCENT), rounded to cents."""
    fee_percent = Decimal(str(settings.PLATFORM_FEE_PERCENT))
    net = Decimal(str(amount)) * (Decimal("100") - fee_percent) / Decimal("100")
    return net.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class PayoutService(BaseService):
    """Service for provider payouts."""

    _gateway: type | None = None

    @classmethod
    def get_gateway(cls) -> type:
        """Get the gateway adapter class."""
        return cls._gateway or PaystackAdapter

    @classmethod
    def set_gateway(cls, gateway: type | None) -> None:
        """Set the gateway adapter class (for testing)."""
        cls._gateway = gateway

    # =========================================================================
    # Single payout
    # =========================================================================

    @classmethod
    def create_payout(
        cls,
        provider_id,
        amount: Decimal,
        reason: str | None = None,
        payments: Iterable[Payment] = (),
    ) -> Payout:
        """
        Transfer an amount to the provider's default bank account.

        Args:
            provider_id: Provider to pay
            amount: Amount in major units
            reason: Transfer narration; defaults to
                "Payout {payout id} for provider {provider id}"
            payments: Payments this payout covers

        Returns:
            The Payout, PROCESSING on success

        Raises:
            NotFoundError: Provider does not exist
            PaymentValidationError: No usable default card, or amount <= 0
            GatewayError: Transfer failed (the payout is left FAILED)
        """
        logger = cls.get_logger()

        provider = get_provider(provider_id)
        amount = Decimal(str(amount))
        if amount <= 0:
            raise PaymentValidationError(
                "Payout amount must be greater than zero",
                error_code="INVALID_PAYOUT_AMOUNT",
                details={"amount": str(amount)},
            )

        card = PaymentCard.objects.filter(provider=provider, is_default=True).first()
        if card is None:
            raise PaymentValidationError(
                "Provider has no default payment account",
                error_code="NO_DEFAULT_PAYMENT_CARD",
            )
        if not card.can_receive_payouts:
            raise PaymentValidationError(
                "Payment account not properly configured",
                error_code="PAYMENT_CARD_NOT_CONFIGURED",
            )

        payout = Payout(provider=provider, payment_card=card, amount=amount)
        payout.reason = reason or f"Payout {payout.id} for provider {provider.id}"
        with cls.atomic():
            payout.save()
            payments = list(payments)
            if payments:
                payout.payments.set(payments)

        logger.info(
            "Payout created",
            extra={
                "payout_id": str(payout.id),
                "provider_id": str(provider.id),
                "amount": str(amount),
                "payment_count": len(payments),
            },
        )

        try:
            result = cls.get_gateway().create_transfer(
                amount=amount,
                recipient_code=card.recipient_code,
                reason=payout.reason,
                reference=str(payout.id),
            )
        except GatewayError as e:
            payout.fail(reason=e.message)
            payout.save()
            logger.error(
                "Payout transfer failed",
                extra={
                    "payout_id": str(payout.id),
                    "provider_id": str(provider.id),
                    "error_code": e.error_code,
                    "gateway_code": e.gateway_code,
                },
            )
            NotificationService.notify_payout_failed(payout)
            raise

        payout.start_processing(
            transfer_code=result.transfer_code,
            reference=result.reference,
        )
        payout.save()

        logger.info(
            "Payout processing",
            extra={
                "payout_id": str(payout.id),
                "transfer_code": result.transfer_code,
                "transfer_status": result.status,
            },
        )
        return payout

    # =========================================================================
    # Booking completion
    # =========================================================================

    @classmethod
    def payout_for_completed_booking(cls, booking: Booking) -> Payout | None:
        """
        Pay the provider for one completed booking, net of the platform fee.

        Returns None (and logs) when there is nothing to pay: no PAID
        payment, a payout already covering it, or no usable default card.
        On success the provider's earnings grow by the net amount.

        Raises:
            GatewayError: Transfer failed; callers log and continue
        """
        logger = cls.get_logger()
        context = {"booking_id": str(booking.id), "provider_id": str(booking.provider_id)}

        payment = Payment.objects.filter(booking=booking).first()
        if payment is None or not payment.is_paid:
            logger.info("No paid payment for completed booking", extra=context)
            return None

        if payment.payouts.filter(status__in=PayoutStatus.active_states()).exists():
            logger.info("Booking payment already paid out", extra=context)
            return None

        card = PaymentCard.objects.filter(provider_id=booking.provider_id, is_default=True).first()
        if card is None or not card.can_receive_payouts:
            logger.warning("Provider has no usable default card, payout skipped", extra=context)
            return None

        net_amount = net_of_platform_fee(payment.amount)
        payout = cls.create_payout(
            booking.provider_id,
            net_amount,
            reason=f"Payout for booking {booking.id}",
            payments=[payment],
        )
        Provider.objects.filter(pk=booking.provider_id).update(
            earnings=F("earnings") + net_amount
        )

        logger.info(
            "Booking payout sent",
            extra={**context, "payout_id": str(payout.id), "net_amount": str(net_amount)},
        )
        return payout

    # =========================================================================
    # Weekly batch
    # =========================================================================

    @classmethod
    def process_weekly_payouts(cls) -> dict[str, Any]:
        """
        Pay every approved provider for last week's uncovered payments.

        Sums PAID payments created within PAYOUT_BATCH_WINDOW_DAYS that no
        PENDING, PROCESSING or COMPLETED payout covers yet. A failure for
        one provider is logged and does not stop the batch.

        Returns:
            Counts of processed, succeeded, failed and skipped providers
        """
        logger = cls.get_logger()
        since = timezone.now() - timedelta(days=settings.PAYOUT_BATCH_WINDOW_DAYS)
        summary = {"processed": 0, "succeeded": 0, "failed": 0, "skipped": 0}

        providers = Provider.objects.filter(
            status=ProviderStatus.APPROVED,
            payment_cards__is_default=True,
        ).distinct()

        for provider in providers:
            summary["processed"] += 1

            payments = list(
                Payment.objects.filter(
                    provider=provider,
                    status=PaymentStatus.PAID,
                    created_at__gte=since,
                ).exclude(payouts__status__in=PayoutStatus.active_states())
            )
            total = sum((payment.amount for payment in payments), Decimal("0.00"))
            if total <= 0:
                summary["skipped"] += 1
                continue

            try:
                cls.create_payout(
                    provider.id,
                    total,
                    reason=f"Weekly payout for provider {provider.id}",
                    payments=payments,
                )
            except Exception:
                logger.exception(
                    "Weekly payout failed",
                    extra={"provider_id": str(provider.id), "amount": str(total)},
                )
                summary["failed"] += 1
                continue

            Provider.objects.filter(pk=provider.pk).update(earnings=F("earnings") + total)
            summary["succeeded"] += 1

        logger.info("Weekly payouts processed", extra=summary)
        return summary

    # =========================================================================
    # Queries
    # =========================================================================

    @classmethod
    def list_provider_payouts(cls, provider_id, user: User) -> QuerySet[Payout]:
        """Payouts for a provider, newest first (owner or admin)."""
        provider = get_owned_provider(provider_id, user)
        return Payout.objects.filter(provider=provider).order_by("-created_at")
