"""Row lookups shared by the payment services."""

from __future__ import annotations

from typing import TYPE_CHECKING

from authentication.permissions import is_owner_or_admin
from core.exceptions import NotFoundError, PermissionDeniedError
from marketplace.models import Provider
from payments.exceptions import PaymentNotFoundError
from payments.models import Payment

if TYPE_CHECKING:
    from authentication.models import User


def get_provider(provider_id) -> Provider:
    """Load a provider or raise NotFoundError."""
    provider = Provider.objects.select_related("user").filter(pk=provider_id).first()
    if provider is None:
        raise NotFoundError("Provider not found", error_code="PROVIDER_NOT_FOUND")
    return provider


def get_owned_provider(provider_id, user: User) -> Provider:
    """
    Load a provider the user may act for.

    Raises:
        NotFoundError: Provider does not exist
        PermissionDeniedError: User is neither the provider nor an admin
    """
    provider = get_provider(provider_id)
    if not is_owner_or_admin(user, provider):
        raise PermissionDeniedError(
            "Forbidden: not your provider account",
            error_code="NOT_PROVIDER_OWNER",
        )
    return provider


def get_payment(payment_id) -> Payment:
    """Load a payment with its booking, or raise PaymentNotFoundError."""
    payment = (
        Payment.objects.select_related("booking", "booking__customer", "provider")
        .filter(pk=payment_id)
        .first()
    )
    if payment is None:
        raise PaymentNotFoundError("Payment not found")
    return payment
