"""
Payment card service: provider bank accounts for payouts.

Each card is registered with Paystack as a transfer recipient when it
is added. A provider has at most one default card; switching the default
happens in one transaction with the provider row locked, and the
``unique_default_card_per_provider`` constraint backs it up.

Usage:
    from payments.services import PaymentCardService

    card = PaymentCardService.add_card(
        provider.id,
        user,
        account_number="62812345678",
        account_name="Sipho Movers",
        bank_code="632005",
    )
    PaymentCardService.set_default(provider.id, card.id, user)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import NotFoundError
from core.services import BaseService
from marketplace.models import Provider
from payments.adapters import PaystackAdapter
from payments.exceptions import GatewayError, PaymentValidationError
from payments.models import PaymentCard, bank_name_for
from payments.services.lookups import get_owned_provider

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from authentication.models import User


class PaymentCardService(BaseService):
    """Service for provider payment cards."""

    _gateway: type | None = None

    @classmethod
    def get_gateway(cls) -> type:
        """Get the gateway adapter class."""
        return cls._gateway or PaystackAdapter

    @classmethod
    def set_gateway(cls, gateway: type | None) -> None:
        """Set the gateway adapter class (for testing)."""
        cls._gateway = gateway

    @classmethod
    def add_card(
        cls,
        provider_id,
        user: User,
        account_number: str,
        account_name: str,
        bank_code: str,
    ) -> PaymentCard:
        """
        Register a bank account and create its Paystack transfer recipient.

        The provider's first card becomes the default.

        Raises:
            NotFoundError: Provider does not exist
            PermissionDeniedError: Not the provider or an admin
            PaymentValidationError: Missing fields, or Paystack rejected the account
        """
        logger = cls.get_logger()
        provider = get_owned_provider(provider_id, user)

        missing = [
            name
            for name, value in (
                ("account_number", account_number),
                ("account_name", account_name),
                ("bank_code", bank_code),
            )
            if not value
        ]
        if missing:
            raise PaymentValidationError(
                "Account number, name, and bank code are required",
                error_code="MISSING_CARD_FIELDS",
                details={"missing": missing},
            )

        try:
            recipient = cls.get_gateway().create_transfer_recipient(
                name=account_name,
                account_number=account_number,
                bank_code=bank_code,
            )
        except GatewayError as e:
            logger.warning(
                "Transfer recipient creation failed",
                extra={"provider_id": str(provider.id), "error_code": e.error_code},
            )
            raise PaymentValidationError(
                e.message,
                error_code="RECIPIENT_CREATION_FAILED",
            ) from e

        with cls.atomic():
            Provider.objects.select_for_update().get(pk=provider.pk)
            is_first = not PaymentCard.objects.filter(provider=provider).exists()
            card = PaymentCard.objects.create(
                provider=provider,
                account_number=account_number,
                account_name=account_name,
                bank_code=bank_code,
                bank_name=bank_name_for(bank_code),
                recipient_code=recipient.recipient_code,
                is_default=is_first,
                is_verified=True,
            )

        logger.info(
            "Payment card added",
            extra={
                "provider_id": str(provider.id),
                "card_id": str(card.id),
                "is_default": card.is_default,
            },
        )
        return card

    @classmethod
    def list_cards(cls, provider_id, user: User) -> QuerySet[PaymentCard]:
        """Cards for a provider, default first then newest."""
        provider = get_owned_provider(provider_id, user)
        return PaymentCard.objects.filter(provider=provider).order_by("-is_default", "-created_at")

    @classmethod
    def set_default(cls, provider_id, card_id, user: User) -> PaymentCard:
        """
        Make a card the provider's only default.

        Raises:
            NotFoundError: Provider or card not found
            PermissionDeniedError: Not the provider or an admin
        """
        provider = get_owned_provider(provider_id, user)

        with cls.atomic():
            Provider.objects.select_for_update().get(pk=provider.pk)
            card = cls._get_card(provider, card_id)
            PaymentCard.objects.filter(provider=provider, is_default=True).exclude(
                pk=card.pk
            ).update(is_default=False)
            if not card.is_default:
                card.is_default = True
                card.save(update_fields=["is_default", "updated_at"])

        cls.get_logger().info(
            "Default payment card changed",
            extra={"provider_id": str(provider.id), "card_id": str(card.id)},
        )
        return card

    @classmethod
    def delete_card(cls, provider_id, card_id, user: User) -> None:
        """
        Delete a card.

        The default card can only go when it is the provider's last card.

        Raises:
            NotFoundError: Provider or card not found
            PermissionDeniedError: Not the provider or an admin
            PaymentValidationError: Card is the default and others exist
        """
        provider = get_owned_provider(provider_id, user)

        with cls.atomic():
            Provider.objects.select_for_update().get(pk=provider.pk)
            card = cls._get_card(provider, card_id)
            has_other_cards = (
                PaymentCard.objects.filter(provider=provider).exclude(pk=card.pk).exists()
            )
            if card.is_default and has_other_cards:
                raise PaymentValidationError(
                    "Cannot delete default card. Please set another card as default first.",
                    error_code="DEFAULT_CARD_DELETE",
                )
            card.delete()

        cls.get_logger().info(
            "Payment card deleted",
            extra={"provider_id": str(provider.id), "card_id": str(card_id)},
        )

    @staticmethod
    def _get_card(provider: Provider, card_id) -> PaymentCard:
        card = PaymentCard.objects.filter(provider=provider, pk=card_id).first()
        if card is None:
            raise NotFoundError("Payment card not found", error_code="PAYMENT_CARD_NOT_FOUND")
        return card
