"""
PaymentCard model: a provider's bank account registered for transfers.

Despite the name (kept from the provider dashboard) a card is a bank
account: account number, holder name and bank code, plus the Paystack
transfer recipient code created for it. A provider has at most one
default card, enforced by a partial unique constraint.
"""

from __future__ import annotations

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

# Branch codes of South African banks supported for payouts
BANK_NAMES: dict[str, str] = {
    "632005": "First National Bank",
    "051001": "Standard Bank",
    "470010": "Capitec Bank",
    "198765": "Nedbank",
    "580105": "Investec Bank",
    "430000": "African Bank",
}

UNKNOWN_BANK = "Unknown Bank"


def bank_name_for(bank_code: str) -> str:
    return BANK_NAMES.get(bank_code, UNKNOWN_BANK)


class PaymentCard(UUIDPrimaryKeyMixin, BaseModel):
    """
    A bank account payouts can be sent to.

    Fields:
        provider: Owning provider
        account_number / account_name / bank_code: Bank details
        bank_name: Display name derived from the bank code
        recipient_code: Paystack transfer recipient (RCP_xxx)
        is_default: Whether payouts go to this account
        is_verified: Whether the gateway accepted the details
    """

    provider = models.ForeignKey(
        "marketplace.Provider",
        on_delete=models.CASCADE,
        related_name="payment_cards",
        help_text="Provider owning this account",
    )
    account_number = models.CharField(max_length=32, help_text="Bank account number")
    account_name = models.CharField(max_length=200, help_text="Account holder name")
    bank_code = models.CharField(max_length=16, help_text="Bank branch code")
    bank_name = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Bank display name",
    )
    recipient_code = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Gateway transfer recipient code",
    )
    is_default = models.BooleanField(
        default=False,
        help_text="Whether payouts are sent to this account",
    )
    is_verified = models.BooleanField(
        default=False,
        help_text="Whether the gateway accepted these bank details",
    )

    class Meta(BaseModel.Meta):
        verbose_name = "Payment card"
        verbose_name_plural = "Payment cards"
        ordering = ["-is_default", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["provider"],
                condition=models.Q(is_default=True),
                name="unique_default_card_per_provider",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.bank_name} {self.masked_account_number}"

    @property
    def masked_account_number(self) -> str:
        return f"****{self.account_number[-4:]}"

    @property
    def can_receive_payouts(self) -> bool:
        return bool(self.recipient_code)
