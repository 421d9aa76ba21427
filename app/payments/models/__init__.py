"""
Payment domain models.

This module contains all payment-related models:
- Payment: A customer's charge for a booking
- PaymentEvent: Append-only gateway event log (deduplicates webhooks)
- Refund: Money returned to a customer, finalized by the poller
- Payout: Money sent to a provider's bank account
- PaymentCard: A provider's bank account registered for transfers
- WebhookLog: Raw webhook deliveries
"""

from payments.models.payment import Payment
from payments.models.payment_card import BANK_NAMES, PaymentCard, bank_name_for
from payments.models.payment_event import PaymentEvent
from payments.models.payout import Payout
from payments.models.refund import Refund
from payments.models.webhook_log import WebhookLog

__all__ = [
    "BANK_NAMES",
    "Payment",
    "PaymentCard",
    "PaymentEvent",
    "Payout",
    "Refund",
    "WebhookLog",
    "bank_name_for",
]
