"""
Payments app configuration.

This app provides the money movement of the marketplace:
- Customer charges through Paystack hosted checkout
- Refunds finalized by a polling worker
- Provider payouts to registered bank accounts
- Webhook handling
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
