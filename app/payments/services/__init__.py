"""
Payment services for coordinating money movement.

This module provides:
- PaymentService: Charge initiation, webhook handling, verification
- PayoutService: Transfers to providers (single, booking completion, weekly batch)
- PaymentCardService: Provider bank accounts registered for transfers
- RefundService: Refund initiation and status lookup

Every service talks to Paystack through an injectable gateway class
(``set_gateway``) and never calls it inside a database transaction.

Usage:
    from payments.services import PaymentService

    checkout = PaymentService.initiate_payment(booking_id, user=request.user)
    redirect(checkout["authorization_url"])

    from payments.services import RefundService

    refund, created = RefundService.initiate_refund(payment_id)
"""

from payments.services.payment_card_service import PaymentCardService
from payments.services.payment_service import PaymentService
from payments.services.payout_service import PayoutService, net_of_platform_fee
from payments.services.refund_service import RefundService

__all__ = [
    "PaymentCardService",
    "PaymentService",
    "PayoutService",
    "RefundService",
    "net_of_platform_fee",
]
