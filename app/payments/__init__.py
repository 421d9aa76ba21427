"""
Payments app for Paystack integration.

This app handles:
- Payment initiation, webhook confirmation and verification
- Refund initiation and asynchronous status polling
- Provider payment cards (transfer recipients) and payouts
- The weekly payout batch

Related apps:
    - marketplace: Bookings being paid for, providers being paid out
    - notifications: Payment, refund and payout notifications

Usage:
    from payments.services import PaymentService

    # Open a checkout
    checkout = PaymentService.initiate_payment(booking_id, user)

    # Handle webhook
    PaymentService.handle_webhook(request.body, request.headers.get("x-paystack-signature"))
"""
