"""
Notifications app.

Sends transactional messages (payment received, refund finalized, payout
failed, booking created) through a pluggable NotificationSink. Delivery
is best-effort: a failed message is logged and never aborts the payment,
refund or payout flow that triggered it.

Usage:
    from notifications.services import NotificationService

    NotificationService.notify_payment_success(payment)
"""
