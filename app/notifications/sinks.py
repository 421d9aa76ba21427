"""
Notification sinks (delivery channels).

A sink is anything with ``send(to, subject, body) -> bool``. The contract:
return True when the message was handed off, False when it was not, and
never let a delivery problem escape to the caller.

Available Sinks:
    EmailNotificationSink: Django's email backend (SMTP in production)

Usage:
    from notifications.sinks import EmailNotificationSink, NotificationSink

    sink: NotificationSink = EmailNotificationSink()
    sink.send("thandi@example.com", "Payment Successful", "Hi Thandi, ...")

    # Any object with a matching send() works, e.g. in tests
    class RecordingSink:
        def __init__(self):
            self.sent = []

        def send(self, to, subject, body):
            self.sent.append((to, subject, body))
            return True
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


@runtime_checkable
class NotificationSink(Protocol):
    """
    Protocol for notification delivery channels.

    Any class implementing this protocol can be used
    where NotificationSink is expected.
    """

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Deliver a message.

        Args:
            to: Recipient address
            subject: Message subject
            body: Plain text body

        Returns:
            True if the message was handed off for delivery
        """
        ...


class EmailNotificationSink:
    """Send notifications as plain-text email via Django's mail backend."""

    def __init__(self, from_email: str | None = None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def send(self, to: str, subject: str, body: str) -> bool:
        try:
            sent = send_mail(
                subject=subject,
                message=body,
                from_email=self.from_email,
                recipient_list=[to],
            )
        except Exception:
            logger.exception(
                "Email delivery failed",
                extra={"to": to, "subject": subject},
            )
            return False

        logger.info("Email sent", extra={"to": to, "subject": subject})
        return sent > 0
