"""
Base service layer patterns for business logic encapsulation.

Services encapsulate business logic separate from views and models.
Views handle HTTP concerns, models handle data, services handle logic.

Error Policy:
    Services raise core.exceptions subclasses for expected failures
    (missing rows, guard violations, ownership). The API layer maps them
    to HTTP responses through core.exception_handler, and Celery tasks
    catch them where a failure must not abort a batch.

Usage:
    from core.services import BaseService

    class RefundService(BaseService):
        @classmethod
        def initiate_refund(cls, payment_id):
            with cls.atomic():
                ...
            cls.get_logger().info("Refund initiated", extra={...})
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator


class BaseService:
    """
    Base class for service layer classes.

    Design Notes:
        - Use @classmethod (no instance state)
        - External collaborators (gateway adapter, notification sink) are
          class attributes with get_/set_ accessors so tests can inject doubles
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get a logger named after the service class."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around transaction.atomic() that makes transaction
        boundaries explicit in service code. Never call the payment
        gateway inside this block.
        """
        with transaction.atomic():
            yield
