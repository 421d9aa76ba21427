"""
Paystack API adapter for payment operations.

This module provides the PaystackAdapter class which encapsulates all
Paystack REST calls. Every gateway interaction goes through this adapter
so that timeouts, error translation and logging are consistent.

Features:
- Configurable timeout on all API calls
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Webhook signature verification (HMAC-SHA512)
- Thread-safe for use from Celery workers

Configuration (via settings):
- PAYSTACK_SECRET_KEY: Secret key, also used to sign webhooks
- PAYSTACK_BASE_URL: API root (default: https://api.paystack.co)
- PAYSTACK_API_TIMEOUT_SECONDS: API call timeout (default: 10)
- PAYSTACK_CURRENCY: Currency for transfer recipients (default: ZAR)

Usage:
    from payments.adapters import PaystackAdapter

    result = PaystackAdapter.initialize_transaction(
        email=customer.email,
        amount=payment.amount,
        reference=str(payment.id),
        metadata={"booking_id": str(booking.id)},
    )
    redirect_to(result.authorization_url)

    verification = PaystackAdapter.verify_transaction(str(payment.id))
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import random
import time
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

import httpx
from django.conf import settings

from payments.exceptions import (
    GatewayAPIUnavailableError,
    GatewayError,
    GatewayInvalidRequestError,
    GatewayRateLimitError,
    GatewayTimeoutError,
)

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class TransactionInitResult:
    """
    Result of initializing a Paystack transaction.

    Attributes:
        authorization_url: Hosted checkout page to redirect the customer to
        access_code: Code for the inline checkout widget
        reference: Transaction reference (our payment id)
    """

    authorization_url: str
    access_code: str
    reference: str
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class TransactionVerifyResult:
    """
    Result of verifying a Paystack transaction.

    Attributes:
        status: Paystack transaction status ("success", "failed", "abandoned", ...)
        amount: Amount in major units (Paystack reports minor units)
        reference: Transaction reference
        paid_at: ISO timestamp of payment, if paid
        raw_response: The ``data`` object from Paystack
    """

    status: str
    amount: Decimal
    reference: str
    paid_at: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.status == "success"


@dataclass
class TransferRecipientResult:
    """Result of creating a transfer recipient (a provider's bank account)."""

    recipient_code: str
    account_name: str = ""
    bank_name: str = ""
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class TransferResult:
    """
    Result of a Paystack transfer.

    Attributes:
        transfer_code: Paystack transfer code (TRF_xxx)
        reference: Transfer reference
        status: Transfer status ("pending", "success", "otp", ...)
    """

    transfer_code: str
    reference: str
    status: str
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class RefundResult:
    """
    Result of creating or fetching a Paystack refund.

    Attributes:
        reference: Refund reference used for later polling
        status: Refund status ("pending", "processing", "success", "failed", ...)
        amount: Refunded amount in major units, when reported
    """

    reference: str
    status: str
    amount: Decimal | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Helpers
# =============================================================================


def to_minor_units(amount: Decimal | int | float | str) -> int:
    """Convert a major-unit amount (rand) to Paystack minor units (cents)."""
    cents = (Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


def from_minor_units(amount: int | str | None) -> Decimal | None:
    """Convert Paystack minor units back to a 2-dp major-unit Decimal."""
    if amount is None:
        return None
    return (Decimal(str(amount)) / 100).quantize(Decimal("0.01"))


def backoff_delay(attempt: int, base: float = 1.0, max_delay: float = 60.0) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Jitter prevents thundering herd when multiple workers retry simultaneously.
    The result never exceeds max_delay.

    Args:
        attempt: Current attempt number (1 for the first retry)
        base: Base delay in seconds (default: 1.0)
        max_delay: Maximum delay in seconds (default: 60.0)

    Returns:
        Delay in seconds

    Example:
        # base=60: attempt 1 -> 60-75s, attempt 2 -> 120-150s, attempt 3 -> 240-300s
        delay = backoff_delay(attempt=2, base=60, max_delay=3600)
    """
    exponent = max(attempt - 1, 0)
    delay = min(base * (2**exponent), max_delay)
    jitter = delay * random.uniform(0, 0.25)
    return min(delay + jitter, max_delay)


def is_retryable_gateway_error(error: Exception) -> bool:
    """True if the error is a transient gateway error that can be retried."""
    if isinstance(error, GatewayError):
        return getattr(error, "is_retryable", False)
    return False


# =============================================================================
# Paystack Adapter
# =============================================================================


class PaystackAdapter:
    """
    Adapter for Paystack API operations.

    All methods are classmethods; the only state is a shared httpx client,
    created lazily and replaceable with set_client() (tests pass a client
    backed by httpx.MockTransport).

    Usage:
        result = PaystackAdapter.create_refund(payment.gateway_reference)
        status = PaystackAdapter.fetch_refund(result.reference).status
    """

    _client: httpx.Client | None = None

    # =========================================================================
    # Configuration
    # =========================================================================

    @classmethod
    def get_client(cls) -> httpx.Client:
        """Get or create the HTTP client bound to the Paystack API."""
        if cls._client is None:
            cls._client = httpx.Client(
                base_url=settings.PAYSTACK_BASE_URL,
                timeout=getattr(settings, "PAYSTACK_API_TIMEOUT_SECONDS", 10),
                headers={
                    "Authorization": f"Bearer {settings.PAYSTACK_SECRET_KEY}",
                    "Content-Type": "application/json",
                },
            )
        return cls._client

    @classmethod
    def set_client(cls, client: httpx.Client | None) -> None:
        """Replace the HTTP client (None resets to the lazily built default)."""
        cls._client = client

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    # =========================================================================
    # Transactions
    # =========================================================================

    @classmethod
    def initialize_transaction(
        cls,
        email: str,
        amount: Decimal,
        reference: str,
        metadata: dict[str, Any] | None = None,
        callback_url: str | None = None,
    ) -> TransactionInitResult:
        """
        Start a hosted-checkout transaction.

        Args:
            email: Customer email Paystack sends the receipt to
            amount: Amount in major units
            reference: Our transaction reference (the payment id)
            metadata: Extra data echoed back in webhooks
            callback_url: Where Paystack redirects after checkout

        Raises:
            GatewayInvalidRequestError: Paystack rejected the request
            GatewayAPIUnavailableError: Paystack unreachable or 5xx
            GatewayTimeoutError: Request timed out
        """
        body: dict[str, Any] = {
            "email": email,
            "amount": to_minor_units(amount),
            "reference": reference,
            "metadata": metadata or {},
        }
        callback_url = callback_url or getattr(settings, "PAYSTACK_CALLBACK_URL", "")
        if callback_url:
            body["callback_url"] = callback_url

        data = cls._request(
            "POST",
            "/transaction/initialize",
            json=body,
            log_context={
                "operation": "initialize_transaction",
                "reference": reference,
                "amount": str(amount),
            },
        )
        return TransactionInitResult(
            authorization_url=data.get("authorization_url", ""),
            access_code=data.get("access_code", ""),
            reference=data.get("reference") or reference,
            raw_response=data,
        )

    @classmethod
    def verify_transaction(cls, reference: str) -> TransactionVerifyResult:
        """
        Look up the final state of a transaction.

        Raises:
            GatewayInvalidRequestError: Unknown reference
            GatewayAPIUnavailableError: Paystack unreachable or 5xx
            GatewayTimeoutError: Request timed out
        """
        data = cls._request(
            "GET",
            f"/transaction/verify/{reference}",
            log_context={"operation": "verify_transaction", "reference": reference},
        )
        return TransactionVerifyResult(
            status=data.get("status", ""),
            amount=from_minor_units(data.get("amount")) or Decimal("0.00"),
            reference=data.get("reference") or reference,
            paid_at=data.get("paid_at"),
            raw_response=data,
        )

    # =========================================================================
    # Transfers
    # =========================================================================

    @classmethod
    def create_transfer_recipient(
        cls,
        name: str,
        account_number: str,
        bank_code: str,
        currency: str | None = None,
    ) -> TransferRecipientResult:
        """
        Register a bank account as a transfer recipient.

        Raises:
            GatewayInvalidRequestError: Bank details rejected
        """
        data = cls._request(
            "POST",
            "/transferrecipient",
            json={
                "type": "nuban",
                "name": name,
                "account_number": account_number,
                "bank_code": bank_code,
                "currency": currency or settings.PAYSTACK_CURRENCY,
            },
            log_context={
                "operation": "create_transfer_recipient",
                "bank_code": bank_code,
                "account_last4": account_number[-4:],
            },
        )
        details = data.get("details") or {}
        return TransferRecipientResult(
            recipient_code=data.get("recipient_code", ""),
            account_name=details.get("account_name") or data.get("name", ""),
            bank_name=details.get("bank_name", ""),
            raw_response=data,
        )

    @classmethod
    def create_transfer(
        cls,
        amount: Decimal,
        recipient_code: str,
        reason: str,
        reference: str | None = None,
    ) -> TransferResult:
        """
        Send money from the platform balance to a recipient.

        Args:
            amount: Amount in major units
            recipient_code: Paystack recipient (RCP_xxx)
            reason: Narration shown on the transfer
            reference: Optional unique reference (the payout id)

        Raises:
            GatewayInvalidRequestError: Transfer rejected (bad recipient, balance)
        """
        body: dict[str, Any] = {
            "source": "balance",
            "amount": to_minor_units(amount),
            "recipient": recipient_code,
            "reason": reason,
        }
        if reference:
            body["reference"] = reference

        data = cls._request(
            "POST",
            "/transfer",
            json=body,
            log_context={
                "operation": "create_transfer",
                "amount": str(amount),
                "recipient_code": recipient_code,
                "reference": reference,
            },
        )
        return TransferResult(
            transfer_code=data.get("transfer_code", ""),
            reference=data.get("reference") or reference or "",
            status=data.get("status", ""),
            raw_response=data,
        )

    # =========================================================================
    # Refunds
    # =========================================================================

    @classmethod
    def create_refund(cls, transaction_reference: str) -> RefundResult:
        """
        Refund a transaction in full.

        Raises:
            GatewayInvalidRequestError: Transaction not refundable
        """
        data = cls._request(
            "POST",
            "/refund",
            json={"transaction": transaction_reference},
            log_context={
                "operation": "create_refund",
                "transaction_reference": transaction_reference,
            },
        )
        return cls._to_refund_result(data)

    @classmethod
    def fetch_refund(cls, reference: str) -> RefundResult:
        """Fetch the current state of a refund."""
        data = cls._request(
            "GET",
            f"/refund/{reference}",
            log_context={"operation": "fetch_refund", "reference": reference},
        )
        result = cls._to_refund_result(data)
        if not result.reference:
            result.reference = reference
        return result

    @staticmethod
    def _to_refund_result(data: dict[str, Any]) -> RefundResult:
        reference = data.get("reference") or data.get("id") or ""
        return RefundResult(
            reference=str(reference),
            status=str(data.get("status", "")).lower(),
            amount=from_minor_units(data.get("amount")),
            raw_response=data,
        )

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    @classmethod
    def verify_webhook_signature(cls, payload: bytes, signature: str | None) -> bool:
        """
        Check the x-paystack-signature header against the raw body.

        Paystack signs the exact request bytes with HMAC-SHA512 using the
        secret key; the header carries the hex digest.
        """
        if not signature:
            return False
        expected = hmac.new(
            settings.PAYSTACK_SECRET_KEY.encode(),
            payload,
            hashlib.sha512,
        ).hexdigest()
        return hmac.compare_digest(expected, signature)

    # =========================================================================
    # Transport and Error Handling
    # =========================================================================

    @classmethod
    def _request(
        cls,
        method: str,
        path: str,
        log_context: dict[str, Any],
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send a request and return the ``data`` member of the response.

        Paystack wraps every response as
        ``{"status": bool, "message": str, "data": {...}}``.
        """
        logger = cls.get_logger()
        start_time = time.time()
        logger.info("Starting Paystack operation", extra=log_context)

        try:
            response = cls.get_client().request(method, path, json=json)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_gateway_error(e, log_context, duration_ms)
            raise

        duration_ms = (time.time() - start_time) * 1000

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400 or not isinstance(body, dict) or not body.get("status"):
            cls._handle_error_response(response, body, log_context, duration_ms)

        logger.info(
            "Paystack operation completed",
            extra={
                **log_context,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return body.get("data") or {}

    @classmethod
    def _handle_error_response(
        cls,
        response: httpx.Response,
        body: dict[str, Any] | None,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate an unsuccessful Paystack response to a domain exception.

        Raises:
            GatewayRateLimitError: HTTP 429
            GatewayAPIUnavailableError: HTTP 5xx or a body that is not JSON
            GatewayInvalidRequestError: Other 4xx, or ``"status": false``
        """
        logger = cls.get_logger()
        status_code = response.status_code
        log_context = {
            **log_context,
            "status_code": status_code,
            "duration_ms": duration_ms,
        }
        message = ""
        if isinstance(body, dict):
            message = str(body.get("message") or "")

        if status_code == 429:
            logger.warning("Rate limited by Paystack", extra=log_context)
            raise GatewayRateLimitError(
                "Paystack rate limit exceeded. Please retry.",
                gateway_code="rate_limit",
            )

        if status_code >= 500:
            logger.error(
                "Paystack server error",
                extra={**log_context, "gateway_message": message},
            )
            raise GatewayAPIUnavailableError(
                "Paystack service error. Please retry.",
                gateway_code="api_error",
            )

        if not isinstance(body, dict):
            logger.error("Unreadable response from Paystack", extra=log_context)
            raise GatewayAPIUnavailableError(
                "Unexpected response from Paystack. Please retry.",
                gateway_code="invalid_response",
            )

        logger.error(
            "Request rejected by Paystack",
            extra={**log_context, "gateway_message": message},
        )
        raise GatewayInvalidRequestError(
            message or "Paystack rejected the request",
            gateway_code=str(body.get("code") or status_code),
        )

    @classmethod
    def _handle_gateway_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate transport exceptions to domain exceptions.

        Raises:
            GatewayTimeoutError: Request timed out
            GatewayAPIUnavailableError: Connection failure or unexpected error
        """
        logger = cls.get_logger()
        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, httpx.TimeoutException):
            logger.warning("Paystack request timed out", extra=log_context)
            raise GatewayTimeoutError(
                "Paystack request timed out. Please retry.",
                gateway_code="timeout",
            )

        if isinstance(error, httpx.TransportError):
            logger.error(
                "Connection error to Paystack",
                extra=log_context,
                exc_info=True,
            )
            raise GatewayAPIUnavailableError(
                "Could not connect to Paystack. Please retry.",
                gateway_code="api_connection_error",
            )

        logger.error(
            f"Unexpected error calling Paystack: {type(error).__name__}",
            extra=log_context,
            exc_info=True,
        )
        raise GatewayAPIUnavailableError(
            f"Unexpected Paystack error: {error}",
            gateway_code="unknown_error",
        )
