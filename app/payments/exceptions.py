"""
Payment-specific exceptions.

Exception Hierarchy:
    PaymentError (400, base for the payment domain)
    ├── PaymentNotFoundError (404) - Payment, refund, card or provider lookups
    ├── PaymentValidationError (400) - Guard violations (wrong status, no card)
    └── PaymentProcessingError (500) - Gateway-side failures
        └── GatewayError - Base for all Paystack errors
            ├── GatewayInvalidRequestError (400) - Rejected request (permanent)
            ├── GatewayRateLimitError - Rate limited (transient, retry)
            ├── GatewayAPIUnavailableError - Network error or 5xx (transient, retry)
            └── GatewayTimeoutError - Request timeout (transient, retry)

    InvalidStateTransitionError (409) - FSM transition not allowed

Usage:
    from payments.exceptions import GatewayError, PaymentValidationError

    if payment.status != PaymentStatus.PAID:
        raise PaymentValidationError("Only PAID payments can be refunded")

    try:
        PaystackAdapter.fetch_refund(reference)
    except GatewayError as e:
        if e.is_retryable:
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    Inherits from BaseApplicationError so the central exception handler
    renders it with the standard error envelope.
    """

    default_error_code: str = "PAYMENT_ERROR"
    status_code: int = 400


class PaymentNotFoundError(PaymentError):
    """
    Raised when a payment entity cannot be found.

    Use for:
    - Payment lookup fails
    - No refund exists for a payment
    - Provider or payment card lookup fails

    Example:
        payment = Payment.objects.filter(id=payment_id).first()
        if payment is None:
            raise PaymentNotFoundError(
                "Payment not found",
                details={"payment_id": str(payment_id)},
            )
    """

    default_error_code: str = "PAYMENT_NOT_FOUND"
    status_code: int = 404


class PaymentValidationError(PaymentError):
    """
    Raised when a payment business rule is violated.

    Use for:
    - Refunding a payment that is not PAID
    - Paying out to a provider without a usable default card
    - Non-positive payout amounts
    - Missing bank details
    """

    default_error_code: str = "PAYMENT_VALIDATION_ERROR"
    status_code: int = 400


class PaymentProcessingError(PaymentError):
    """Raised when payment processing fails outside our control."""

    default_error_code: str = "PAYMENT_PROCESSING_ERROR"
    status_code: int = 500


# =============================================================================
# Gateway Exceptions
# =============================================================================


class GatewayError(PaymentProcessingError):
    """
    Base exception for all Paystack errors.

    Attributes:
        gateway_code: Paystack's error code or our classification of it
        is_retryable: Whether the same call may succeed later

    Use is_retryable to determine retry behavior:
    - True: Transient error, safe to retry with backoff
    - False: Permanent error, do not retry
    """

    default_error_code: str = "GATEWAY_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        gateway_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if gateway_code:
            details["gateway_code"] = gateway_code
        super().__init__(message, error_code=error_code, details=details)
        self.gateway_code = gateway_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class GatewayInvalidRequestError(GatewayError):
    """
    Paystack rejected the request.

    Covers 4xx responses and 200 responses whose body says
    ``"status": false``: unknown transaction references, bad bank
    details, invalid keys. The message is Paystack's own and is safe to
    show to the caller.
    """

    default_error_code: str = "GATEWAY_INVALID_REQUEST"
    status_code: int = 400
    is_retryable: bool = False


# -----------------------------------------------------------------------------
# Transient Errors (safe to retry with backoff)
# -----------------------------------------------------------------------------


class GatewayRateLimitError(GatewayError):
    """Rate limited by Paystack (HTTP 429)."""

    default_error_code: str = "GATEWAY_RATE_LIMITED"
    is_retryable: bool = True


class GatewayAPIUnavailableError(GatewayError):
    """
    Paystack is temporarily unreachable.

    This covers:
    - Network connectivity issues
    - Paystack server errors (5xx)
    - Responses that are not JSON
    """

    default_error_code: str = "GATEWAY_UNAVAILABLE"
    is_retryable: bool = True


class GatewayTimeoutError(GatewayError):
    """
    Paystack call timed out.

    The request may have been processed on Paystack's side; callers that
    retry must be idempotent (payment ids double as transaction
    references for exactly this reason).
    """

    default_error_code: str = "GATEWAY_TIMEOUT"
    is_retryable: bool = True


# =============================================================================
# State Machine Exceptions
# =============================================================================


class InvalidStateTransitionError(ConflictError):
    """
    Raised when a state machine transition is not allowed.

    Wraps django-fsm's TransitionNotAllowed in the standard error format.

    Example:
        from django_fsm import TransitionNotAllowed

        try:
            payment.mark_refunded()
        except TransitionNotAllowed:
            raise InvalidStateTransitionError(
                f"Cannot refund payment in '{payment.status}' state",
                details={"current_state": payment.status, "transition": "mark_refunded"},
            )
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Payment domain
    "PaymentError",
    "PaymentNotFoundError",
    "PaymentValidationError",
    "PaymentProcessingError",
    # Gateway
    "GatewayError",
    "GatewayInvalidRequestError",
    "GatewayRateLimitError",
    "GatewayAPIUnavailableError",
    "GatewayTimeoutError",
    # State machines
    "InvalidStateTransitionError",
]
