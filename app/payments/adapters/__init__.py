"""
Payment adapters for external services.

All Paystack API calls go through PaystackAdapter so error handling,
timeouts and logging stay consistent.

Usage:
    from payments.adapters import PaystackAdapter

    result = PaystackAdapter.verify_transaction(reference)
    if result.is_success:
        ...
"""

from payments.adapters.paystack_adapter import (
    PaystackAdapter,
    RefundResult,
    TransactionInitResult,
    TransactionVerifyResult,
    TransferRecipientResult,
    TransferResult,
    backoff_delay,
    from_minor_units,
    is_retryable_gateway_error,
    to_minor_units,
)

__all__ = [
    "PaystackAdapter",
    "RefundResult",
    "TransactionInitResult",
    "TransactionVerifyResult",
    "TransferRecipientResult",
    "TransferResult",
    "backoff_delay",
    "from_minor_units",
    "is_retryable_gateway_error",
    "to_minor_units",
]
