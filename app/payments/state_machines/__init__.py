"""
State machine enums for payment models.
"""

from payments.state_machines.states import (
    Gateway,
    PaymentEventType,
    PaymentStatus,
    PayoutStatus,
    RefundStatus,
)

__all__ = [
    "Gateway",
    "PaymentEventType",
    "PaymentStatus",
    "PayoutStatus",
    "RefundStatus",
]
