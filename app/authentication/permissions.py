"""
Role policy layer for the API.

Every protected operation has exactly one entry in OPERATION_POLICIES
naming the roles allowed to perform it. Views declare which operation
each HTTP method performs and use OperationPolicy as their permission
class, so the role check runs once at the boundary before any service
code executes:

    class RefundView(APIView):
        permission_classes = [OperationPolicy]
        policy = {"POST": "refund.initiate"}

Ownership (a provider touching only their own cards and payouts, a
customer paying only their own bookings) needs the loaded row and is
checked inside the services with is_owner_or_admin().

Failure modes:
    - unauthenticated: 401 from DRF's authentication layer
    - account not ACTIVE: 403 "Account not active"
    - role not allowed: 403 "Forbidden. Insufficient role."
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import exceptions, permissions

from authentication.models import UserRole

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


CUSTOMER = UserRole.CUSTOMER
PROVIDER = UserRole.PROVIDER
ADMIN = UserRole.ADMIN


OPERATION_POLICIES: dict[str, frozenset[str]] = {
    # Bookings
    "booking.quote": frozenset({CUSTOMER, PROVIDER, ADMIN}),
    "booking.create": frozenset({CUSTOMER}),
    "booking.view": frozenset({CUSTOMER, PROVIDER, ADMIN}),
    "booking.update_status": frozenset({PROVIDER, ADMIN}),
    # Payments
    "payment.initiate": frozenset({CUSTOMER}),
    "payment.verify": frozenset({CUSTOMER, ADMIN}),
    # Refunds
    "refund.initiate": frozenset({ADMIN}),
    "refund.status": frozenset({ADMIN, PROVIDER}),
    # Payment cards
    "payment_card.list": frozenset({PROVIDER, ADMIN}),
    "payment_card.add": frozenset({PROVIDER, ADMIN}),
    "payment_card.set_default": frozenset({PROVIDER, ADMIN}),
    "payment_card.delete": frozenset({PROVIDER, ADMIN}),
    # Payouts
    "payout.create": frozenset({ADMIN}),
    "payout.list": frozenset({PROVIDER, ADMIN}),
}


def is_allowed(user, operation: str) -> bool:
    """
    Check whether a user's role may perform an operation.

    Unknown operations are denied.
    """
    allowed_roles = OPERATION_POLICIES.get(operation)
    if allowed_roles is None:
        return False
    return getattr(user, "role", None) in allowed_roles


def is_owner_or_admin(user, provider) -> bool:
    """True if the user is an admin or the account behind the provider."""
    return user.role == ADMIN or provider.user_id == user.pk


class OperationPolicy(permissions.BasePermission):
    """
    Grants access when the user's role is allowed for the view's operation.

    The view maps HTTP methods to operation names through a ``policy``
    dict. Methods without an entry are denied; HEAD falls back to GET.
    """

    message = "Forbidden. Insufficient role."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if not user.is_account_active:
            raise exceptions.PermissionDenied("Account not active")

        policy = getattr(view, "policy", {})
        operation = policy.get(request.method)
        if operation is None and request.method == "HEAD":
            operation = policy.get("GET")

        return operation is not None and is_allowed(user, operation)
