"""
Base exception classes for application-wide error handling.

Every domain error carries a machine-readable error code and the HTTP
status it maps to, so the central DRF exception handler
(core.exception_handler) can turn it into a response without the view
knowing about it.

Exception Hierarchy:
    BaseApplicationError (400)
    ├── ValidationError (400) - Input validation failures
    ├── PermissionDeniedError (403) - Authorization failures
    ├── NotFoundError (404) - Resource not found
    ├── ConflictError (409) - State conflicts (duplicates, concurrent modifications)
    ├── RateLimitError (429) - Rate limit exceeded
    └── ExternalServiceError (500) - Third-party service failures

Usage:
    from core.exceptions import NotFoundError, ValidationError

    raise NotFoundError("Booking not found", error_code="BOOKING_NOT_FOUND")

    raise ValidationError(
        "Account number, name, and bank code are required",
        details={"missing": ["bank_code"]},
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        status_code: HTTP status used when the error reaches the API layer
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Payment not found",
                "error_code": "PAYMENT_NOT_FOUND",
                "details": {"payment_id": "..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when service-layer validation fails.

    For request payload validation use DRF serializers; use this for
    business rules checked inside services.
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = 400


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the caller lacks permission for an operation.

    Role checks happen in authentication.permissions before the view runs;
    this is for ownership checks that need the loaded resource.
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403


class NotFoundError(BaseApplicationError):
    """Raised when a requested resource is not found."""

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class ConflictError(BaseApplicationError):
    """Raised when an operation conflicts with current resource state."""

    default_error_code: str = "CONFLICT"
    status_code: int = 409


class RateLimitError(BaseApplicationError):
    """Raised when a rate limit is exceeded."""

    default_error_code: str = "RATE_LIMIT_EXCEEDED"
    status_code: int = 429


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Log the original error for debugging but don't expose
    upstream payloads to clients.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
    status_code: int = 500
