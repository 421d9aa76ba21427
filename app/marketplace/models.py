"""
Marketplace models.

Provider:
    A moving company (or owner-driver) attached to a PROVIDER user.
    Only APPROVED providers take part in the weekly payout batch.
    ``earnings`` is a running total of money paid out to the provider.

Booking:
    A customer's move with one provider. ``quoted_total`` is the amount
    the customer is charged; ``payment_status`` mirrors the status of the
    booking's Payment and is written in the same transaction as it.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import PaymentStatus


# =============================================================================
# Choices
# =============================================================================


class ProviderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending review"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"
    SUSPENDED = "SUSPENDED", "Suspended"


class VehicleType(models.TextChoices):
    SMALL_VAN = "SMALL_VAN", "Small van"
    MEDIUM_TRUCK = "MEDIUM_TRUCK", "Medium truck"
    LARGE_TRUCK = "LARGE_TRUCK", "Large truck"
    OTHER = "OTHER", "Other"


class MoveType(models.TextChoices):
    APARTMENT = "APARTMENT", "Apartment"
    OFFICE = "OFFICE", "Office"
    SINGLE_ITEM = "SINGLE_ITEM", "Single item"
    OTHER = "OTHER", "Other"


class BookingStatus(models.TextChoices):
    """
    Booking lifecycle.

    COMPLETED and CANCELLED are terminal.
    """

    PENDING = "PENDING", "Pending"
    CONFIRMED = "CONFIRMED", "Confirmed"
    IN_PROGRESS = "IN_PROGRESS", "In progress"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"


TERMINAL_BOOKING_STATUSES = frozenset(
    {BookingStatus.COMPLETED, BookingStatus.CANCELLED}
)


# =============================================================================
# Models
# =============================================================================


class Provider(UUIDPrimaryKeyMixin, BaseModel):
    """A moving-service provider."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="provider_profile",
        help_text="PROVIDER account operating this business",
    )
    company = models.CharField(
        max_length=200,
        blank=True,
        default="",
        help_text="Trading name shown to customers",
    )
    status = models.CharField(
        max_length=16,
        choices=ProviderStatus.choices,
        default=ProviderStatus.PENDING,
        db_index=True,
        help_text="Review status; only APPROVED providers are paid out in batches",
    )
    vehicle_type = models.CharField(
        max_length=16,
        choices=VehicleType.choices,
        default=VehicleType.OTHER,
        help_text="Main vehicle used for suggested pricing",
    )
    earnings = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Total amount paid out to this provider",
    )

    class Meta(BaseModel.Meta):
        verbose_name = "provider"
        verbose_name_plural = "providers"

    def __str__(self):
        return self.company or self.user.email


class Booking(UUIDPrimaryKeyMixin, BaseModel):
    """A customer's move with one provider."""

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
        help_text="Customer who booked and pays for the move",
    )
    provider = models.ForeignKey(
        Provider,
        on_delete=models.PROTECT,
        related_name="bookings",
        help_text="Provider performing the move",
    )

    # =========================================================================
    # Move details
    # =========================================================================

    pickup = models.CharField(max_length=255, help_text="Pickup address")
    dropoff = models.CharField(max_length=255, help_text="Drop-off address")
    scheduled_for = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the move is scheduled",
    )
    move_type = models.CharField(
        max_length=16,
        choices=MoveType.choices,
        default=MoveType.APARTMENT,
        help_text="Move type; drives the complexity multiplier",
    )
    vehicle_type = models.CharField(
        max_length=16,
        choices=VehicleType.choices,
        default=VehicleType.OTHER,
        help_text="Vehicle used; drives the per-km rate and load fee",
    )
    distance_km = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        help_text="Route distance in kilometres",
    )
    helpers_count = models.PositiveSmallIntegerField(
        default=0,
        help_text="Number of helpers requested",
    )

    # =========================================================================
    # Pricing
    # =========================================================================

    pricing = models.JSONField(
        default=dict,
        blank=True,
        help_text="Price breakdown produced by marketplace.pricing",
    )
    quoted_total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Amount charged to the customer",
    )

    # =========================================================================
    # Status
    # =========================================================================

    status = models.CharField(
        max_length=16,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
        db_index=True,
        help_text="Booking lifecycle status",
    )
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
        help_text="Mirror of the booking's payment status",
    )

    class Meta(BaseModel.Meta):
        verbose_name = "booking"
        verbose_name_plural = "bookings"

    def __str__(self):
        return f"Booking {self.id} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_BOOKING_STATUSES
