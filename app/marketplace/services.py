"""
Booking service.

Creates priced bookings, enforces who may see or move a booking, and
hands completed paid bookings to the payout orchestrator.

Usage:
    from marketplace.services import BookingService

    booking = BookingService.create_booking(
        customer=request.user,
        provider_id=provider.id,
        pickup="12 Long St, Cape Town",
        dropoff="4 Main Rd, Rondebosch",
        distance_km=Decimal("8.4"),
        vehicle_type=VehicleType.SMALL_VAN,
    )
    BookingService.update_status(booking.id, BookingStatus.COMPLETED, user)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from authentication.models import UserRole
from core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.services import BaseService
from marketplace.models import (
    Booking,
    BookingStatus,
    MoveType,
    Provider,
    ProviderStatus,
)
from marketplace.pricing import quote_booking
from notifications.services import NotificationService
from payments.state_machines import PaymentStatus

if TYPE_CHECKING:
    from datetime import datetime
    from decimal import Decimal

    from django.db.models import QuerySet

    from authentication.models import User


class BookingService(BaseService):
    """Business logic for bookings."""

    @classmethod
    def create_booking(
        cls,
        customer: User,
        provider_id,
        pickup: str,
        dropoff: str,
        distance_km: Decimal,
        vehicle_type: str,
        move_type: str = MoveType.APARTMENT,
        helpers_count: int = 0,
        scheduled_for: datetime | None = None,
    ) -> Booking:
        """
        Create a booking priced with the vehicle's suggested rates.

        Raises:
            NotFoundError: Provider does not exist
            ValidationError: Provider is not APPROVED
        """
        provider = Provider.objects.filter(pk=provider_id).first()
        if provider is None:
            raise NotFoundError("Provider not found", error_code="PROVIDER_NOT_FOUND")
        if provider.status != ProviderStatus.APPROVED:
            raise ValidationError(
                "Provider is not accepting bookings",
                error_code="PROVIDER_NOT_APPROVED",
            )

        breakdown = quote_booking(
            distance_km=distance_km,
            vehicle_type=vehicle_type,
            move_type=move_type,
            helpers_count=helpers_count,
        )

        booking = Booking.objects.create(
            customer=customer,
            provider=provider,
            pickup=pickup,
            dropoff=dropoff,
            scheduled_for=scheduled_for,
            move_type=move_type,
            vehicle_type=vehicle_type,
            distance_km=breakdown.distance_km,
            helpers_count=helpers_count,
            pricing=breakdown.to_dict(),
            quoted_total=breakdown.total,
        )

        cls.get_logger().info(
            "Booking created",
            extra={
                "booking_id": str(booking.id),
                "provider_id": str(provider.id),
                "quoted_total": str(booking.quoted_total),
            },
        )
        NotificationService.notify_booking_created(booking)
        return booking

    @classmethod
    def get_booking(cls, booking_id, user: User) -> Booking:
        """
        Load a booking the user takes part in.

        Raises:
            NotFoundError: Booking does not exist
            PermissionDeniedError: User is neither a participant nor an admin
        """
        booking = (
            Booking.objects.select_related("customer", "provider__user")
            .filter(pk=booking_id)
            .first()
        )
        if booking is None:
            raise NotFoundError("Booking not found", error_code="BOOKING_NOT_FOUND")
        if not cls._is_participant(booking, user):
            raise PermissionDeniedError("Forbidden: not your booking")
        return booking

    @classmethod
    def list_bookings(cls, user: User) -> QuerySet[Booking]:
        """Admins see every booking; customers and providers see their own."""
        queryset = Booking.objects.select_related("customer", "provider__user")
        if user.role == UserRole.ADMIN:
            return queryset
        if user.role == UserRole.PROVIDER:
            return queryset.filter(provider__user=user)
        return queryset.filter(customer=user)

    @classmethod
    def update_status(cls, booking_id, status: str, user: User) -> Booking:
        """
        Move a booking to a new status.

        Only the booking's provider or an admin may do this. Finished
        bookings (COMPLETED, CANCELLED) are frozen. Completing a PAID
        booking pays the provider the quoted total less the platform fee;
        a payout failure is logged and never blocks the completion.

        Raises:
            NotFoundError: Booking does not exist
            PermissionDeniedError: User does not own the booking
            ConflictError: Booking is already COMPLETED or CANCELLED
        """
        with cls.atomic():
            booking = (
                Booking.objects.select_for_update()
                .select_related("provider")
                .filter(pk=booking_id)
                .first()
            )
            if booking is None:
                raise NotFoundError(
                    "Booking not found", error_code="BOOKING_NOT_FOUND"
                )
            if user.role != UserRole.ADMIN and booking.provider.user_id != user.pk:
                raise PermissionDeniedError("Forbidden: not your booking")
            if booking.is_terminal:
                raise ConflictError(
                    f"Booking is already {booking.status}",
                    error_code="BOOKING_FINISHED",
                )

            previous_status = booking.status
            booking.status = status
            booking.save(update_fields=["status", "updated_at"])

        cls.get_logger().info(
            "Booking status updated",
            extra={
                "booking_id": str(booking.id),
                "from_status": previous_status,
                "to_status": status,
            },
        )

        if (
            status == BookingStatus.COMPLETED
            and booking.payment_status == PaymentStatus.PAID
        ):
            cls._pay_out_completed_booking(booking)

        return booking

    @classmethod
    def _pay_out_completed_booking(cls, booking: Booking) -> None:
        from payments.services import PayoutService

        try:
            PayoutService.payout_for_completed_booking(booking)
        except Exception:
            cls.get_logger().exception(
                "Payout for completed booking failed",
                extra={
                    "booking_id": str(booking.id),
                    "provider_id": str(booking.provider_id),
                },
            )

    @staticmethod
    def _is_participant(booking: Booking, user: User) -> bool:
        if user.role == UserRole.ADMIN:
            return True
        if user.role == UserRole.PROVIDER:
            return booking.provider.user_id == user.pk
        return booking.customer_id == user.pk
