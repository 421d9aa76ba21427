"""
Tests for BookingService.

Tests cover:
- Pricing and notifications on creation
- Participant-only access
- Status updates and the payout on completing a paid booking
"""

import uuid
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from marketplace.models import Booking, BookingStatus, Provider, ProviderStatus, VehicleType
from marketplace.services import BookingService
from marketplace.tests.factories import BookingFactory, ProviderFactory
from payments.adapters import TransferResult
from payments.exceptions import GatewayAPIUnavailableError
from payments.models import Payout
from payments.services import PayoutService
from payments.state_machines import PaymentStatus, PayoutStatus


@pytest.fixture
def transfer_gateway():
    gateway = MagicMock()
    gateway.create_transfer.return_value = TransferResult(
        transfer_code="TRF_done", reference="po_done", status="pending"
    )
    PayoutService.set_gateway(gateway)
    yield gateway
    PayoutService.set_gateway(None)


@pytest.mark.django_db
class TestCreateBooking:
    def test_prices_with_suggested_rates(self, customer, provider):
        booking = BookingService.create_booking(
            customer=customer,
            provider_id=provider.id,
            pickup="12 Long St, Cape Town",
            dropoff="4 Main Rd, Rondebosch",
            distance_km=Decimal("10"),
            vehicle_type=VehicleType.SMALL_VAN,
        )

        assert booking.quoted_total == Decimal("490.00")
        assert booking.pricing["total"] == "490.00"
        assert booking.status == BookingStatus.PENDING
        assert booking.payment_status == PaymentStatus.PENDING

    def test_notifies_customer_and_provider(self, customer, provider, notification_sink):
        BookingService.create_booking(
            customer=customer,
            provider_id=provider.id,
            pickup="A",
            dropoff="B",
            distance_km=Decimal("1"),
            vehicle_type=VehicleType.SMALL_VAN,
        )

        assert notification_sink.subjects == ["Booking Confirmation", "New Booking Assigned"]

    def test_unknown_provider(self, customer):
        with pytest.raises(NotFoundError):
            BookingService.create_booking(
                customer=customer,
                provider_id=uuid.uuid4(),
                pickup="A",
                dropoff="B",
                distance_km=Decimal("1"),
                vehicle_type=VehicleType.SMALL_VAN,
            )

    def test_provider_not_approved(self, customer):
        provider = ProviderFactory(status=ProviderStatus.PENDING)

        with pytest.raises(ValidationError) as exc_info:
            BookingService.create_booking(
                customer=customer,
                provider_id=provider.id,
                pickup="A",
                dropoff="B",
                distance_km=Decimal("1"),
                vehicle_type=VehicleType.SMALL_VAN,
            )

        assert exc_info.value.error_code == "PROVIDER_NOT_APPROVED"
        assert not Booking.objects.exists()


@pytest.mark.django_db
class TestGetBooking:
    def test_participants_and_admin(self, customer, provider_user, provider, admin_user):
        booking = BookingFactory(customer=customer, provider=provider)

        for user in (customer, provider_user, admin_user):
            assert BookingService.get_booking(booking.id, user) == booking

    def test_outsider_forbidden(self, customer):
        booking = BookingFactory()

        with pytest.raises(PermissionDeniedError):
            BookingService.get_booking(booking.id, customer)

    def test_not_found(self, customer):
        with pytest.raises(NotFoundError) as exc_info:
            BookingService.get_booking(uuid.uuid4(), customer)

        assert exc_info.value.error_code == "BOOKING_NOT_FOUND"


@pytest.mark.django_db
class TestListBookings:
    def test_scoped_by_role(self, customer, provider_user, provider, admin_user):
        mine = BookingFactory(customer=customer, provider=provider)
        BookingFactory()

        assert list(BookingService.list_bookings(customer)) == [mine]
        assert list(BookingService.list_bookings(provider_user)) == [mine]
        assert BookingService.list_bookings(admin_user).count() == 2


@pytest.mark.django_db
class TestUpdateStatus:
    @pytest.fixture
    def booking(self, customer, provider):
        return BookingFactory(customer=customer, provider=provider)

    def test_provider_moves_booking(self, booking, provider_user):
        updated = BookingService.update_status(
            booking.id, BookingStatus.IN_PROGRESS, provider_user
        )

        assert updated.status == BookingStatus.IN_PROGRESS
        assert Booking.objects.get(pk=booking.pk).status == BookingStatus.IN_PROGRESS

    def test_other_provider_forbidden(self, booking):
        other = ProviderFactory()

        with pytest.raises(PermissionDeniedError):
            BookingService.update_status(booking.id, BookingStatus.COMPLETED, other.user)

    def test_customer_forbidden(self, booking, customer):
        with pytest.raises(PermissionDeniedError):
            BookingService.update_status(booking.id, BookingStatus.CANCELLED, customer)

    @pytest.mark.parametrize("final", [BookingStatus.COMPLETED, BookingStatus.CANCELLED])
    def test_finished_bookings_frozen(self, provider, admin_user, final):
        booking = BookingFactory(provider=provider, status=final)

        with pytest.raises(ConflictError) as exc_info:
            BookingService.update_status(booking.id, BookingStatus.IN_PROGRESS, admin_user)

        assert exc_info.value.error_code == "BOOKING_FINISHED"

    def test_completing_paid_booking_pays_provider(
        self, booking, provider, provider_user, transfer_gateway
    ):
        from payments.tests.factories import PaymentCardFactory, PaymentFactory

        PaymentCardFactory(provider=provider)
        payment = PaymentFactory(booking=booking, paid=True)
        payment.sync_booking()

        BookingService.update_status(booking.id, BookingStatus.COMPLETED, provider_user)

        payout = Payout.objects.get(provider=provider)
        assert payout.amount == Decimal("450.00")
        assert payout.status == PayoutStatus.PROCESSING
        assert transfer_gateway.create_transfer.call_args.kwargs["amount"] == Decimal("450.00")
        assert Provider.objects.get(pk=provider.pk).earnings == Decimal("450.00")

    def test_completing_unpaid_booking_pays_nothing(
        self, booking, provider_user, transfer_gateway
    ):
        BookingService.update_status(booking.id, BookingStatus.COMPLETED, provider_user)

        transfer_gateway.create_transfer.assert_not_called()
        assert not Payout.objects.exists()

    def test_payout_failure_does_not_block_completion(
        self, booking, provider, provider_user, transfer_gateway
    ):
        from payments.tests.factories import PaymentCardFactory, PaymentFactory

        PaymentCardFactory(provider=provider)
        PaymentFactory(booking=booking, paid=True).sync_booking()
        transfer_gateway.create_transfer.side_effect = GatewayAPIUnavailableError("down")

        updated = BookingService.update_status(
            booking.id, BookingStatus.COMPLETED, provider_user
        )

        assert updated.status == BookingStatus.COMPLETED
        assert Booking.objects.get(pk=booking.pk).status == BookingStatus.COMPLETED
        assert Payout.objects.get(provider=provider).status == PayoutStatus.FAILED
        assert Provider.objects.get(pk=provider.pk).earnings == Decimal("0.00")
