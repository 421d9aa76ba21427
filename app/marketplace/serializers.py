"""
DRF serializers for the marketplace app.

Related files:
    - services.py: BookingService
    - views.py: Booking API views
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from marketplace.models import Booking, BookingStatus, MoveType, VehicleType


class QuoteRequestSerializer(serializers.Serializer):
    """Query parameters for a price preview."""

    distance_km = serializers.DecimalField(
        max_digits=8, decimal_places=2, min_value=Decimal("0")
    )
    vehicle_type = serializers.ChoiceField(
        choices=VehicleType.choices, default=VehicleType.OTHER
    )
    move_type = serializers.ChoiceField(
        choices=MoveType.choices, default=MoveType.APARTMENT
    )
    helpers_count = serializers.IntegerField(min_value=0, max_value=10, default=0)


class PriceBreakdownSerializer(serializers.Serializer):
    base_rate = serializers.DecimalField(max_digits=12, decimal_places=2)
    distance_km = serializers.DecimalField(max_digits=8, decimal_places=2)
    per_km_rate = serializers.DecimalField(max_digits=8, decimal_places=2)
    distance_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    load_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    helpers_count = serializers.IntegerField()
    helpers_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    complexity_multiplier = serializers.DecimalField(max_digits=4, decimal_places=1)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    minimum_applied = serializers.BooleanField()


class BookingCreateSerializer(QuoteRequestSerializer):
    """Request body for creating a booking."""

    provider_id = serializers.UUIDField()
    pickup = serializers.CharField(max_length=255)
    dropoff = serializers.CharField(max_length=255)
    scheduled_for = serializers.DateTimeField(required=False, allow_null=True)


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BookingStatus.choices)


class BookingSerializer(serializers.ModelSerializer):
    """Booking representation returned by every booking endpoint."""

    customer_id = serializers.IntegerField(read_only=True)
    provider_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "customer_id",
            "provider_id",
            "pickup",
            "dropoff",
            "scheduled_for",
            "move_type",
            "vehicle_type",
            "distance_km",
            "helpers_count",
            "pricing",
            "quoted_total",
            "status",
            "payment_status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
