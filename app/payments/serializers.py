"""
DRF serializers for payments app.

This module provides serializers for:
- Checkout initiation and verification responses
- Refund display
- Payment card input and display (account numbers masked)
- Payout requests and display

Related files:
    - services/: PaymentService, RefundService, PaymentCardService, PayoutService
    - views.py: Payment API views

Usage:
    serializer = RefundSerializer(refund)
    data = serializer.data
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from payments.models import PaymentCard, Payout, Refund


class CheckoutSerializer(serializers.Serializer):
    """Hosted checkout returned by payment initiation."""

    provider = serializers.CharField()
    authorization_url = serializers.URLField()
    reference = serializers.CharField(help_text="Payment id, used as the transaction reference")


class PaymentVerificationSerializer(serializers.Serializer):
    status = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    reference = serializers.CharField()
    paid_at = serializers.DateTimeField(allow_null=True)


class RefundSerializer(serializers.ModelSerializer):
    payment_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Refund
        fields = [
            "id",
            "payment_id",
            "amount",
            "gateway",
            "gateway_ref",
            "status",
            "poll_attempts",
            "last_polled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PaymentCardCreateSerializer(serializers.Serializer):
    """
    Bank account details for a new payment card.

    Blank values are passed through so the service reports all missing
    fields in one error.
    """

    account_number = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    account_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    bank_code = serializers.CharField(max_length=16, required=False, allow_blank=True, default="")


class PaymentCardSerializer(serializers.ModelSerializer):
    """Payment card for API responses; the account number is masked."""

    account_number = serializers.CharField(source="masked_account_number", read_only=True)

    class Meta:
        model = PaymentCard
        fields = [
            "id",
            "account_number",
            "account_name",
            "bank_code",
            "bank_name",
            "is_default",
            "is_verified",
            "created_at",
        ]
        read_only_fields = fields


class PayoutCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01")
    )
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class PayoutSerializer(serializers.ModelSerializer):
    provider_id = serializers.UUIDField(read_only=True)
    payment_card_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Payout
        fields = [
            "id",
            "provider_id",
            "payment_card_id",
            "amount",
            "status",
            "transfer_code",
            "reference",
            "reason",
            "failure_reason",
            "completed_at",
            "failed_at",
            "created_at",
        ]
        read_only_fields = fields
