"""
Payment admin configuration.

State fields are read-only: payments, refunds and payouts only change
state through their services and workers.
"""

from django.contrib import admin

from payments.models import (
    Payment,
    PaymentCard,
    PaymentEvent,
    Payout,
    Refund,
    WebhookLog,
)


class PaymentEventInline(admin.TabularInline):
    model = PaymentEvent
    extra = 0
    can_delete = False
    fields = ["event_type", "gateway", "gateway_ref", "created_at"]
    readonly_fields = fields


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """
    Admin configuration for Payment.

    The event inline shows the audit trail for each payment.
    """

    list_display = ["id", "booking", "provider", "amount", "status", "paid_at", "created_at"]
    list_filter = ["status", "gateway"]
    search_fields = ["id", "gateway_reference", "refund_reference", "booking__customer__email"]
    readonly_fields = [
        "id",
        "status",
        "gateway_reference",
        "refund_reference",
        "paid_at",
        "created_at",
        "updated_at",
    ]
    raw_id_fields = ["booking", "provider"]
    ordering = ["-created_at"]
    inlines = [PaymentEventInline]


@admin.register(Refund)
class RefundAdmin(admin.ModelAdmin):
    """
    Admin configuration for Refund.

    Filter by STUCK to find refunds the poller gave up on.
    """

    list_display = ["id", "payment", "amount", "status", "poll_attempts", "last_polled_at"]
    list_filter = ["status"]
    search_fields = ["id", "gateway_ref", "payment__id"]
    readonly_fields = [
        "id",
        "status",
        "gateway_ref",
        "poll_attempts",
        "last_polled_at",
        "created_at",
        "updated_at",
    ]
    raw_id_fields = ["payment"]
    ordering = ["-created_at"]


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ["id", "provider", "amount", "status", "transfer_code", "created_at"]
    list_filter = ["status"]
    search_fields = ["id", "transfer_code", "reference", "provider__company"]
    readonly_fields = [
        "id",
        "status",
        "transfer_code",
        "reference",
        "completed_at",
        "failed_at",
        "failure_reason",
        "created_at",
        "updated_at",
    ]
    raw_id_fields = ["provider", "payment_card", "payments"]
    ordering = ["-created_at"]


@admin.register(PaymentCard)
class PaymentCardAdmin(admin.ModelAdmin):
    list_display = ["id", "provider", "bank_name", "masked_account_number", "is_default", "is_verified"]
    list_filter = ["is_default", "is_verified", "bank_name"]
    search_fields = ["account_name", "provider__company", "recipient_code"]
    readonly_fields = ["id", "recipient_code", "created_at", "updated_at"]
    raw_id_fields = ["provider"]


@admin.register(WebhookLog)
class WebhookLogAdmin(admin.ModelAdmin):
    list_display = ["id", "gateway", "created_at"]
    list_filter = ["gateway"]
    readonly_fields = ["id", "gateway", "payload", "headers", "created_at", "updated_at"]
    ordering = ["-created_at"]
