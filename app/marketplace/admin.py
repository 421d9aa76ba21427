"""
Admin configuration for marketplace models.
"""

from django.contrib import admin

from marketplace.models import Booking, Provider


@admin.register(Provider)
class ProviderAdmin(admin.ModelAdmin):
    list_display = ["company", "user", "status", "vehicle_type", "earnings", "created_at"]
    list_filter = ["status", "vehicle_type"]
    search_fields = ["company", "user__email"]
    readonly_fields = ["id", "earnings", "created_at", "updated_at"]
    raw_id_fields = ["user"]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "customer",
        "provider",
        "status",
        "payment_status",
        "quoted_total",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "move_type", "vehicle_type"]
    search_fields = ["id", "customer__email", "provider__company"]
    readonly_fields = ["id", "pricing", "quoted_total", "payment_status", "created_at", "updated_at"]
    raw_id_fields = ["customer", "provider"]
