"""
URL configuration for the marketplace app.

All routes are prefixed with /api/v1/bookings/ when included in the main URLconf.
"""

from django.urls import path

from marketplace.views import (
    BookingDetailView,
    BookingListCreateView,
    BookingQuoteView,
    BookingStatusView,
)

app_name = "marketplace"

urlpatterns = [
    path("", BookingListCreateView.as_view(), name="booking_list"),
    path("quote/", BookingQuoteView.as_view(), name="booking_quote"),
    path("<uuid:booking_id>/", BookingDetailView.as_view(), name="booking_detail"),
    path(
        "<uuid:booking_id>/status/",
        BookingStatusView.as_view(),
        name="booking_status",
    ),
]
