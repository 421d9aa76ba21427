"""
Root URL configuration.

URL Structure:
    /                                  - ReDoc API documentation
    /schema/                           - OpenAPI schema
    /admin/                            - Django admin
    /health/                           - Health check (load balancers, Docker)
    /api/v1/auth/token/                - Obtain JWT pair
    /api/v1/auth/token/refresh/        - Refresh access token
    /api/v1/bookings/                  - Booking create, quote, detail, status
    /api/v1/payments/                  - Payments, refunds, payment cards, payouts
        webhooks/paystack/             - Paystack webhook endpoint (POST)
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("auth/", include("authentication.urls")),
    path("bookings/", include("marketplace.urls")),
    path("payments/", include("payments.urls")),
]

urlpatterns = [
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health_check"),
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Movers Admin"
admin.site.site_title = "Movers Admin Portal"
admin.site.index_title = "Bookings, payments and payouts"
