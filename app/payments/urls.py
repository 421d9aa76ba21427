"""
URL configuration for payments app.

Mounted at /api/v1/payments/.
"""

from django.urls import path

from payments import views
from payments.webhooks.views import paystack_webhook

app_name = "payments"

urlpatterns = [
    path("webhooks/paystack/", paystack_webhook, name="paystack_webhook"),
    path("<uuid:booking_id>/pay/", views.InitiatePaymentView.as_view(), name="initiate_payment"),
    path("<uuid:payment_id>/verify/", views.VerifyPaymentView.as_view(), name="verify_payment"),
    path("<uuid:payment_id>/refund/", views.RefundView.as_view(), name="initiate_refund"),
    path(
        "<uuid:payment_id>/refund-status/",
        views.RefundStatusView.as_view(),
        name="refund_status",
    ),
    path(
        "providers/<uuid:provider_id>/payment-cards/",
        views.PaymentCardListCreateView.as_view(),
        name="payment_cards",
    ),
    path(
        "providers/<uuid:provider_id>/payment-cards/<uuid:card_id>/",
        views.PaymentCardDetailView.as_view(),
        name="payment_card_detail",
    ),
    path(
        "providers/<uuid:provider_id>/payment-cards/<uuid:card_id>/default/",
        views.PaymentCardDefaultView.as_view(),
        name="payment_card_default",
    ),
    path(
        "providers/<uuid:provider_id>/payouts/",
        views.ProviderPayoutsView.as_view(),
        name="provider_payouts",
    ),
]
