"""
Tests for payment API views.

Covers routing, role policy, status codes and response shapes; service
behaviour itself is tested in the service test modules.
"""

import uuid
from decimal import Decimal

import pytest
from django.urls import reverse

from payments.exceptions import GatewayAPIUnavailableError
from payments.models import PaymentCard, Payout
from payments.state_machines import PaymentStatus, PayoutStatus, RefundStatus
from payments.tests.factories import PaymentCardFactory, PayoutFactory, RefundFactory


# =============================================================================
# Payments
# =============================================================================


@pytest.mark.django_db
class TestInitiatePaymentView:
    def url(self, booking_id):
        return reverse("payments:initiate_payment", kwargs={"booking_id": booking_id})

    def test_customer_gets_checkout(self, gateway, customer_client, booking):
        response = customer_client.post(self.url(booking.id))

        assert response.status_code == 200
        body = response.json()
        assert body["provider"] == "paystack"
        assert body["authorization_url"].startswith("https://checkout.paystack.com/")
        assert uuid.UUID(body["reference"])

    @pytest.mark.parametrize("client_fixture", ["provider_client", "admin_client"])
    def test_other_roles_forbidden(self, gateway, request, booking, client_fixture):
        client = request.getfixturevalue(client_fixture)

        response = client.post(self.url(booking.id))

        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden. Insufficient role."

    def test_unauthenticated(self, api_client, booking):
        assert api_client.post(self.url(booking.id)).status_code == 401

    def test_unknown_booking(self, gateway, customer_client):
        response = customer_client.post(self.url(uuid.uuid4()))

        assert response.status_code == 404
        assert response.json()["error_code"] == "BOOKING_NOT_FOUND"

    def test_already_paid(self, gateway, customer_client, paid_payment):
        response = customer_client.post(self.url(paid_payment.booking_id))

        assert response.status_code == 400
        assert response.json()["error_code"] == "BOOKING_ALREADY_PAID"


@pytest.mark.django_db
class TestVerifyPaymentView:
    def url(self, payment_id):
        return reverse("payments:verify_payment", kwargs={"payment_id": payment_id})

    def test_customer_verifies(self, gateway, customer_client, pending_payment):
        response = customer_client.get(self.url(pending_payment.id))

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == PaymentStatus.PAID
        assert body["amount"] == "500.00"

    def test_provider_forbidden(self, gateway, provider_client, pending_payment):
        assert provider_client.get(self.url(pending_payment.id)).status_code == 403

    def test_unknown_payment(self, gateway, admin_client):
        response = admin_client.get(self.url(uuid.uuid4()))

        assert response.status_code == 404
        assert response.json()["error_code"] == "PAYMENT_NOT_FOUND"


# =============================================================================
# Refunds
# =============================================================================


@pytest.mark.django_db
class TestRefundView:
    def url(self, payment_id):
        return reverse("payments:initiate_refund", kwargs={"payment_id": payment_id})

    def test_admin_initiates(self, gateway, admin_client, paid_payment):
        response = admin_client.post(self.url(paid_payment.id))

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Refund initiated"
        assert body["refund"]["status"] == RefundStatus.INITIATED
        assert body["refund"]["amount"] == "500.00"

    def test_repeat_returns_existing(self, gateway, admin_client, paid_payment):
        first = admin_client.post(self.url(paid_payment.id)).json()

        response = admin_client.post(self.url(paid_payment.id))

        assert response.status_code == 200
        assert response.json()["message"] == "Refund already initiated"
        assert response.json()["refund"]["id"] == first["refund"]["id"]

    def test_unscheduled_poll_reported(
        self, gateway, admin_client, paid_payment, mock_poll_enqueue
    ):
        mock_poll_enqueue.side_effect = ConnectionError("broker down")

        response = admin_client.post(self.url(paid_payment.id))

        assert response.status_code == 500
        assert response.json()["error_code"] == "REFUND_POLL_NOT_SCHEDULED"

    def test_pending_payment_rejected(self, gateway, admin_client, pending_payment):
        response = admin_client.post(self.url(pending_payment.id))

        assert response.status_code == 400
        assert response.json()["error"] == "Only PAID payments can be refunded"

    @pytest.mark.parametrize("client_fixture", ["customer_client", "provider_client"])
    def test_non_admin_forbidden(self, gateway, request, paid_payment, client_fixture):
        client = request.getfixturevalue(client_fixture)

        assert client.post(self.url(paid_payment.id)).status_code == 403
        gateway.create_refund.assert_not_called()


@pytest.mark.django_db
class TestRefundStatusView:
    def url(self, payment_id):
        return reverse("payments:refund_status", kwargs={"payment_id": payment_id})

    def test_provider_sees_own_refund(self, provider_client, paid_payment):
        refund = RefundFactory(payment=paid_payment)

        response = provider_client.get(self.url(paid_payment.id))

        assert response.status_code == 200
        assert response.json()["id"] == str(refund.id)

    def test_no_refund(self, admin_client, paid_payment):
        response = admin_client.get(self.url(paid_payment.id))

        assert response.status_code == 404
        assert response.json()["error"] == "No refund found"

    def test_customer_forbidden(self, customer_client, paid_payment):
        assert customer_client.get(self.url(paid_payment.id)).status_code == 403


# =============================================================================
# Payment cards
# =============================================================================


@pytest.mark.django_db
class TestPaymentCardViews:
    def list_url(self, provider_id):
        return reverse("payments:payment_cards", kwargs={"provider_id": provider_id})

    def test_add_card(self, gateway, provider_client, provider):
        response = provider_client.post(
            self.list_url(provider.id),
            {"account_number": "62812345678", "account_name": "Sipho", "bank_code": "632005"},
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["account_number"] == "****5678"
        assert body["is_default"] is True
        assert "recipient_code" not in body

    def test_add_card_missing_fields(self, gateway, provider_client, provider):
        response = provider_client.post(
            self.list_url(provider.id), {"account_name": "Sipho"}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Account number, name, and bank code are required"

    def test_list_cards(self, provider_client, provider):
        PaymentCardFactory(provider=provider)

        response = provider_client.get(self.list_url(provider.id))

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_other_provider_forbidden(self, provider):
        from rest_framework.test import APIClient

        from authentication.tests.factories import ProviderUserFactory

        client = APIClient()
        client.force_authenticate(ProviderUserFactory())

        response = client.get(self.list_url(provider.id))

        assert response.status_code == 403
        assert response.json()["error_code"] == "NOT_PROVIDER_OWNER"

    def test_customer_forbidden(self, customer_client, provider):
        assert customer_client.get(self.list_url(provider.id)).status_code == 403

    def test_set_default(self, provider_client, provider):
        PaymentCardFactory(provider=provider)
        card = PaymentCardFactory(provider=provider, is_default=False)

        response = provider_client.put(
            reverse(
                "payments:payment_card_default",
                kwargs={"provider_id": provider.id, "card_id": card.id},
            )
        )

        assert response.status_code == 200
        assert response.json()["is_default"] is True

    def test_delete_card(self, provider_client, provider):
        card = PaymentCardFactory(provider=provider)

        response = provider_client.delete(
            reverse(
                "payments:payment_card_detail",
                kwargs={"provider_id": provider.id, "card_id": card.id},
            )
        )

        assert response.status_code == 204
        assert not PaymentCard.objects.exists()

    def test_delete_default_with_others(self, provider_client, provider):
        card = PaymentCardFactory(provider=provider)
        PaymentCardFactory(provider=provider, is_default=False)

        response = provider_client.delete(
            reverse(
                "payments:payment_card_detail",
                kwargs={"provider_id": provider.id, "card_id": card.id},
            )
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "DEFAULT_CARD_DELETE"


# =============================================================================
# Payouts
# =============================================================================


@pytest.mark.django_db
class TestProviderPayoutsView:
    def url(self, provider_id):
        return reverse("payments:provider_payouts", kwargs={"provider_id": provider_id})

    def test_admin_creates_payout(self, gateway, admin_client, provider, default_card):
        response = admin_client.post(self.url(provider.id), {"amount": "450.00"}, format="json")

        assert response.status_code == 201
        assert response.json()["status"] == PayoutStatus.PROCESSING
        assert response.json()["amount"] == "450.00"

    def test_no_default_card(self, gateway, admin_client, provider):
        response = admin_client.post(self.url(provider.id), {"amount": "450.00"}, format="json")

        assert response.status_code == 400
        assert response.json()["error"] == "Provider has no default payment account"
        assert not Payout.objects.exists()

    def test_invalid_amount(self, gateway, admin_client, provider, default_card):
        response = admin_client.post(self.url(provider.id), {"amount": "0"}, format="json")

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        gateway.create_transfer.assert_not_called()

    def test_gateway_failure_leaves_failed_payout(
        self, gateway, admin_client, provider, default_card
    ):
        gateway.create_transfer.side_effect = GatewayAPIUnavailableError("down")

        response = admin_client.post(self.url(provider.id), {"amount": "450.00"}, format="json")

        assert response.status_code >= 500
        assert Payout.objects.get().status == PayoutStatus.FAILED

    def test_provider_cannot_create(self, gateway, provider_client, provider, default_card):
        response = provider_client.post(self.url(provider.id), {"amount": "1.00"}, format="json")

        assert response.status_code == 403

    def test_provider_lists_own_payouts(self, provider_client, provider, default_card):
        PayoutFactory(provider=provider, payment_card=default_card, amount=Decimal("99.00"))

        response = provider_client.get(self.url(provider.id))

        assert response.status_code == 200
        assert [p["amount"] for p in response.json()] == ["99.00"]
