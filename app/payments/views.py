"""
DRF views for payments app.

Related files:
    - services/: Payment, refund, payment card and payout services
    - serializers.py: Request/response serializers
    - webhooks/views.py: Paystack webhook endpoint
    - urls.py: URL routing

Endpoints:
    POST   /api/v1/payments/{booking_id}/pay/            - Open a checkout (CUSTOMER)
    GET    /api/v1/payments/{payment_id}/verify/         - Verify with Paystack (CUSTOMER, ADMIN)
    POST   /api/v1/payments/{payment_id}/refund/         - Refund in full (ADMIN)
    GET    /api/v1/payments/{payment_id}/refund-status/  - Latest refund (ADMIN, PROVIDER)
    GET    /api/v1/payments/providers/{id}/payment-cards/               - List cards
    POST   /api/v1/payments/providers/{id}/payment-cards/               - Add card
    PUT    /api/v1/payments/providers/{id}/payment-cards/{card}/default/ - Set default
    DELETE /api/v1/payments/providers/{id}/payment-cards/{card}/         - Delete card
    GET    /api/v1/payments/providers/{id}/payouts/      - List payouts (PROVIDER, ADMIN)
    POST   /api/v1/payments/providers/{id}/payouts/      - Create payout (ADMIN)

Security:
    - Roles are enforced by OperationPolicy before the view runs
    - Ownership (own booking, own provider account) is checked by the services
    - Payment initiation and refunds are rate limited per user
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import OperationPolicy
from payments.serializers import (
    CheckoutSerializer,
    PaymentCardCreateSerializer,
    PaymentCardSerializer,
    PaymentVerificationSerializer,
    PayoutCreateSerializer,
    PayoutSerializer,
    RefundSerializer,
)
from payments.services import (
    PaymentCardService,
    PaymentService,
    PayoutService,
    RefundService,
)
from payments.throttling import WindowedScopedRateThrottle


class InitiatePaymentView(APIView):
    """
    Open a Paystack checkout for a booking.

    POST /api/v1/payments/{booking_id}/pay/

    Safe to repeat: the booking's payment is reused.
    """

    permission_classes = [OperationPolicy]
    policy = {"POST": "payment.initiate"}
    throttle_classes = [WindowedScopedRateThrottle]
    throttle_scope = "payment_initiate"

    @extend_schema(
        operation_id="initiate_payment",
        summary="Initiate payment",
        request=None,
        responses={
            200: CheckoutSerializer,
            400: OpenApiResponse(description="Booking cancelled or already paid"),
            403: OpenApiResponse(description="Not your booking"),
            404: OpenApiResponse(description="Booking not found"),
            429: OpenApiResponse(description="Too many attempts"),
        },
        tags=["Payments"],
    )
    def post(self, request, booking_id):
        checkout = PaymentService.initiate_payment(booking_id, request.user)
        return Response(CheckoutSerializer(checkout).data)


class VerifyPaymentView(APIView):
    """
    Verify a payment with Paystack.

    GET /api/v1/payments/{payment_id}/verify/
    """

    permission_classes = [OperationPolicy]
    policy = {"GET": "payment.verify"}

    @extend_schema(
        operation_id="verify_payment",
        summary="Verify payment",
        responses={
            200: PaymentVerificationSerializer,
            403: OpenApiResponse(description="Not your payment"),
            404: OpenApiResponse(description="Payment not found"),
        },
        tags=["Payments"],
    )
    def get(self, request, payment_id):
        result = PaymentService.verify_payment(payment_id, request.user)
        return Response(PaymentVerificationSerializer(result).data)


class RefundView(APIView):
    """
    Refund a PAID payment in full.

    POST /api/v1/payments/{payment_id}/refund/

    Returns 201 for a new refund and 200 when one is already in flight.
    """

    permission_classes = [OperationPolicy]
    policy = {"POST": "refund.initiate"}
    throttle_classes = [WindowedScopedRateThrottle]
    throttle_scope = "refund_initiate"

    @extend_schema(
        operation_id="initiate_refund",
        summary="Initiate refund",
        request=None,
        responses={
            201: RefundSerializer,
            200: RefundSerializer,
            400: OpenApiResponse(description="Payment not refundable"),
            404: OpenApiResponse(description="Payment not found"),
        },
        tags=["Refunds"],
    )
    def post(self, request, payment_id):
        refund, created = RefundService.initiate_refund(payment_id)
        if not created:
            return Response(
                {"message": "Refund already initiated", "refund": RefundSerializer(refund).data},
                status=status.HTTP_200_OK,
            )
        return Response(
            {"message": "Refund initiated", "refund": RefundSerializer(refund).data},
            status=status.HTTP_201_CREATED,
        )


class RefundStatusView(APIView):
    """
    Latest refund for a payment.

    GET /api/v1/payments/{payment_id}/refund-status/
    """

    permission_classes = [OperationPolicy]
    policy = {"GET": "refund.status"}

    @extend_schema(
        operation_id="refund_status",
        summary="Refund status",
        responses={
            200: RefundSerializer,
            404: OpenApiResponse(description="No refund found"),
        },
        tags=["Refunds"],
    )
    def get(self, request, payment_id):
        refund = RefundService.check_refund_status(payment_id, request.user)
        return Response(RefundSerializer(refund).data)


class PaymentCardListCreateView(APIView):
    permission_classes = [OperationPolicy]
    policy = {"GET": "payment_card.list", "POST": "payment_card.add"}

    @extend_schema(
        operation_id="list_payment_cards",
        summary="List payment cards",
        responses={200: PaymentCardSerializer(many=True)},
        tags=["Payment cards"],
    )
    def get(self, request, provider_id):
        cards = PaymentCardService.list_cards(provider_id, request.user)
        return Response(PaymentCardSerializer(cards, many=True).data)

    @extend_schema(
        operation_id="add_payment_card",
        summary="Add payment card",
        description="Registers the account with Paystack; the first card becomes the default.",
        request=PaymentCardCreateSerializer,
        responses={
            201: PaymentCardSerializer,
            400: OpenApiResponse(description="Missing fields or account rejected"),
        },
        tags=["Payment cards"],
    )
    def post(self, request, provider_id):
        serializer = PaymentCardCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        card = PaymentCardService.add_card(
            provider_id, request.user, **serializer.validated_data
        )
        return Response(PaymentCardSerializer(card).data, status=status.HTTP_201_CREATED)


class PaymentCardDefaultView(APIView):
    permission_classes = [OperationPolicy]
    policy = {"PUT": "payment_card.set_default"}

    @extend_schema(
        operation_id="set_default_payment_card",
        summary="Set default payment card",
        request=None,
        responses={200: PaymentCardSerializer},
        tags=["Payment cards"],
    )
    def put(self, request, provider_id, card_id):
        card = PaymentCardService.set_default(provider_id, card_id, request.user)
        return Response(PaymentCardSerializer(card).data)


class PaymentCardDetailView(APIView):
    permission_classes = [OperationPolicy]
    policy = {"DELETE": "payment_card.delete"}

    @extend_schema(
        operation_id="delete_payment_card",
        summary="Delete payment card",
        responses={
            204: None,
            400: OpenApiResponse(description="Card is the default and others exist"),
        },
        tags=["Payment cards"],
    )
    def delete(self, request, provider_id, card_id):
        PaymentCardService.delete_card(provider_id, card_id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProviderPayoutsView(APIView):
    permission_classes = [OperationPolicy]
    policy = {"GET": "payout.list", "POST": "payout.create"}

    @extend_schema(
        operation_id="list_payouts",
        summary="List provider payouts",
        responses={200: PayoutSerializer(many=True)},
        tags=["Payouts"],
    )
    def get(self, request, provider_id):
        payouts = PayoutService.list_provider_payouts(provider_id, request.user)
        return Response(PayoutSerializer(payouts, many=True).data)

    @extend_schema(
        operation_id="create_payout",
        summary="Create payout",
        description="Transfers the amount to the provider's default payment card.",
        request=PayoutCreateSerializer,
        responses={
            201: PayoutSerializer,
            400: OpenApiResponse(description="No usable default card"),
            404: OpenApiResponse(description="Provider not found"),
        },
        tags=["Payouts"],
    )
    def post(self, request, provider_id):
        serializer = PayoutCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payout = PayoutService.create_payout(
            provider_id,
            serializer.validated_data["amount"],
            reason=serializer.validated_data.get("reason") or None,
        )
        return Response(PayoutSerializer(payout).data, status=status.HTTP_201_CREATED)
