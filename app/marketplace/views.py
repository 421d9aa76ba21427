"""
Views for the booking API.

Endpoints:
    GET   /api/v1/bookings/              - List bookings visible to the caller
    POST  /api/v1/bookings/              - Create a booking (CUSTOMER)
    GET   /api/v1/bookings/quote/        - Price preview
    GET   /api/v1/bookings/{id}/         - Booking detail (participants, ADMIN)
    PATCH /api/v1/bookings/{id}/status/  - Update status (PROVIDER, ADMIN)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import OperationPolicy
from marketplace.pricing import quote_booking
from marketplace.serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    PriceBreakdownSerializer,
    QuoteRequestSerializer,
)
from marketplace.services import BookingService


class BookingListCreateView(APIView):
    permission_classes = [OperationPolicy]
    policy = {"GET": "booking.view", "POST": "booking.create"}

    @extend_schema(
        operation_id="list_bookings",
        summary="List bookings",
        description=(
            "Admins see every booking, providers the bookings assigned to "
            "them and customers their own bookings. Newest first."
        ),
        responses={200: BookingSerializer(many=True)},
        tags=["Bookings"],
    )
    def get(self, request):
        paginator = PageNumberPagination()
        page = paginator.paginate_queryset(
            BookingService.list_bookings(request.user), request, view=self
        )
        return paginator.get_paginated_response(BookingSerializer(page, many=True).data)

    @extend_schema(
        operation_id="create_booking",
        summary="Create booking",
        description="Create a booking priced with the vehicle's suggested rates.",
        request=BookingCreateSerializer,
        responses={
            201: BookingSerializer,
            400: OpenApiResponse(description="Invalid input or provider not approved"),
            404: OpenApiResponse(description="Provider not found"),
        },
        tags=["Bookings"],
    )
    def post(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = BookingService.create_booking(
            customer=request.user, **serializer.validated_data
        )
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class BookingQuoteView(APIView):
    permission_classes = [OperationPolicy]
    policy = {"GET": "booking.quote"}

    @extend_schema(
        operation_id="quote_booking",
        summary="Quote a move",
        parameters=[QuoteRequestSerializer],
        responses={200: PriceBreakdownSerializer},
        tags=["Bookings"],
    )
    def get(self, request):
        serializer = QuoteRequestSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        breakdown = quote_booking(**serializer.validated_data)
        return Response(PriceBreakdownSerializer(breakdown).data)


class BookingDetailView(APIView):
    permission_classes = [OperationPolicy]
    policy = {"GET": "booking.view"}

    @extend_schema(
        operation_id="get_booking",
        summary="Get booking",
        responses={
            200: BookingSerializer,
            403: OpenApiResponse(description="Not a participant"),
            404: OpenApiResponse(description="Booking not found"),
        },
        tags=["Bookings"],
    )
    def get(self, request, booking_id):
        booking = BookingService.get_booking(booking_id, request.user)
        return Response(BookingSerializer(booking).data)


class BookingStatusView(APIView):
    permission_classes = [OperationPolicy]
    policy = {"PATCH": "booking.update_status"}

    @extend_schema(
        operation_id="update_booking_status",
        summary="Update booking status",
        description=(
            "Completing a paid booking pays the provider the quoted total "
            "less the platform fee."
        ),
        request=BookingStatusSerializer,
        responses={
            200: BookingSerializer,
            403: OpenApiResponse(description="Not the booking's provider"),
            404: OpenApiResponse(description="Booking not found"),
            409: OpenApiResponse(description="Booking already finished"),
        },
        tags=["Bookings"],
    )
    def patch(self, request, booking_id):
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = BookingService.update_status(
            booking_id, serializer.validated_data["status"], request.user
        )
        return Response(BookingSerializer(booking).data)
