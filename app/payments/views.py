"""
DRF views for the marketplace payment API.

This module provides API views for:
- Checkout session creation
- Payment status for the player
- Admin payment listing and provider health

Related files:
    - services/: CheckoutSessionManager, PaymentQueryService
    - serializers.py: Request/response serializers
    - webhooks/views.py: Provider webhook endpoint
    - urls.py: URL routing

Endpoints:
    POST /api/v1/marketplace/checkout/ - Create checkout session
    GET /api/v1/marketplace/payment/{id}/status/ - Payment status
    GET /api/v1/marketplace/payments/ - List payments (admin)
    GET /api/v1/marketplace/health/ - Provider configuration (admin)

Security:
    - Checkout and status require a JWT-authenticated player
    - Listing and health are staff only
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BaseApplicationError

from payments.adapters import provider_configuration_report
from payments.serializers import (
    AdminPaymentSerializer,
    CheckoutRequestSerializer,
    CheckoutSessionSerializer,
    PaymentStatusSerializer,
)
from payments.services import CheckoutSessionManager, PaymentQueryService

logger = logging.getLogger(__name__)


def error_response(exc: BaseApplicationError) -> Response:
    """Render a domain error in the API envelope."""
    return Response({"success": False, **exc.to_dict()}, status=exc.http_status)


class CheckoutView(APIView):
    """
    Create a checkout session for one of the caller's reservations.

    POST /api/v1/marketplace/checkout/

    Request body:
        reservation_id: UUID of an unpaid reservation

    Returns:
        201 with payment_id, session_id, checkout_url, client_reference,
        amount, platform_fee and net_to_owner
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="create_marketplace_checkout",
        summary="Create checkout session",
        request=CheckoutRequestSerializer,
        responses={
            201: CheckoutSessionSerializer,
            404: OpenApiResponse(description="Reservation not found"),
            409: OpenApiResponse(description="Reservation already paid"),
            503: OpenApiResponse(description="Payment provider unavailable"),
        },
        tags=["Marketplace Payments"],
    )
    def post(self, request):
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            session = CheckoutSessionManager.from_settings().create_checkout(
                serializer.validated_data["reservation_id"],
                request.user.id,
            )
        except BaseApplicationError as e:
            logger.info(
                "Checkout refused",
                extra={"user_id": request.user.id, "error_code": e.error_code},
            )
            return error_response(e)

        return Response(
            {"success": True, "data": CheckoutSessionSerializer(session).data},
            status=status.HTTP_201_CREATED,
        )


class PaymentStatusView(APIView):
    """
    Current status of one of the caller's payments.

    GET /api/v1/marketplace/payment/{payment_id}/status/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_marketplace_payment_status",
        summary="Get payment status",
        responses={
            200: PaymentStatusSerializer,
            404: OpenApiResponse(description="Payment not found"),
        },
        tags=["Marketplace Payments"],
    )
    def get(self, request, payment_id):
        result = PaymentQueryService.get_status_for_user(payment_id, request.user)
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_404_NOT_FOUND)
        return Response({"success": True, "data": PaymentStatusSerializer(result.data).data})


class AdminPaymentPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100


class AdminPaymentListView(APIView):
    """
    Paginated list of payments with their payouts.

    GET /api/v1/marketplace/payments/?status=paid&field_id=...&page=1&limit=20
    """

    permission_classes = [IsAdminUser]
    pagination_class = AdminPaymentPagination

    @extend_schema(
        operation_id="list_marketplace_payments",
        summary="List payments (admin)",
        parameters=[
            OpenApiParameter(
                name="status",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Filter by payment status (pending, paid, failed)",
                required=False,
            ),
            OpenApiParameter(
                name="field_id",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Filter by field UUID",
                required=False,
            ),
            OpenApiParameter(
                name="limit",
                type=int,
                location=OpenApiParameter.QUERY,
                description="Page size (max 100)",
                required=False,
            ),
        ],
        responses={200: AdminPaymentSerializer(many=True)},
        tags=["Marketplace Payments - Admin"],
    )
    def get(self, request):
        result = PaymentQueryService.list_payments(
            status=request.query_params.get("status"),
            field_id=request.query_params.get("field_id"),
        )
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(result.data, request, view=self)
        serializer = AdminPaymentSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)


class ProviderHealthView(APIView):
    """
    Provider configuration report. Never exposes credentials.

    GET /api/v1/marketplace/health/
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="marketplace_provider_health",
        summary="Payment provider configuration",
        responses={200: OpenApiResponse(description="Configuration report")},
        tags=["Marketplace Payments - Admin"],
    )
    def get(self, request):
        return Response({"success": True, "data": provider_configuration_report()})
