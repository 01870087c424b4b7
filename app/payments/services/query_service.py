"""
Read-side queries for payments.

Usage:
    from payments.services import PaymentQueryService

    result = PaymentQueryService.get_status_for_user(payment_id, request.user)
    if result.success:
        ...
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from core.services import BaseService, ServiceResult

from payments.models import MarketplacePayment
from payments.state_machines import MarketplacePaymentState

if TYPE_CHECKING:
    from django.db.models import QuerySet


class PaymentQueryService(BaseService):
    """Lookups used by the status and admin endpoints."""

    @classmethod
    def get_status_for_user(cls, payment_id: uuid.UUID | str, user) -> ServiceResult[MarketplacePayment]:
        """
        Return the payment if its reservation belongs to ``user``.

        Someone else's payment is reported as not found.
        """
        payment = (
            MarketplacePayment.objects.filter(id=payment_id, reservation__user=user)
            .select_related("reservation")
            .first()
        )
        if payment is None:
            return ServiceResult.failure("Payment not found", "PAYMENT_NOT_FOUND")
        return ServiceResult.success(payment)

    @classmethod
    def list_payments(
        cls,
        status: str | None = None,
        field_id: uuid.UUID | str | None = None,
    ) -> ServiceResult[QuerySet[MarketplacePayment]]:
        """
        Payments with their payouts, reservation, field and player, newest first.

        Filters:
            status: One of MarketplacePaymentState values
            field_id: Only payments for reservations on this field
        """
        queryset = MarketplacePayment.objects.select_related(
            "reservation",
            "reservation__field",
            "reservation__user",
        ).prefetch_related("payouts")

        if status:
            if status not in MarketplacePaymentState.values:
                return ServiceResult.failure(
                    f"Unknown status '{status}'",
                    "INVALID_FILTER",
                    errors={"status": [f"Must be one of {', '.join(MarketplacePaymentState.values)}"]},
                )
            queryset = queryset.filter(status=status)

        if field_id:
            try:
                field_uuid = uuid.UUID(str(field_id))
            except ValueError:
                return ServiceResult.failure(
                    "field_id must be a UUID",
                    "INVALID_FILTER",
                    errors={"field_id": ["Must be a valid UUID"]},
                )
            queryset = queryset.filter(reservation__field_id=field_uuid)

        return ServiceResult.success(queryset.order_by("-created_at"))
