"""
DRF serializers for the marketplace payment API.

This module provides serializers for:
- Checkout requests and responses
- Payment status for the player
- Admin payment listing with payouts

Related files:
    - views.py: Payment API views
    - services/: CheckoutSessionManager, PaymentQueryService

Usage:
    serializer = CheckoutRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
"""

from __future__ import annotations

from rest_framework import serializers

from payments.models import MarketplacePayment, Payout


class CheckoutRequestSerializer(serializers.Serializer):
    """Body of POST /checkout/."""

    reservation_id = serializers.UUIDField()


class CheckoutSessionSerializer(serializers.Serializer):
    """Checkout session returned to the player."""

    payment_id = serializers.UUIDField()
    session_id = serializers.UUIDField()
    checkout_url = serializers.URLField()
    client_reference = serializers.CharField()
    amount = serializers.IntegerField(source="gross_amount")
    platform_fee = serializers.IntegerField()
    net_to_owner = serializers.IntegerField()


class PaymentStatusSerializer(serializers.ModelSerializer):
    """
    Player-facing payment status.

    Fields:
        payment_id: Payment UUID
        status: pending, paid or failed
        amount: Gross amount in XOF
        client_reference: Reference shown on the provider page
    """

    payment_id = serializers.UUIDField(source="id", read_only=True)
    amount = serializers.IntegerField(source="gross_amount", read_only=True)

    class Meta:
        model = MarketplacePayment
        fields = [
            "payment_id",
            "status",
            "amount",
            "client_reference",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PayoutSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payout
        fields = [
            "id",
            "field",
            "channel",
            "recipient",
            "amount",
            "currency",
            "status",
            "provider_id",
            "provider_status",
            "provider_error",
            "retry_count",
            "next_retry_at",
            "completed_at",
            "failed_at",
            "created_at",
        ]
        read_only_fields = fields


class AdminPaymentSerializer(serializers.ModelSerializer):
    """Payment with reservation context and all payout attempts."""

    reservation_id = serializers.UUIDField(source="reservation.id", read_only=True)
    reservation_date = serializers.DateField(source="reservation.reservation_date", read_only=True)
    field_id = serializers.UUIDField(source="reservation.field.id", read_only=True)
    field_name = serializers.CharField(source="reservation.field.name", read_only=True)
    user_id = serializers.IntegerField(source="reservation.user.id", read_only=True)
    user_email = serializers.EmailField(source="reservation.user.email", read_only=True)
    payouts = PayoutSerializer(many=True, read_only=True)

    class Meta:
        model = MarketplacePayment
        fields = [
            "id",
            "client_reference",
            "status",
            "gross_amount",
            "platform_fee",
            "net_to_owner",
            "currency",
            "provider",
            "provider_token",
            "reservation_id",
            "reservation_date",
            "field_id",
            "field_name",
            "user_id",
            "user_email",
            "webhook_received_at",
            "paid_at",
            "failed_at",
            "created_at",
            "updated_at",
            "payouts",
        ]
        read_only_fields = fields
