"""
Factory Boy factories for payment test data.

Usage:
    from payments.tests.factories import MarketplacePaymentFactory, PayoutFactory

    # Pending payment of 10 000 XOF with 10% commission
    payment = MarketplacePaymentFactory()

    # Payment already confirmed by the provider
    payment = MarketplacePaymentFactory(status=MarketplacePaymentState.PAID)

Note:
    status is a protected FSM field: pass it at creation time only, never
    assign it afterwards.
"""

import uuid

import factory

from bookings.tests.factories import ReservationFactory
from payments.adapters import (
    CheckoutConfirmation,
    IdempotencyKeyGenerator,
    PayoutResponse,
    normalize_status,
)
from payments.models import MarketplacePayment, Payout
from payments.services.checkout_service import build_client_reference


class MarketplacePaymentFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating MarketplacePayment instances.

    Default creates a PENDING PayDunya payment of 10 000 XOF split
    1 000 platform / 9 000 owner.
    """

    class Meta:
        model = MarketplacePayment

    reservation = factory.SubFactory(ReservationFactory, total_price=10000)
    session_id = factory.LazyFunction(uuid.uuid4)
    client_reference = factory.LazyAttribute(
        lambda o: build_client_reference(o.reservation.id, o.session_id)
    )
    gross_amount = 10000
    platform_fee = 1000
    net_to_owner = factory.LazyAttribute(lambda o: o.gross_amount - o.platform_fee)
    provider = "paydunya"
    provider_token = factory.Sequence(lambda n: f"test_token_{n}_{uuid.uuid4().hex[:8]}")
    checkout_url = factory.LazyAttribute(
        lambda o: f"https://app.paydunya.com/sandbox-checkout/invoice/{o.provider_token}"
    )
    provider_data = factory.LazyFunction(dict)


class PayoutFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating Payout instances.

    Default creates a PROCESSING Wave payout for the payment's owner share.
    """

    class Meta:
        model = Payout

    marketplace_payment = factory.SubFactory(MarketplacePaymentFactory)
    field = factory.LazyAttribute(lambda o: o.marketplace_payment.reservation.field)
    channel = factory.LazyAttribute(lambda o: o.field.owner_payout_channel)
    recipient = factory.LazyAttribute(lambda o: o.field.owner_mobile_e164)
    amount = factory.LazyAttribute(lambda o: o.marketplace_payment.net_to_owner)
    idempotency_key = factory.LazyAttribute(
        lambda o: IdempotencyKeyGenerator.generate("payout", o.marketplace_payment.id, o.field.id)
    )


# =============================================================================
# Provider Response Builders
# =============================================================================


def payout_response(raw_status: str = "succeeded", provider_id: str | None = "pt-123") -> PayoutResponse:
    return PayoutResponse(
        provider_id=provider_id,
        status=normalize_status(raw_status),
        raw_status=raw_status,
        raw_response={"id": provider_id, "status": raw_status},
    )


def checkout_confirmation(token: str, raw_status: str = "completed") -> CheckoutConfirmation:
    return CheckoutConfirmation(
        token=token,
        status=normalize_status(raw_status),
        raw_status=raw_status,
        amount=10000,
        raw_response={"response_code": "00", "status": raw_status},
    )
