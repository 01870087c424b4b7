"""
Pytest fixtures for payment tests.

Shared by payments/tests and the tests/ directories of the adapters,
services and webhooks subpackages. Adapters are MagicMocks exposing the
same methods as the real ones; tests set return values or side effects.

Usage:
    def test_payout_completes(paid_payment, wave_adapter):
        wave_adapter.create_payout.return_value = payout_response("succeeded")
        result = PayoutDispatcher(adapters={"wave": wave_adapter}).dispatch(paid_payment)
        assert result.outcome == PayoutOutcome.COMPLETED
"""

from unittest.mock import MagicMock

import pytest

from bookings.tests.factories import FieldFactory, ReservationFactory, UserFactory
from payments.adapters import CheckoutResponse
from payments.state_machines import MarketplacePaymentState, PayoutChannel
from payments.tests.factories import MarketplacePaymentFactory, payout_response


# =============================================================================
# User and Booking Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a test player."""
    return UserFactory()


@pytest.fixture
def admin_user(db):
    """Create a staff user for admin endpoints."""
    return UserFactory(is_staff=True)


@pytest.fixture
def field(db):
    """Create a Wave-paid field with 10% commission."""
    return FieldFactory()


@pytest.fixture
def reservation(db, user, field):
    """Create an unpaid 10 000 XOF reservation for the test player."""
    return ReservationFactory(user=user, field=field, total_price=10000)


# =============================================================================
# Payment Fixtures
# =============================================================================


@pytest.fixture
def pending_payment(db, reservation):
    """Create a pending payment awaiting the provider webhook."""
    return MarketplacePaymentFactory(reservation=reservation)


@pytest.fixture
def paid_payment(db, reservation):
    """Create a payment already confirmed as paid."""
    return MarketplacePaymentFactory(
        reservation=reservation,
        status=MarketplacePaymentState.PAID,
    )


# =============================================================================
# Adapter Doubles
# =============================================================================


@pytest.fixture
def checkout_adapter():
    """Checkout adapter double that accepts any signature."""
    adapter = MagicMock()
    adapter.provider_name = "paydunya"
    adapter.create_checkout.return_value = CheckoutResponse(
        token="tok_test_123",
        checkout_url="https://app.paydunya.com/sandbox-checkout/invoice/tok_test_123",
        raw_response={"response_code": "00", "token": "tok_test_123"},
    )
    adapter.extract_token.side_effect = lambda payload: payload.get("token")
    adapter.verify_webhook_signature.return_value = None
    return adapter


@pytest.fixture
def wave_adapter():
    """Wave payout adapter double; validate_recipient returns its input."""
    adapter = MagicMock()
    adapter.provider_name = "wave"
    adapter.validate_recipient.side_effect = lambda recipient: recipient
    adapter.create_payout.return_value = payout_response("succeeded")
    return adapter


@pytest.fixture
def payout_adapters(wave_adapter):
    return {PayoutChannel.WAVE: wave_adapter}
