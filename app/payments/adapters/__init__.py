"""
Payment provider adapters.

All outbound calls to payment providers go through these adapters so that
timeouts, error translation, idempotency and status normalisation are
handled in one place.

Usage:
    from payments.adapters import PayoutRequest, build_payout_adapters

    adapters = build_payout_adapters()
    response = adapters[PayoutChannel.WAVE].create_payout(
        PayoutRequest(
            amount=9000,
            recipient="+221771234567",
            reason="Reservation payout",
            idempotency_key=key,
        )
    )
"""

from payments.adapters.base import (
    CheckoutAdapter,
    CheckoutConfirmation,
    CheckoutRequest,
    CheckoutResponse,
    IdempotencyKeyGenerator,
    PayoutAdapter,
    PayoutRequest,
    PayoutResponse,
    ProviderStatus,
    normalize_senegal_mobile,
    normalize_status,
)
from payments.adapters.http import ProviderHTTPClient
from payments.adapters.paydunya_adapter import PayDunyaAdapter
from payments.adapters.registry import (
    build_checkout_adapter,
    build_payout_adapters,
    provider_configuration_report,
)
from payments.adapters.wave_adapter import WaveAdapter

__all__ = [
    "CheckoutAdapter",
    "CheckoutConfirmation",
    "CheckoutRequest",
    "CheckoutResponse",
    "IdempotencyKeyGenerator",
    "PayDunyaAdapter",
    "PayoutAdapter",
    "PayoutRequest",
    "PayoutResponse",
    "ProviderHTTPClient",
    "ProviderStatus",
    "WaveAdapter",
    "build_checkout_adapter",
    "build_payout_adapters",
    "normalize_senegal_mobile",
    "normalize_status",
    "provider_configuration_report",
]
