"""
Build provider adapters from settings.

Adapters are constructed per request or task, never cached at module level,
and handed to services explicitly:

    PayoutDispatcher(adapters=build_payout_adapters())
    WebhookProcessor(checkout_adapter=build_checkout_adapter(), dispatcher=...)

Only channels whose provider is configured get an adapter. A field whose
channel has no entry is reported by the dispatcher as a configuration error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings

from payments.adapters.paydunya_adapter import PayDunyaAdapter
from payments.adapters.wave_adapter import WaveAdapter
from payments.state_machines import PaymentProvider, PayoutChannel

if TYPE_CHECKING:
    from typing import Any

    from payments.adapters.base import CheckoutAdapter, PayoutAdapter


def build_checkout_adapter(provider: str = PaymentProvider.PAYDUNYA) -> CheckoutAdapter | None:
    """Return the checkout adapter for ``provider``, or None if unknown."""
    if provider == PaymentProvider.PAYDUNYA:
        return PayDunyaAdapter.from_settings()
    return None


def build_payout_adapters() -> dict[str, PayoutAdapter]:
    """Map each configured payout channel to its adapter."""
    adapters: dict[str, PayoutAdapter] = {}

    wave = WaveAdapter.from_settings()
    if wave.is_configured:
        adapters[PayoutChannel.WAVE] = wave

    paydunya = PayDunyaAdapter.from_settings()
    if paydunya.is_configured:
        adapters[PayoutChannel.PAYDUNYA_PUSH] = paydunya

    return adapters


def provider_configuration_report() -> dict[str, Any]:
    """Configuration summary for the admin health endpoint. Never exposes keys."""
    environment = settings.PAYMENTS_ENV
    paydunya = PayDunyaAdapter.from_settings()
    wave = WaveAdapter.from_settings()
    return {
        "paydunya": {
            "configured": paydunya.is_configured,
            "webhook_secret_configured": paydunya.webhook_secret_configured,
            "environment": environment,
        },
        "wave": {
            "configured": wave.is_configured,
            "environment": environment,
        },
        "payout_channels": sorted(str(channel) for channel in build_payout_adapters()),
        "allow_unsigned_webhooks": settings.PAYMENTS_ALLOW_UNSIGNED_WEBHOOKS,
        "commission_rate_bps": settings.PLATFORM_FEE_BPS,
        "commission_rate": f"{settings.PLATFORM_FEE_BPS / 100:g}%",
    }
