"""
Payment services for coordinating checkout, webhook and payout operations.

This module provides:
- CheckoutSessionManager: Opens a hosted checkout for a reservation
- WebhookProcessor: Applies provider-confirmed outcomes to payments
- PayoutDispatcher: Forwards the owner's share of a paid payment
- PaymentQueryService: Status and admin listing queries

Usage:
    from payments.services import CheckoutSessionManager

    session = CheckoutSessionManager.from_settings().create_checkout(
        reservation_id, request.user.id
    )

    from payments.services import WebhookProcessor

    ack = WebhookProcessor.from_settings("paydunya").handle_webhook(body, signature)
"""

from payments.services.checkout_service import (
    CheckoutSession,
    CheckoutSessionManager,
    build_client_reference,
)
from payments.services.payout_dispatcher import (
    PayoutDispatcher,
    PayoutOutcome,
    PayoutResult,
)
from payments.services.query_service import PaymentQueryService
from payments.services.webhook_processor import (
    WebhookAck,
    WebhookProcessor,
    parse_webhook_body,
)

__all__ = [
    "CheckoutSession",
    "CheckoutSessionManager",
    "PaymentQueryService",
    "PayoutDispatcher",
    "PayoutOutcome",
    "PayoutResult",
    "WebhookAck",
    "WebhookProcessor",
    "build_client_reference",
    "parse_webhook_body",
]
