"""
Webhook processor for checkout provider notifications.

Provider notifications are treated as hints only. For every delivery:
1. Parse the body and extract the invoice token
2. Verify the HMAC signature (or, if explicitly allowed, accept unsigned)
3. Re-confirm the status with the provider; only that answer is trusted
4. Transition the payment under a row lock, mark the reservation paid
5. After commit, dispatch the owner payout

The processor never raises. It returns a WebhookAck whose status code tells
the provider whether to redeliver: 2xx for anything handled or ignored, 503
when we could not reach the provider or are misconfigured.

Usage:
    from payments.services import WebhookProcessor

    processor = WebhookProcessor.from_settings()
    ack = processor.handle_webhook(request.body, request.headers.get("X-Paydunya-Signature"))
    return JsonResponse(ack.to_dict(), status=ack.status_code)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import parse_qs

from django.conf import settings

from django_fsm import ConcurrentTransition

from bookings.repositories import ReservationRepository
from core.services import BaseService

from payments.adapters import ProviderStatus, build_checkout_adapter
from payments.exceptions import (
    InvalidSignatureError,
    PaymentConfigurationError,
    ProviderError,
    ProviderUnavailableError,
)
from payments.models import MarketplacePayment
from payments.services.payout_dispatcher import PayoutDispatcher
from payments.state_machines import MarketplacePaymentState

if TYPE_CHECKING:
    from typing import Any

    from payments.adapters import CheckoutAdapter, CheckoutConfirmation


security_logger = logging.getLogger("payments.security")


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class WebhookAck:
    """
    Answer to a webhook delivery.

    Outcomes:
        paid / failed: payment transitioned
        pending: provider has no final status yet
        ignored: unknown token
        already_processed: payment already terminal (replay)
        invalid_payload / invalid_signature / misconfigured / provider_unavailable
    """

    status_code: int
    outcome: str
    detail: str = ""
    payment_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.outcome}
        if self.detail:
            data["detail"] = self.detail
        if self.payment_id:
            data["payment_id"] = self.payment_id
        return data


# =============================================================================
# Webhook Processor
# =============================================================================


class WebhookProcessor(BaseService):
    """
    Applies confirmed checkout outcomes to MarketplacePayments.

    Collaborators:
        checkout_adapter: Provider that issued the tokens
        dispatcher: Payout dispatcher invoked after a payment is paid
        reservations: Reservation repository used to flag the reservation
        allow_unsigned: Accept deliveries when no webhook secret is set
    """

    def __init__(
        self,
        checkout_adapter: CheckoutAdapter,
        dispatcher: PayoutDispatcher | None = None,
        reservations: ReservationRepository | None = None,
        allow_unsigned: bool | None = None,
    ):
        self.checkout_adapter = checkout_adapter
        self.dispatcher = dispatcher
        self.reservations = reservations or ReservationRepository()
        self.allow_unsigned = (
            settings.PAYMENTS_ALLOW_UNSIGNED_WEBHOOKS if allow_unsigned is None else allow_unsigned
        )

    @classmethod
    def from_settings(cls, provider: str = "paydunya") -> WebhookProcessor | None:
        """Build a processor for ``provider``, or None if it has no checkout adapter."""
        adapter = build_checkout_adapter(provider)
        if adapter is None:
            return None
        return cls(checkout_adapter=adapter, dispatcher=PayoutDispatcher.from_settings())

    def handle_webhook(self, raw_body: bytes, signature: str | None) -> WebhookAck:
        """Process one delivery. Never raises."""
        try:
            return self._handle(raw_body, signature)
        except Exception as e:
            self.get_logger().exception(
                "Unexpected error while processing webhook",
                extra={"error_type": type(e).__name__},
            )
            return WebhookAck(status_code=500, outcome="error", detail="internal error")

    # =========================================================================
    # Steps
    # =========================================================================

    def _handle(self, raw_body: bytes, signature: str | None) -> WebhookAck:
        logger = self.get_logger()
        provider = self.checkout_adapter.provider_name

        payload = parse_webhook_body(raw_body)
        token = self.checkout_adapter.extract_token(payload) if payload is not None else None
        if not token:
            logger.warning("Webhook without a usable token", extra={"provider": provider})
            return WebhookAck(status_code=400, outcome="invalid_payload", detail="missing token")

        rejection = self._check_signature(raw_body, signature, token)
        if rejection is not None:
            return rejection

        try:
            confirmation = self.checkout_adapter.confirm_checkout(token)
        except ProviderUnavailableError as e:
            logger.warning(
                "Could not confirm webhook with provider, asking for redelivery",
                extra={"provider": provider, "token": token, "error_code": e.error_code},
            )
            return WebhookAck(status_code=503, outcome="provider_unavailable", detail=e.error_code)
        except PaymentConfigurationError as e:
            logger.error(
                "Checkout provider is not configured",
                extra={"provider": provider, "error_code": e.error_code},
            )
            return WebhookAck(status_code=503, outcome="misconfigured", detail=e.error_code)
        except ProviderError as e:
            logger.warning(
                "Provider rejected webhook confirmation",
                extra={"provider": provider, "token": token, "error_code": e.error_code},
            )
            return WebhookAck(status_code=200, outcome="ignored", detail=e.error_code)

        payment = MarketplacePayment.objects.filter(provider_token=token).first()
        if payment is None:
            logger.info("Webhook for unknown token ignored", extra={"provider": provider, "token": token})
            return WebhookAck(status_code=200, outcome="ignored", detail="unknown token")

        if payment.is_terminal:
            return self._already_processed(payment)

        if confirmation.status == ProviderStatus.SUCCEEDED:
            return self._apply(payment, confirmation, paid=True)
        if confirmation.status == ProviderStatus.FAILED:
            return self._apply(payment, confirmation, paid=False)

        logger.info(
            "Payment not final yet",
            extra={
                "payment_id": str(payment.id),
                "raw_status": confirmation.raw_status,
            },
        )
        return WebhookAck(
            status_code=200,
            outcome="pending",
            detail=str(confirmation.raw_status or ""),
            payment_id=str(payment.id),
        )

    def _check_signature(self, raw_body: bytes, signature: str | None, token: str) -> WebhookAck | None:
        """Return a rejection ack, or None if the delivery may proceed."""
        provider = self.checkout_adapter.provider_name
        try:
            self.checkout_adapter.verify_webhook_signature(raw_body, signature)
        except InvalidSignatureError as e:
            security_logger.warning(
                "Webhook signature verification failed",
                extra={"provider": provider, "token": token, "reason": e.message},
            )
            return WebhookAck(status_code=401, outcome="invalid_signature")
        except PaymentConfigurationError:
            if not self.allow_unsigned:
                security_logger.error(
                    "Webhook secret not configured, rejecting delivery",
                    extra={"provider": provider},
                )
                return WebhookAck(status_code=503, outcome="misconfigured", detail="webhook secret missing")
            security_logger.warning(
                "Accepting unsigned webhook: no secret configured and unsigned webhooks are allowed",
                extra={"provider": provider, "token": token},
            )
        return None

    def _apply(
        self,
        payment: MarketplacePayment,
        confirmation: CheckoutConfirmation,
        paid: bool,
    ) -> WebhookAck:
        logger = self.get_logger()
        try:
            with self.atomic():
                locked = MarketplacePayment.objects.select_for_update().get(pk=payment.pk)
                if locked.status != MarketplacePaymentState.PENDING:
                    return self._already_processed(locked)

                if paid:
                    locked.mark_paid(confirmation=confirmation.raw_response)
                else:
                    locked.mark_failed(confirmation=confirmation.raw_response)
                locked.save()

                if paid:
                    self.reservations.mark_paid(locked.reservation_id)
        except ConcurrentTransition:
            logger.info(
                "Concurrent delivery already transitioned the payment",
                extra={"payment_id": str(payment.id)},
            )
            return WebhookAck(
                status_code=200,
                outcome="already_processed",
                payment_id=str(payment.id),
            )

        logger.info(
            "Payment transitioned from webhook",
            extra={
                "payment_id": str(locked.id),
                "status": locked.status,
                "raw_status": confirmation.raw_status,
            },
        )

        if paid:
            self._dispatch_payout(locked)

        return WebhookAck(
            status_code=200,
            outcome=locked.status,
            payment_id=str(locked.id),
        )

    def _dispatch_payout(self, payment: MarketplacePayment) -> None:
        """Payout problems are logged and never unwind the payment."""
        if self.dispatcher is None:
            return
        try:
            result = self.dispatcher.dispatch(payment)
        except Exception:
            self.get_logger().exception(
                "Payout dispatch raised after payment was confirmed",
                extra={"payment_id": str(payment.id)},
            )
            return
        self.get_logger().info(
            "Payout dispatched",
            extra={"payment_id": str(payment.id), "outcome": result.outcome.value},
        )

    @staticmethod
    def _already_processed(payment: MarketplacePayment) -> WebhookAck:
        return WebhookAck(
            status_code=200,
            outcome="already_processed",
            detail=payment.status,
            payment_id=str(payment.id),
        )


def parse_webhook_body(raw_body: bytes) -> dict[str, Any] | None:
    """
    Decode a JSON or form-encoded notification body.

    Form bodies may carry a JSON document in a ``data`` field.
    Returns None if the body cannot be decoded.
    """
    if not raw_body:
        return None
    try:
        text = raw_body.decode("utf-8")
    except UnicodeDecodeError:
        return None

    try:
        payload = json.loads(text)
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        return payload

    form = {key: values[-1] for key, values in parse_qs(text).items()}
    if not form:
        return None
    if isinstance(form.get("data"), str):
        try:
            nested = json.loads(form["data"])
        except ValueError:
            nested = None
        if isinstance(nested, dict):
            form["data"] = nested
    return form
