"""
Checkout session creation for reservations.

The CheckoutSessionManager turns an unpaid reservation into a hosted
checkout page:
1. Load the reservation for the caller and refuse if already paid
2. Split the gross amount into platform fee and owner share
3. Ask the checkout provider for an invoice
4. Persist a PENDING MarketplacePayment only once the provider answered

A provider failure leaves no row behind; the player simply tries again.

Usage:
    from payments.services import CheckoutSessionManager

    manager = CheckoutSessionManager.from_settings()
    session = manager.create_checkout(reservation_id, request.user.id)
    return redirect(session.checkout_url)
"""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings

from bookings.repositories import ReservationRepository
from core.services import BaseService

from payments.adapters import CheckoutRequest, build_checkout_adapter
from payments.commission import calculate_commission
from payments.exceptions import (
    AlreadyPaidError,
    PaymentConfigurationError,
    PaymentNotFoundError,
    ProviderError,
    ProviderUnavailableError,
)
from payments.models import MarketplacePayment

if TYPE_CHECKING:
    from bookings.models import Reservation
    from payments.adapters import CheckoutAdapter


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class CheckoutSession:
    """What the player needs to reach the payment page."""

    payment_id: uuid.UUID
    session_id: uuid.UUID
    checkout_url: str
    client_reference: str
    gross_amount: int
    platform_fee: int
    net_to_owner: int

    def to_dict(self) -> dict:
        return {
            "payment_id": str(self.payment_id),
            "session_id": str(self.session_id),
            "checkout_url": self.checkout_url,
            "client_reference": self.client_reference,
            "amount": self.gross_amount,
            "platform_fee": self.platform_fee,
            "net_to_owner": self.net_to_owner,
        }


def build_client_reference(reservation_id: uuid.UUID | str, session_id: uuid.UUID | str) -> str:
    """
    Provider-facing reference for one checkout attempt.

    Format: "BK-{first 8 hex of reservation}-{10 upper hex of sha256}"
    Deterministic for a (reservation, session) pair.
    """
    reservation_hex = uuid.UUID(str(reservation_id)).hex[:8]
    digest = hashlib.sha256(f"{reservation_id}:{session_id}".encode()).hexdigest()[:10].upper()
    return f"BK-{reservation_hex}-{digest}"


# =============================================================================
# Checkout Session Manager
# =============================================================================


class CheckoutSessionManager(BaseService):
    """
    Creates checkout sessions against the checkout provider.

    Collaborators are injected so tests can pass doubles:
        CheckoutSessionManager(
            checkout_adapter=mock_adapter,
            reservations=ReservationRepository(),
        )
    """

    def __init__(
        self,
        checkout_adapter: CheckoutAdapter,
        reservations: ReservationRepository | None = None,
        default_commission_bps: int | None = None,
        api_base_url: str | None = None,
        frontend_url: str | None = None,
    ):
        self.checkout_adapter = checkout_adapter
        self.reservations = reservations or ReservationRepository()
        self.default_commission_bps = (
            default_commission_bps if default_commission_bps is not None else settings.PLATFORM_FEE_BPS
        )
        self.api_base_url = (api_base_url or settings.MARKETPLACE_API_BASE_URL).rstrip("/")
        self.frontend_url = (frontend_url or settings.FRONTEND_URL).rstrip("/")

    @classmethod
    def from_settings(cls) -> CheckoutSessionManager:
        return cls(checkout_adapter=build_checkout_adapter())

    def create_checkout(self, reservation_id: uuid.UUID | str, user_id) -> CheckoutSession:
        """
        Open a checkout session for the caller's reservation.

        Raises:
            PaymentNotFoundError: Reservation missing or not the caller's
            AlreadyPaidError: Reservation already paid
            PaymentValidationError: Amount or commission rate is invalid
            ProviderUnavailableError: Provider failed or is not configured
        """
        logger = self.get_logger()

        reservation = self.reservations.get_for_user(reservation_id, user_id)
        if reservation is None:
            raise PaymentNotFoundError(
                "Reservation not found",
                error_code="RESERVATION_NOT_FOUND",
                details={"reservation_id": str(reservation_id)},
            )
        if reservation.is_paid:
            raise AlreadyPaidError(
                "Reservation is already paid",
                details={"reservation_id": str(reservation.id)},
            )

        field = reservation.field
        commission_bps = (
            field.commission_rate_bps
            if field.commission_rate_bps is not None
            else self.default_commission_bps
        )
        breakdown = calculate_commission(reservation.gross_amount, commission_bps)

        session_id = uuid.uuid4()
        client_reference = build_client_reference(reservation.id, session_id)

        try:
            response = self.checkout_adapter.create_checkout(
                self._build_request(reservation, breakdown.gross_amount, client_reference, session_id)
            )
        except (ProviderError, PaymentConfigurationError) as e:
            logger.error(
                "Checkout provider failed, no payment created",
                extra={
                    "reservation_id": str(reservation.id),
                    "client_reference": client_reference,
                    "error_code": e.error_code,
                },
            )
            raise ProviderUnavailableError(
                "Payment provider is unavailable, please try again",
                provider=getattr(self.checkout_adapter, "provider_name", None),
                details={"reason": e.error_code},
            ) from e

        payment = MarketplacePayment.objects.create(
            reservation=reservation,
            session_id=session_id,
            client_reference=client_reference,
            gross_amount=breakdown.gross_amount,
            platform_fee=breakdown.platform_fee,
            net_to_owner=breakdown.net_to_owner,
            provider=self.checkout_adapter.provider_name,
            provider_token=response.token,
            checkout_url=response.checkout_url,
            provider_data={"checkout": response.raw_response},
        )

        logger.info(
            "Checkout session created",
            extra={
                "payment_id": str(payment.id),
                "reservation_id": str(reservation.id),
                "client_reference": client_reference,
                "gross_amount": breakdown.gross_amount,
                "platform_fee": breakdown.platform_fee,
            },
        )

        return CheckoutSession(
            payment_id=payment.id,
            session_id=session_id,
            checkout_url=response.checkout_url,
            client_reference=client_reference,
            gross_amount=breakdown.gross_amount,
            platform_fee=breakdown.platform_fee,
            net_to_owner=breakdown.net_to_owner,
        )

    def _build_request(
        self,
        reservation: Reservation,
        amount: int,
        client_reference: str,
        session_id: uuid.UUID,
    ) -> CheckoutRequest:
        field = reservation.field
        return CheckoutRequest(
            amount=amount,
            description=f"Réservation {field.name} - {reservation.reservation_date}",
            item_name=f"Réservation {field.name}",
            client_reference=client_reference,
            callback_url=f"{self.api_base_url}/api/v1/marketplace/webhook/paydunya/",
            return_url=f"{self.frontend_url}/reservations/{reservation.id}/success",
            cancel_url=f"{self.frontend_url}/reservations/{reservation.id}/cancel",
            custom_data={
                "session_id": str(session_id),
                "reservation_id": str(reservation.id),
            },
        )
