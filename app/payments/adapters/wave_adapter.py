"""
Wave adapter: payouts to Wave mobile wallets in Senegal.

Wave deduplicates on the ``Idempotency-Key`` header: a retried payout that
reuses the key of an earlier attempt returns that attempt instead of sending
the money twice.

Configuration (via settings):
    WAVE_API_KEY: Bearer token for the payout API
    WAVE_BASE_URL: API root (default https://api.wave.com)
    PAYMENT_PROVIDER_TIMEOUT_SECONDS / PAYMENT_PROVIDER_STATUS_TIMEOUT_SECONDS
"""

from __future__ import annotations

import logging

from django.conf import settings

from payments.adapters.base import (
    PayoutRequest,
    PayoutResponse,
    is_valid_senegal_mobile,
    normalize_senegal_mobile,
    normalize_status,
)
from payments.adapters.http import ProviderHTTPClient
from payments.exceptions import (
    InvalidRecipientError,
    PaymentConfigurationError,
    ProviderRequestError,
)

DEFAULT_RECIPIENT_NAME = "Field owner"


class WaveAdapter:
    """
    Client for the Wave payout API.

    Usage:
        adapter = WaveAdapter.from_settings()
        response = adapter.create_payout(
            PayoutRequest(
                amount=9000,
                recipient="+221771234567",
                reason="Reservation BK-1a2b3c4d-9F00AA12BC",
                idempotency_key=key,
            )
        )
    """

    provider_name = "wave"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.wave.com",
        timeout: float = 30,
        status_timeout: float = 15,
        http_client: ProviderHTTPClient | None = None,
    ):
        self.api_key = api_key
        self.status_timeout = status_timeout
        self.http = http_client or ProviderHTTPClient(
            provider=self.provider_name,
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls) -> WaveAdapter:
        return cls(
            api_key=settings.WAVE_API_KEY,
            base_url=settings.WAVE_BASE_URL,
            timeout=settings.PAYMENT_PROVIDER_TIMEOUT_SECONDS,
            status_timeout=settings.PAYMENT_PROVIDER_STATUS_TIMEOUT_SECONDS,
        )

    @classmethod
    def get_logger(cls) -> logging.Logger:
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def validate_recipient(self, recipient: str) -> str:
        """
        Return the recipient as E.164 or raise InvalidRecipientError.

        Wave Senegal wallets are +221 followed by 9 digits starting with 6 or 7.
        """
        normalized = normalize_senegal_mobile(recipient)
        if not is_valid_senegal_mobile(normalized):
            raise InvalidRecipientError(
                "Wave requires a Senegal mobile number (+221XXXXXXXXX)",
                provider=self.provider_name,
                details={"recipient": recipient},
            )
        return normalized

    def create_payout(self, request: PayoutRequest) -> PayoutResponse:
        """
        Send ``request.amount`` XOF to a Wave wallet.

        Raises:
            InvalidRecipientError: Recipient fails validation (no network call)
            ProviderRequestError: Wave refused the payout
            ProviderUnavailableError: Network failure, timeout or 5xx
        """
        mobile = self.validate_recipient(request.recipient)
        if not self.is_configured:
            raise PaymentConfigurationError(
                "Wave API key is not configured",
                error_code="PROVIDER_NOT_CONFIGURED",
                details={"provider": self.provider_name},
            )

        payload = {
            "currency": "XOF",
            "receive_amount": str(request.amount),
            "name": request.recipient_name or DEFAULT_RECIPIENT_NAME,
            "mobile": mobile,
            "reason": request.reason,
            "client_reference": request.idempotency_key,
        }

        self.get_logger().info(
            "Creating Wave payout",
            extra={
                "amount": request.amount,
                "idempotency_key": request.idempotency_key,
            },
        )
        data = self.http.post(
            "/v1/payout",
            json=payload,
            headers={"Idempotency-Key": request.idempotency_key},
        )

        if data.get("payout_error"):
            raise ProviderRequestError(
                f"Wave payout error: {data['payout_error']}",
                provider=self.provider_name,
                provider_code=str(data.get("payout_error")),
            )

        raw_status = data.get("status")
        return PayoutResponse(
            provider_id=data.get("id"),
            status=normalize_status(raw_status),
            raw_status=raw_status,
            raw_response=data,
        )

    def get_status(self, provider_id: str) -> PayoutResponse:
        """Fetch the current status of a Wave payout."""
        data = self.http.get(f"/v1/payout/{provider_id}", timeout=self.status_timeout)
        raw_status = data.get("status")
        return PayoutResponse(
            provider_id=data.get("id") or provider_id,
            status=normalize_status(raw_status),
            raw_status=raw_status,
            raw_response=data,
        )
