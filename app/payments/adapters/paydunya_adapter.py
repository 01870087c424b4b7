"""
PayDunya adapter: hosted checkout, payment confirmation and PUSH payouts.

PayDunya is the checkout provider (the player pays on a PayDunya page) and
one of the payout channels (PUSH to a mobile money wallet).

Response normalisation:
    The confirm endpoint reports the status either at the top level or
    under ``invoice.status`` depending on the invoice type; custom data
    follows the same split. Both shapes are resolved here and callers only
    see CheckoutConfirmation.status.

Idempotency:
    PUSH has no idempotency header. The key is sent as the
    ``idempotency_key`` body field and stored on the payout for audit;
    deduplication relies on the payout dispatcher's active-row guard.

Configuration (via settings):
    PAYDUNYA_BASE_URL, PAYDUNYA_MASTER_KEY, PAYDUNYA_PRIVATE_KEY,
    PAYDUNYA_PUBLIC_KEY, PAYDUNYA_WEBHOOK_SECRET, MARKETPLACE_STORE_NAME,
    PAYMENT_PROVIDER_TIMEOUT_SECONDS, PAYMENT_PROVIDER_STATUS_TIMEOUT_SECONDS
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import TYPE_CHECKING

from django.conf import settings

from payments.adapters.base import (
    CheckoutConfirmation,
    CheckoutRequest,
    CheckoutResponse,
    PayoutRequest,
    PayoutResponse,
    is_valid_senegal_mobile,
    normalize_senegal_mobile,
    normalize_status,
)
from payments.adapters.http import ProviderHTTPClient
from payments.exceptions import (
    InvalidRecipientError,
    InvalidSignatureError,
    PaymentConfigurationError,
    ProviderRequestError,
)

if TYPE_CHECKING:
    from typing import Any


PAYDUNYA_SUCCESS_CODE = "00"


class PayDunyaAdapter:
    """
    Client for the PayDunya checkout-invoice and PUSH APIs.

    Usage:
        adapter = PayDunyaAdapter.from_settings()
        response = adapter.create_checkout(request)
        confirmation = adapter.confirm_checkout(response.token)
    """

    provider_name = "paydunya"
    signature_header = "X-Paydunya-Signature"

    def __init__(
        self,
        master_key: str,
        private_key: str,
        public_key: str = "",
        base_url: str = "https://app.paydunya.com",
        webhook_secret: str = "",
        store_name: str = "",
        website_url: str = "",
        timeout: float = 30,
        status_timeout: float = 15,
        http_client: ProviderHTTPClient | None = None,
    ):
        self.master_key = master_key
        self.private_key = private_key
        self.public_key = public_key
        self.webhook_secret = webhook_secret
        self.store_name = store_name
        self.website_url = website_url
        self.status_timeout = status_timeout
        self.http = http_client or ProviderHTTPClient(
            provider=self.provider_name,
            base_url=base_url,
            headers={
                "PAYDUNYA-MASTER-KEY": master_key,
                "PAYDUNYA-PRIVATE-KEY": private_key,
                "PAYDUNYA-PUBLIC-KEY": public_key,
            },
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls) -> PayDunyaAdapter:
        return cls(
            master_key=settings.PAYDUNYA_MASTER_KEY,
            private_key=settings.PAYDUNYA_PRIVATE_KEY,
            public_key=settings.PAYDUNYA_PUBLIC_KEY,
            base_url=settings.PAYDUNYA_BASE_URL,
            webhook_secret=settings.PAYDUNYA_WEBHOOK_SECRET,
            store_name=settings.MARKETPLACE_STORE_NAME,
            website_url=settings.FRONTEND_URL,
            timeout=settings.PAYMENT_PROVIDER_TIMEOUT_SECONDS,
            status_timeout=settings.PAYMENT_PROVIDER_STATUS_TIMEOUT_SECONDS,
        )

    @classmethod
    def get_logger(cls) -> logging.Logger:
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @property
    def is_configured(self) -> bool:
        return bool(self.master_key and self.private_key)

    @property
    def webhook_secret_configured(self) -> bool:
        return bool(self.webhook_secret)

    # =========================================================================
    # Checkout
    # =========================================================================

    def create_checkout(self, request: CheckoutRequest) -> CheckoutResponse:
        """
        Create a checkout invoice and return its token and payment page URL.

        Raises:
            PaymentConfigurationError: API keys are missing
            ProviderRequestError: PayDunya answered with a non-"00" code
            ProviderUnavailableError: Network failure, timeout or 5xx
        """
        self._require_configured()
        payload = {
            "invoice": {
                "items": {
                    "item_0": {
                        "name": request.item_name,
                        "quantity": 1,
                        "unit_price": request.amount,
                        "total_price": request.amount,
                    }
                },
                "total_amount": request.amount,
                "description": request.description,
            },
            "store": {
                "name": self.store_name,
                "website_url": self.website_url,
            },
            "actions": {
                "callback_url": request.callback_url,
                "return_url": request.return_url,
                "cancel_url": request.cancel_url,
            },
            "custom_data": {
                "client_reference": request.client_reference,
                **request.custom_data,
            },
        }

        self.get_logger().info(
            "Creating PayDunya checkout invoice",
            extra={
                "client_reference": request.client_reference,
                "amount": request.amount,
            },
        )
        data = self.http.post("/api/v1/checkout-invoice/create", json=payload)
        self._raise_for_response_code(data, operation="create_checkout")

        token = data.get("token")
        checkout_url = data.get("invoice_url") or data.get("response_text")
        if not token or not checkout_url:
            raise ProviderRequestError(
                "PayDunya checkout response is missing token or URL",
                provider=self.provider_name,
                details={"response": data},
            )

        return CheckoutResponse(token=token, checkout_url=checkout_url, raw_response=data)

    def confirm_checkout(self, token: str) -> CheckoutConfirmation:
        """
        Fetch the authoritative status of a checkout invoice.

        Raises:
            ProviderRequestError: PayDunya does not know the token
            ProviderUnavailableError: Network failure, timeout or 5xx
        """
        self._require_configured()
        data = self.http.get(
            f"/api/v1/checkout-invoice/confirm/{token}",
            timeout=self.status_timeout,
        )
        invoice = data.get("invoice") if isinstance(data.get("invoice"), dict) else {}

        raw_status = data.get("status") or invoice.get("status")
        if raw_status is None:
            self._raise_for_response_code(data, operation="confirm_checkout")

        custom_data = data.get("custom_data") or invoice.get("custom_data") or {}
        amount = invoice.get("total_amount")

        confirmation = CheckoutConfirmation(
            token=token,
            status=normalize_status(raw_status),
            raw_status=raw_status,
            amount=_to_int(amount),
            custom_data=custom_data if isinstance(custom_data, dict) else {},
            raw_response=data,
        )
        self.get_logger().info(
            "PayDunya checkout confirmed",
            extra={
                "token": token,
                "raw_status": raw_status,
                "status": confirmation.status.value,
            },
        )
        return confirmation

    # =========================================================================
    # Webhooks
    # =========================================================================

    def extract_token(self, payload: dict[str, Any]) -> str | None:
        """Find the invoice token in the shapes PayDunya notifications use."""
        if not isinstance(payload, dict):
            return None
        candidates = [payload.get("token")]
        for container_key in ("invoice", "data"):
            container = payload.get(container_key)
            if isinstance(container, dict):
                candidates.append(container.get("token"))
                nested = container.get("invoice")
                if isinstance(nested, dict):
                    candidates.append(nested.get("token"))
        for candidate in candidates:
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        return None

    def verify_webhook_signature(self, raw_body: bytes, signature: str | None) -> None:
        """
        Check the hex HMAC-SHA256 of the raw body against the shared secret.

        Raises:
            PaymentConfigurationError: No webhook secret configured
            InvalidSignatureError: Header missing or digest mismatch
        """
        if not self.webhook_secret:
            raise PaymentConfigurationError(
                "PayDunya webhook secret is not configured",
                error_code="WEBHOOK_SECRET_MISSING",
            )
        if not signature:
            raise InvalidSignatureError(
                "Webhook signature header is missing",
                details={"header": self.signature_header},
            )

        expected = hmac.new(
            self.webhook_secret.encode(),
            raw_body,
            hashlib.sha256,
        ).hexdigest()
        if not hmac.compare_digest(expected, signature.strip().lower()):
            raise InvalidSignatureError("Webhook signature does not match")

    # =========================================================================
    # PUSH Payouts
    # =========================================================================

    def validate_recipient(self, recipient: str) -> str:
        """Return the E.164 wallet number or raise InvalidRecipientError."""
        normalized = normalize_senegal_mobile(recipient)
        if not is_valid_senegal_mobile(normalized):
            raise InvalidRecipientError(
                "PayDunya PUSH requires a Senegal mobile number (+221XXXXXXXXX)",
                provider=self.provider_name,
                details={"recipient": recipient},
            )
        return normalized

    def create_payout(self, request: PayoutRequest) -> PayoutResponse:
        """
        Push ``request.amount`` XOF to the recipient's wallet.

        Raises:
            InvalidRecipientError: Recipient fails validation (no network call)
            ProviderRequestError: PayDunya refused the transfer
            ProviderUnavailableError: Network failure, timeout or 5xx
        """
        recipient = self.validate_recipient(request.recipient)
        self._require_configured()

        payload = {
            "amount": request.amount,
            "currency": "XOF",
            "recipient_phone": recipient,
            "reason": request.reason,
            "idempotency_key": request.idempotency_key,
        }
        data = self.http.post("/api/v1/push", json=payload)
        self._raise_for_response_code(data, operation="create_payout")

        raw_status = data.get("status") or "processing"
        return PayoutResponse(
            provider_id=data.get("transaction_id"),
            status=normalize_status(raw_status),
            raw_status=raw_status,
            raw_response=data,
        )

    def get_status(self, provider_id: str) -> PayoutResponse:
        self._require_configured()
        data = self.http.get(f"/api/v1/push/{provider_id}", timeout=self.status_timeout)
        raw_status = data.get("status")
        return PayoutResponse(
            provider_id=provider_id,
            status=normalize_status(raw_status),
            raw_status=raw_status,
            raw_response=data,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_configured(self) -> None:
        if not self.is_configured:
            raise PaymentConfigurationError(
                "PayDunya API keys are not configured",
                error_code="PROVIDER_NOT_CONFIGURED",
                details={"provider": self.provider_name},
            )

    def _raise_for_response_code(self, data: dict[str, Any], operation: str) -> None:
        response_code = str(data.get("response_code", ""))
        if response_code == PAYDUNYA_SUCCESS_CODE:
            return
        self.get_logger().warning(
            "PayDunya returned an error response code",
            extra={
                "operation": operation,
                "response_code": response_code,
                "response_text": data.get("response_text"),
            },
        )
        raise ProviderRequestError(
            f"PayDunya error: {data.get('response_text') or 'unknown error'}",
            provider=self.provider_name,
            provider_code=response_code or None,
        )


def _to_int(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None

