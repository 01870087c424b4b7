"""
Tests for PayDunyaAdapter.

Tests cover:
- Checkout invoice creation payload and response handling
- Confirmation status normalisation across response shapes
- Token extraction from notification payloads
- Webhook HMAC verification
- PUSH payouts and recipient validation
"""

import hashlib
import hmac

import pytest

from payments.adapters import CheckoutRequest, PayDunyaAdapter, ProviderStatus
from payments.adapters.tests.conftest import WEBHOOK_SECRET
from payments.exceptions import (
    InvalidRecipientError,
    InvalidSignatureError,
    PaymentConfigurationError,
    ProviderRequestError,
    ProviderUnavailableError,
)


@pytest.fixture
def checkout_request():
    return CheckoutRequest(
        amount=10000,
        description="Réservation Terrain Dakar - 2026-10-22",
        item_name="Réservation Terrain Dakar",
        client_reference="BK-1a2b3c4d-9F00AA12BC",
        callback_url="https://api.example.com/api/v1/marketplace/webhook/paydunya/",
        return_url="https://example.com/reservations/1/success",
        cancel_url="https://example.com/reservations/1/cancel",
        custom_data={"session_id": "s-1"},
    )


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


# =============================================================================
# Configuration
# =============================================================================


class TestConfiguration:
    def test_configured_needs_master_and_private_keys(self, http_client):
        assert PayDunyaAdapter("m", "p", http_client=http_client).is_configured
        assert not PayDunyaAdapter("m", "", http_client=http_client).is_configured
        assert not PayDunyaAdapter("", "p", http_client=http_client).is_configured

    def test_from_settings(self, settings):
        settings.PAYDUNYA_MASTER_KEY = "master"
        settings.PAYDUNYA_PRIVATE_KEY = "private"
        settings.PAYDUNYA_PUBLIC_KEY = "public"
        settings.PAYDUNYA_WEBHOOK_SECRET = "secret"
        settings.PAYDUNYA_BASE_URL = "https://app.paydunya.com/sandbox-api"

        adapter = PayDunyaAdapter.from_settings()

        assert adapter.is_configured
        assert adapter.webhook_secret_configured
        assert adapter.http.base_url == "https://app.paydunya.com/sandbox-api"
        assert adapter.http.session.headers["PAYDUNYA-MASTER-KEY"] == "master"
        assert adapter.http.session.headers["PAYDUNYA-PRIVATE-KEY"] == "private"

    def test_unconfigured_checkout_fails_without_network(self, http_client, checkout_request):
        adapter = PayDunyaAdapter("", "", http_client=http_client)

        with pytest.raises(PaymentConfigurationError):
            adapter.create_checkout(checkout_request)

        http_client.post.assert_not_called()


# =============================================================================
# Checkout
# =============================================================================


class TestCreateCheckout:
    def test_sends_invoice_payload(self, paydunya, http_client, checkout_request):
        http_client.post.return_value = {
            "response_code": "00",
            "token": "tok_1",
            "response_text": "https://app.paydunya.com/checkout/invoice/tok_1",
        }

        response = paydunya.create_checkout(checkout_request)

        path = http_client.post.call_args.args[0]
        payload = http_client.post.call_args.kwargs["json"]
        assert path == "/api/v1/checkout-invoice/create"
        assert payload["invoice"]["total_amount"] == 10000
        assert payload["invoice"]["items"]["item_0"]["unit_price"] == 10000
        assert payload["actions"]["callback_url"] == checkout_request.callback_url
        assert payload["custom_data"]["client_reference"] == "BK-1a2b3c4d-9F00AA12BC"
        assert payload["custom_data"]["session_id"] == "s-1"
        assert payload["store"]["name"] == "Marketplace"

        assert response.token == "tok_1"
        assert response.checkout_url == "https://app.paydunya.com/checkout/invoice/tok_1"

    def test_prefers_invoice_url(self, paydunya, http_client, checkout_request):
        http_client.post.return_value = {
            "response_code": "00",
            "token": "tok_1",
            "invoice_url": "https://pay/invoice/tok_1",
            "response_text": "https://other",
        }

        assert paydunya.create_checkout(checkout_request).checkout_url == "https://pay/invoice/tok_1"

    def test_error_response_code_raises(self, paydunya, http_client, checkout_request):
        http_client.post.return_value = {"response_code": "1001", "response_text": "Invalid keys"}

        with pytest.raises(ProviderRequestError) as exc_info:
            paydunya.create_checkout(checkout_request)

        assert exc_info.value.provider_code == "1001"

    def test_missing_token_raises(self, paydunya, http_client, checkout_request):
        http_client.post.return_value = {"response_code": "00", "response_text": ""}

        with pytest.raises(ProviderRequestError):
            paydunya.create_checkout(checkout_request)

    def test_transport_errors_propagate(self, paydunya, http_client, checkout_request):
        http_client.post.side_effect = ProviderUnavailableError("down", provider="paydunya")

        with pytest.raises(ProviderUnavailableError):
            paydunya.create_checkout(checkout_request)


class TestConfirmCheckout:
    def test_top_level_status(self, paydunya, http_client):
        http_client.get.return_value = {
            "response_code": "00",
            "status": "completed",
            "invoice": {"total_amount": "10000"},
            "custom_data": {"client_reference": "BK-1"},
        }

        confirmation = paydunya.confirm_checkout("tok_1")

        http_client.get.assert_called_once_with(
            "/api/v1/checkout-invoice/confirm/tok_1",
            timeout=paydunya.status_timeout,
        )
        assert confirmation.status == ProviderStatus.SUCCEEDED
        assert confirmation.raw_status == "completed"
        assert confirmation.amount == 10000
        assert confirmation.custom_data == {"client_reference": "BK-1"}

    def test_status_nested_in_invoice(self, paydunya, http_client):
        http_client.get.return_value = {
            "response_code": "00",
            "invoice": {"status": "cancelled", "custom_data": {"session_id": "s-1"}},
        }

        confirmation = paydunya.confirm_checkout("tok_1")

        assert confirmation.status == ProviderStatus.FAILED
        assert confirmation.custom_data == {"session_id": "s-1"}

    def test_pending_status(self, paydunya, http_client):
        http_client.get.return_value = {"response_code": "00", "status": "pending"}

        assert paydunya.confirm_checkout("tok_1").status == ProviderStatus.PENDING

    def test_unknown_token_raises(self, paydunya, http_client):
        http_client.get.return_value = {"response_code": "4004", "response_text": "Invoice not found"}

        with pytest.raises(ProviderRequestError):
            paydunya.confirm_checkout("nope")


# =============================================================================
# Webhooks
# =============================================================================


class TestExtractToken:
    @pytest.mark.parametrize(
        "payload",
        [
            {"token": "tok_1"},
            {"invoice": {"token": "tok_1"}},
            {"data": {"token": "tok_1"}},
            {"data": {"invoice": {"token": "tok_1"}}},
            {"token": "  tok_1  "},
        ],
    )
    def test_known_shapes(self, paydunya, payload):
        assert paydunya.extract_token(payload) == "tok_1"

    @pytest.mark.parametrize("payload", [{}, {"token": ""}, {"invoice": "tok_1"}, {"token": 42}, None])
    def test_missing_token(self, paydunya, payload):
        assert paydunya.extract_token(payload) is None


class TestVerifyWebhookSignature:
    body = b'{"token": "tok_1", "status": "completed"}'

    def test_valid_signature(self, paydunya):
        paydunya.verify_webhook_signature(self.body, sign(self.body))

    def test_signature_is_case_insensitive(self, paydunya):
        paydunya.verify_webhook_signature(self.body, sign(self.body).upper())

    def test_tampered_body_rejected(self, paydunya):
        signature = sign(self.body)

        with pytest.raises(InvalidSignatureError):
            paydunya.verify_webhook_signature(self.body + b" ", signature)

    def test_wrong_secret_rejected(self, paydunya):
        with pytest.raises(InvalidSignatureError):
            paydunya.verify_webhook_signature(self.body, sign(self.body, secret="other"))

    def test_missing_header_rejected(self, paydunya):
        with pytest.raises(InvalidSignatureError):
            paydunya.verify_webhook_signature(self.body, None)

    def test_missing_secret_is_configuration_error(self, http_client):
        adapter = PayDunyaAdapter("m", "p", webhook_secret="", http_client=http_client)

        with pytest.raises(PaymentConfigurationError):
            adapter.verify_webhook_signature(self.body, "anything")


# =============================================================================
# PUSH Payouts
# =============================================================================


class TestPushPayout:
    def test_sends_push_with_idempotency_key(self, paydunya, http_client, payout_request):
        http_client.post.return_value = {
            "response_code": "00",
            "transaction_id": "push_1",
            "status": "completed",
        }

        response = paydunya.create_payout(payout_request)

        path = http_client.post.call_args.args[0]
        payload = http_client.post.call_args.kwargs["json"]
        assert path == "/api/v1/push"
        assert payload == {
            "amount": 9000,
            "currency": "XOF",
            "recipient_phone": "+221771234567",
            "reason": payout_request.reason,
            "idempotency_key": "payout:p:f:abcd1234",
        }
        assert response.provider_id == "push_1"
        assert response.status == ProviderStatus.SUCCEEDED

    def test_status_defaults_to_processing(self, paydunya, http_client, payout_request):
        http_client.post.return_value = {"response_code": "00", "transaction_id": "push_1"}

        response = paydunya.create_payout(payout_request)

        assert response.status == ProviderStatus.PENDING
        assert response.raw_status == "processing"

    def test_invalid_recipient_rejected_before_network(self, paydunya, http_client, payout_request):
        payout_request.recipient = "+33612345678"

        with pytest.raises(InvalidRecipientError):
            paydunya.create_payout(payout_request)

        http_client.post.assert_not_called()

    def test_error_code_raises(self, paydunya, http_client, payout_request):
        http_client.post.return_value = {"response_code": "2001", "response_text": "Insufficient balance"}

        with pytest.raises(ProviderRequestError):
            paydunya.create_payout(payout_request)

    def test_get_status(self, paydunya, http_client):
        http_client.get.return_value = {"status": "failed"}

        response = paydunya.get_status("push_1")

        assert http_client.get.call_args.args[0] == "/api/v1/push/push_1"
        assert response.status == ProviderStatus.FAILED
        assert response.provider_id == "push_1"
