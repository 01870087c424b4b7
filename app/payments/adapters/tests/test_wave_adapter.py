"""
Tests for WaveAdapter.
"""

import pytest

from payments.adapters import ProviderStatus, WaveAdapter
from payments.exceptions import (
    InvalidRecipientError,
    PaymentConfigurationError,
    ProviderRequestError,
    ProviderTimeoutError,
)


class TestWaveConfiguration:
    def test_from_settings_sets_bearer_header(self, settings):
        settings.WAVE_API_KEY = "wave_live_key"
        settings.WAVE_BASE_URL = "https://api.wave.com"

        adapter = WaveAdapter.from_settings()

        assert adapter.is_configured
        assert adapter.http.session.headers["Authorization"] == "Bearer wave_live_key"

    def test_missing_key_is_not_configured(self, http_client):
        assert not WaveAdapter(api_key="", http_client=http_client).is_configured

    def test_unconfigured_payout_raises_without_network(self, http_client, payout_request):
        adapter = WaveAdapter(api_key="", http_client=http_client)

        with pytest.raises(PaymentConfigurationError):
            adapter.create_payout(payout_request)

        http_client.post.assert_not_called()


class TestWaveValidateRecipient:
    def test_normalizes_local_number(self, wave):
        assert wave.validate_recipient("77 123 45 67") == "+221771234567"

    @pytest.mark.parametrize("recipient", ["", "+33612345678", "+221331234567", "12345"])
    def test_rejects_non_senegal_mobile(self, wave, recipient):
        with pytest.raises(InvalidRecipientError) as exc_info:
            wave.validate_recipient(recipient)

        assert not exc_info.value.is_retryable
        assert exc_info.value.provider == "wave"


class TestWaveCreatePayout:
    def test_sends_payout_with_idempotency_header(self, wave, http_client, payout_request):
        http_client.post.return_value = {"id": "pt-1", "status": "processing"}

        response = wave.create_payout(payout_request)

        http_client.post.assert_called_once_with(
            "/v1/payout",
            json={
                "currency": "XOF",
                "receive_amount": "9000",
                "name": "Terrain Dakar",
                "mobile": "+221771234567",
                "reason": payout_request.reason,
                "client_reference": "payout:p:f:abcd1234",
            },
            headers={"Idempotency-Key": "payout:p:f:abcd1234"},
        )
        assert response.provider_id == "pt-1"
        assert response.status == ProviderStatus.PENDING
        assert response.raw_status == "processing"

    def test_succeeded_status(self, wave, http_client, payout_request):
        http_client.post.return_value = {"id": "pt-1", "status": "succeeded"}

        assert wave.create_payout(payout_request).status == ProviderStatus.SUCCEEDED

    def test_default_recipient_name(self, wave, http_client, payout_request):
        payout_request.recipient_name = ""
        http_client.post.return_value = {"id": "pt-1", "status": "processing"}

        wave.create_payout(payout_request)

        assert http_client.post.call_args.kwargs["json"]["name"] == "Field owner"

    def test_local_recipient_is_sent_in_e164(self, wave, http_client, payout_request):
        payout_request.recipient = "771234567"
        http_client.post.return_value = {"id": "pt-1", "status": "processing"}

        wave.create_payout(payout_request)

        assert http_client.post.call_args.kwargs["json"]["mobile"] == "+221771234567"

    def test_invalid_recipient_rejected_before_network(self, wave, http_client, payout_request):
        payout_request.recipient = "+33612345678"

        with pytest.raises(InvalidRecipientError):
            wave.create_payout(payout_request)

        http_client.post.assert_not_called()

    def test_payout_error_raises_request_error(self, wave, http_client, payout_request):
        http_client.post.return_value = {"payout_error": "recipient-limit-exceeded"}

        with pytest.raises(ProviderRequestError) as exc_info:
            wave.create_payout(payout_request)

        assert exc_info.value.provider_code == "recipient-limit-exceeded"
        assert not exc_info.value.is_retryable

    def test_timeout_propagates_as_retryable(self, wave, http_client, payout_request):
        http_client.post.side_effect = ProviderTimeoutError("slow", provider="wave")

        with pytest.raises(ProviderTimeoutError) as exc_info:
            wave.create_payout(payout_request)

        assert exc_info.value.is_retryable


class TestWaveGetStatus:
    def test_uses_status_timeout(self, wave, http_client):
        http_client.get.return_value = {"id": "pt-1", "status": "succeeded"}

        response = wave.get_status("pt-1")

        http_client.get.assert_called_once_with("/v1/payout/pt-1", timeout=wave.status_timeout)
        assert response.status == ProviderStatus.SUCCEEDED

    def test_missing_id_falls_back_to_requested(self, wave, http_client):
        http_client.get.return_value = {"status": "failed"}

        response = wave.get_status("pt-9")

        assert response.provider_id == "pt-9"
        assert response.status == ProviderStatus.FAILED
