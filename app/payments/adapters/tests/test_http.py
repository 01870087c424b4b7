"""
Tests for ProviderHTTPClient error translation.
"""

from unittest.mock import MagicMock

import pytest
import requests

from payments.adapters.http import ProviderHTTPClient
from payments.exceptions import (
    ProviderRequestError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)


def make_response(status_code=200, json_data=None, text="", json_error=None):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def session():
    mock_session = MagicMock()
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def client(session):
    return ProviderHTTPClient(
        provider="wave",
        base_url="https://api.wave.com/",
        headers={"Authorization": "Bearer key"},
        timeout=30,
        session=session,
    )


class TestProviderHTTPClient:
    def test_sets_default_and_provider_headers(self, client, session):
        assert session.headers["Authorization"] == "Bearer key"
        assert session.headers["Content-Type"] == "application/json"

    def test_post_returns_json_and_passes_timeout(self, client, session):
        session.request.return_value = make_response(json_data={"id": "pt-1"})

        data = client.post("/v1/payout", json={"a": 1}, headers={"Idempotency-Key": "k"})

        assert data == {"id": "pt-1"}
        session.request.assert_called_once_with(
            "POST",
            "https://api.wave.com/v1/payout",
            json={"a": 1},
            params=None,
            headers={"Idempotency-Key": "k"},
            timeout=30,
        )

    def test_per_call_timeout_overrides_default(self, client, session):
        session.request.return_value = make_response(json_data={})

        client.get("/v1/payout/pt-1", timeout=15)

        assert session.request.call_args.kwargs["timeout"] == 15

    def test_non_dict_json_is_wrapped(self, client, session):
        session.request.return_value = make_response(json_data=[1, 2])

        assert client.get("/list") == {"data": [1, 2]}

    def test_timeout_raises_provider_timeout(self, client, session):
        session.request.side_effect = requests.Timeout("slow")

        with pytest.raises(ProviderTimeoutError) as exc_info:
            client.get("/v1/payout/pt-1")

        assert exc_info.value.is_retryable
        assert exc_info.value.provider == "wave"

    def test_connection_error_raises_unavailable(self, client, session):
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ProviderUnavailableError) as exc_info:
            client.get("/v1/payout/pt-1")

        assert not isinstance(exc_info.value, ProviderTimeoutError)

    @pytest.mark.parametrize("status_code", [429, 500, 502, 503])
    def test_server_errors_are_retryable(self, client, session, status_code):
        session.request.return_value = make_response(status_code=status_code, text="oops")

        with pytest.raises(ProviderUnavailableError) as exc_info:
            client.post("/v1/payout", json={})

        assert exc_info.value.provider_code == str(status_code)
        assert exc_info.value.is_retryable

    @pytest.mark.parametrize("status_code", [400, 401, 404, 422])
    def test_client_errors_are_permanent(self, client, session, status_code):
        session.request.return_value = make_response(status_code=status_code, text="bad")

        with pytest.raises(ProviderRequestError) as exc_info:
            client.post("/v1/payout", json={})

        assert not exc_info.value.is_retryable
        assert exc_info.value.details["body"] == "bad"

    def test_non_json_body_is_unavailable(self, client, session):
        session.request.return_value = make_response(text="<html>", json_error=ValueError("no json"))

        with pytest.raises(ProviderUnavailableError):
            client.get("/v1/payout/pt-1")
