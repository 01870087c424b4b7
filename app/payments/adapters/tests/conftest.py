"""
Pytest fixtures for provider adapter tests.

Adapters are given a MagicMock in place of ProviderHTTPClient, so tests
assert on the exact path, payload and headers sent and feed back canned
provider JSON.
"""

from unittest.mock import MagicMock

import pytest

from payments.adapters import PayDunyaAdapter, PayoutRequest, WaveAdapter

WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture
def http_client():
    return MagicMock()


@pytest.fixture
def paydunya(http_client):
    return PayDunyaAdapter(
        master_key="master",
        private_key="private",
        public_key="public",
        webhook_secret=WEBHOOK_SECRET,
        store_name="Marketplace",
        website_url="https://example.com",
        http_client=http_client,
    )


@pytest.fixture
def wave(http_client):
    return WaveAdapter(api_key="wave_test_key", http_client=http_client)


@pytest.fixture
def payout_request():
    return PayoutRequest(
        amount=9000,
        recipient="+221771234567",
        reason="Versement réservation BK-1a2b3c4d-9F00AA12BC",
        idempotency_key="payout:p:f:abcd1234",
        recipient_name="Terrain Dakar",
    )
