"""
Tests for the payout Celery tasks.

Tests cover:
- Retrying failed payouts whose retry time has passed
- Leaving future, exhausted and unsupported-channel rows alone
- Polling processing payouts and applying the provider status
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from payments.exceptions import ProviderUnavailableError
from payments.models import Payout
from payments.services import PayoutDispatcher
from payments.state_machines import PayoutChannel, PayoutState
from payments.tasks import retry_failed_payouts, sync_processing_payouts
from payments.tests.factories import PayoutFactory, payout_response


@pytest.fixture
def dispatcher(mocker, payout_adapters):
    dispatcher = PayoutDispatcher(
        adapters=payout_adapters,
        retry_delay=timedelta(minutes=5),
        max_attempts=5,
    )
    mocker.patch.object(PayoutDispatcher, "from_settings", return_value=dispatcher)
    return dispatcher


def failed_payout(payment, next_retry_at, retry_count=0):
    return PayoutFactory(
        marketplace_payment=payment,
        status=PayoutState.FAILED,
        retry_count=retry_count,
        next_retry_at=next_retry_at,
        provider_error={"code": "PROVIDER_TIMEOUT"},
    )


# =============================================================================
# Retry Coordinator
# =============================================================================


@pytest.mark.django_db
class TestRetryFailedPayouts:
    def test_retries_due_payout(self, dispatcher, paid_payment, wave_adapter):
        previous = failed_payout(paid_payment, timezone.now() - timedelta(minutes=1))

        result = retry_failed_payouts()

        assert result == {"retried_count": 1, "outcomes": {"completed": 1}}
        retried = Payout.objects.get(marketplace_payment=paid_payment, status=PayoutState.COMPLETED)
        assert retried.retry_count == 1
        assert retried.idempotency_key == previous.idempotency_key
        assert Payout.objects.get(id=previous.id).next_retry_at is None
        wave_adapter.create_payout.assert_called_once()

    def test_retries_payout_accepted_without_reference(self, dispatcher, paid_payment, wave_adapter):
        wave_adapter.create_payout.return_value = payout_response("processing", provider_id=None)
        dispatcher.dispatch(paid_payment)
        wave_adapter.create_payout.return_value = payout_response("succeeded", provider_id="pt-8")

        with freeze_time(timezone.now() + timedelta(minutes=6)):
            result = retry_failed_payouts()

        assert result == {"retried_count": 1, "outcomes": {"completed": 1}}
        assert not Payout.objects.filter(marketplace_payment=paid_payment, status=PayoutState.PROCESSING).exists()

    def test_ignores_future_retry(self, dispatcher, paid_payment, wave_adapter):
        failed_payout(paid_payment, timezone.now() + timedelta(minutes=5))

        result = retry_failed_payouts()

        assert result == {"retried_count": 0, "outcomes": {}}
        wave_adapter.create_payout.assert_not_called()

    def test_ignores_rows_without_retry_time(self, dispatcher, paid_payment, wave_adapter):
        failed_payout(paid_payment, None, retry_count=4)

        assert retry_failed_payouts()["retried_count"] == 0
        wave_adapter.create_payout.assert_not_called()

    def test_failed_retry_schedules_next(self, dispatcher, paid_payment, wave_adapter):
        failed_payout(paid_payment, timezone.now() - timedelta(minutes=1))
        wave_adapter.create_payout.side_effect = ProviderUnavailableError("down", provider="wave")

        with freeze_time(timezone.now()):
            result = retry_failed_payouts()
            expected_retry = timezone.now() + timedelta(minutes=5)

        assert result["outcomes"] == {"failed": 1}
        latest = Payout.objects.filter(marketplace_payment=paid_payment).order_by("-retry_count").first()
        assert latest.retry_count == 1
        assert latest.next_retry_at == expected_retry

    def test_each_payment_retried_once_per_run(self, dispatcher, paid_payment, wave_adapter):
        failed_payout(paid_payment, timezone.now() - timedelta(minutes=10))
        failed_payout(paid_payment, timezone.now() - timedelta(minutes=1), retry_count=1)

        result = retry_failed_payouts()

        assert result["retried_count"] == 1
        assert wave_adapter.create_payout.call_count == 1


# =============================================================================
# Status Poller
# =============================================================================


@pytest.mark.django_db
class TestSyncProcessingPayouts:
    def test_completes_succeeded_payout(self, dispatcher, paid_payment, wave_adapter):
        payout = PayoutFactory(marketplace_payment=paid_payment, provider_id="pt-1")
        wave_adapter.get_status.return_value = payout_response("succeeded", "pt-1")

        result = sync_processing_payouts()

        assert result == {"checked": 1, "completed": 1, "failed": 0, "errors": 0}
        assert Payout.objects.get(id=payout.id).status == PayoutState.COMPLETED
        wave_adapter.get_status.assert_called_once_with("pt-1")

    def test_fails_rejected_payout(self, dispatcher, paid_payment, wave_adapter):
        payout = PayoutFactory(marketplace_payment=paid_payment, provider_id="pt-1")
        wave_adapter.get_status.return_value = payout_response("failed", "pt-1")

        result = sync_processing_payouts()

        assert result["failed"] == 1
        fresh = Payout.objects.get(id=payout.id)
        assert fresh.status == PayoutState.FAILED
        assert fresh.next_retry_at is not None

    def test_pending_stays_processing(self, dispatcher, paid_payment, wave_adapter):
        payout = PayoutFactory(marketplace_payment=paid_payment, provider_id="pt-1")
        wave_adapter.get_status.return_value = payout_response("processing", "pt-1")

        result = sync_processing_payouts()

        assert result == {"checked": 1, "completed": 0, "failed": 0, "errors": 0}
        assert Payout.objects.get(id=payout.id).status == PayoutState.PROCESSING

    def test_skips_payouts_without_provider_id(self, dispatcher, paid_payment, wave_adapter):
        PayoutFactory(marketplace_payment=paid_payment)

        assert sync_processing_payouts()["checked"] == 0
        wave_adapter.get_status.assert_not_called()

    def test_provider_error_is_counted(self, dispatcher, paid_payment, wave_adapter):
        payout = PayoutFactory(marketplace_payment=paid_payment, provider_id="pt-1")
        wave_adapter.get_status.side_effect = ProviderUnavailableError("down", provider="wave")

        result = sync_processing_payouts()

        assert result["errors"] == 1
        assert Payout.objects.get(id=payout.id).status == PayoutState.PROCESSING

    def test_channel_without_adapter_is_counted(self, dispatcher, paid_payment):
        PayoutFactory(
            marketplace_payment=paid_payment,
            channel=PayoutChannel.PAYDUNYA_PUSH,
            provider_id="push-1",
        )

        result = sync_processing_payouts()

        assert result == {"checked": 0, "completed": 0, "failed": 0, "errors": 1}
