"""
Celery tasks for payout processing.

This module provides periodic tasks for:
- Retrying failed payouts whose retry time has come
- Advancing processing payouts by polling the provider

Both are scheduled with django-celery-beat (see migration
payments.0002_payout_periodic_tasks).

Usage:
    from payments.tasks import retry_failed_payouts

    retry_failed_payouts.delay()
"""

from __future__ import annotations

import logging

from celery import shared_task
from django.utils import timezone
from django_fsm import ConcurrentTransition

from payments.exceptions import PaymentConfigurationError, ProviderError
from payments.models import MarketplacePayment, Payout
from payments.services.payout_dispatcher import PayoutDispatcher
from payments.state_machines import PayoutState

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Rows handled per run; the rest wait for the next beat
BATCH_SIZE = 100


# =============================================================================
# Retry Coordinator
# =============================================================================


@shared_task
def retry_failed_payouts() -> dict:
    """
    Periodic task to retry failed payouts.

    Finds FAILED payouts whose next_retry_at has passed and dispatches their
    parent payment again. The dispatcher reuses the original idempotency key
    and clears next_retry_at on the older rows once it claims a new one.

    This task should be scheduled via celery-beat, every 5 minutes.

    Returns:
        Dict with counts of payments retried, by outcome
    """
    now = timezone.now()
    payment_ids = list(
        Payout.objects.filter(
            status=PayoutState.FAILED,
            next_retry_at__isnull=False,
            next_retry_at__lte=now,
        )
        .order_by("next_retry_at")
        .values_list("marketplace_payment_id", flat=True)[:BATCH_SIZE]
    )
    # Preserve order while removing duplicates
    payment_ids = list(dict.fromkeys(payment_ids))

    if not payment_ids:
        return {"retried_count": 0, "outcomes": {}}

    dispatcher = PayoutDispatcher.from_settings()
    outcomes: dict[str, int] = {}
    for payment in MarketplacePayment.objects.filter(id__in=payment_ids).select_related("reservation"):
        result = dispatcher.dispatch(payment)
        outcomes[result.outcome.value] = outcomes.get(result.outcome.value, 0) + 1
        logger.info(
            "Retried payout",
            extra={
                "payment_id": str(payment.id),
                "outcome": result.outcome.value,
            },
        )

    retried_count = sum(outcomes.values())
    logger.info(
        f"Retried payouts for {retried_count} payments",
        extra={"retried_count": retried_count, "outcomes": outcomes},
    )
    return {"retried_count": retried_count, "outcomes": outcomes}


# =============================================================================
# Status Poller
# =============================================================================


@shared_task
def sync_processing_payouts() -> dict:
    """
    Periodic task to advance PROCESSING payouts the provider accepted.

    Asks each payout's adapter for the current status. SUCCEEDED completes
    the payout, FAILED fails it with a retry time, anything else leaves it
    processing until the next run.

    Returns:
        Dict with counts of payouts checked, completed, failed and errored
    """
    payouts = Payout.objects.filter(
        status=PayoutState.PROCESSING,
        provider_id__isnull=False,
    ).exclude(provider_id="").order_by("created_at")[:BATCH_SIZE]

    summary = {"checked": 0, "completed": 0, "failed": 0, "errors": 0}
    dispatcher = PayoutDispatcher.from_settings()

    for payout in payouts:
        adapter = dispatcher.adapters.get(payout.channel)
        if adapter is None:
            logger.warning(
                "No adapter to sync payout status",
                extra={"payout_id": str(payout.id), "channel": payout.channel},
            )
            summary["errors"] += 1
            continue

        summary["checked"] += 1
        try:
            response = adapter.get_status(payout.provider_id)
        except (ProviderError, PaymentConfigurationError) as e:
            logger.warning(
                f"Could not fetch payout status: {e}",
                extra={"payout_id": str(payout.id), "error_code": e.error_code},
            )
            summary["errors"] += 1
            continue

        try:
            result = dispatcher.record_provider_response(payout, response)
        except ConcurrentTransition:
            summary["errors"] += 1
            continue

        if result.outcome.value in ("completed", "failed"):
            summary[result.outcome.value] += 1

    if summary["checked"]:
        logger.info("Synced processing payouts", extra=summary)
    return summary
