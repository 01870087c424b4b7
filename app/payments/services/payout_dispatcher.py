"""
Payout dispatcher: forwards the owner's share of a paid payment.

The dispatcher implements a two-phase write around the provider call:
1. Phase 1: Claim a PROCESSING payout row. The partial unique constraint on
   (marketplace_payment, field) for processing/completed rows makes the
   claim atomic; a concurrent dispatcher gets IntegrityError and returns
   the winner's row.
2. Phase 2: Call the payout adapter outside any transaction.
3. Phase 3: Record the outcome (completed, still processing, or failed
   with a retry time).

Failures never propagate. They end up in failed payout rows; transient ones
get a next_retry_at for the retry coordinator
(payments.tasks.retry_failed_payouts), permanent ones (invalid recipient,
rejected request, missing configuration) wait for an operator.

Usage:
    from payments.services import PayoutDispatcher

    dispatcher = PayoutDispatcher.from_settings()
    result = dispatcher.dispatch(payment)
    if result.outcome == PayoutOutcome.FAILED:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError
from django.utils import timezone

from django_fsm import ConcurrentTransition

from bookings.repositories import FieldRepository
from core.services import BaseService

from payments.adapters import (
    IdempotencyKeyGenerator,
    PayoutRequest,
    ProviderStatus,
    build_payout_adapters,
)
from payments.exceptions import PaymentConfigurationError, ProviderError
from payments.models import MarketplacePayment, Payout
from payments.state_machines import MarketplacePaymentState, PayoutState

if TYPE_CHECKING:
    from typing import Any

    from bookings.models import Field
    from payments.adapters import PayoutAdapter, PayoutResponse


class PayoutOutcome(str, Enum):
    """What a dispatch call did."""

    SKIPPED = "skipped"
    EXISTING = "existing"
    COMPLETED = "completed"
    PROCESSING = "processing"
    FAILED = "failed"
    MISCONFIGURED = "misconfigured"


@dataclass
class PayoutResult:
    outcome: PayoutOutcome
    payout: Payout | None = None
    detail: str = ""


# =============================================================================
# Payout Dispatcher
# =============================================================================


class PayoutDispatcher(BaseService):
    """
    Creates and executes at most one active payout per (payment, field).

    Collaborators:
        adapters: Map of payout channel to adapter. A channel missing from
            the map is unsupported and produces a failed row that is never
            retried automatically.
        fields: Field lookup for the owner's payout configuration
        retry_delay: Delay before the retry coordinator may try again
        max_attempts: Attempts after which no further retry is scheduled
    """

    def __init__(
        self,
        adapters: dict[str, PayoutAdapter],
        fields: FieldRepository | None = None,
        retry_delay: timedelta | None = None,
        max_attempts: int | None = None,
    ):
        self.adapters = adapters
        self.fields = fields or FieldRepository()
        self.retry_delay = retry_delay or timedelta(minutes=settings.PAYOUT_RETRY_DELAY_MINUTES)
        self.max_attempts = max_attempts or settings.MAX_PAYOUT_ATTEMPTS

    @classmethod
    def from_settings(cls) -> PayoutDispatcher:
        return cls(adapters=build_payout_adapters())

    def dispatch(self, payment: MarketplacePayment) -> PayoutResult:
        """
        Pay the field owner their share of ``payment``.

        Never raises: unexpected errors are logged and reported as FAILED.
        """
        try:
            return self._dispatch(payment)
        except Exception as e:
            self.get_logger().exception(
                "Unexpected error while dispatching payout",
                extra={"payment_id": str(payment.id), "error_type": type(e).__name__},
            )
            return PayoutResult(outcome=PayoutOutcome.FAILED, detail=str(e))

    # =========================================================================
    # Steps
    # =========================================================================

    def _dispatch(self, payment: MarketplacePayment) -> PayoutResult:
        logger = self.get_logger()
        log_context = {"payment_id": str(payment.id)}

        if payment.status != MarketplacePaymentState.PAID:
            logger.warning(
                "Payout requested for unpaid payment, skipping",
                extra={**log_context, "status": payment.status},
            )
            return PayoutResult(outcome=PayoutOutcome.SKIPPED, detail="payment not paid")

        if payment.net_to_owner <= 0:
            logger.info("Nothing to pay out, skipping", extra=log_context)
            return PayoutResult(outcome=PayoutOutcome.SKIPPED, detail="nothing to pay out")

        field = self.fields.get(payment.reservation.field_id)
        if field is None:
            logger.error("Field for payout not found", extra=log_context)
            return PayoutResult(outcome=PayoutOutcome.MISCONFIGURED, detail="field not found")

        existing = self._active_payout(payment, field)
        if existing is not None:
            logger.info(
                "Active payout already exists",
                extra={**log_context, "payout_id": str(existing.id), "status": existing.status},
            )
            return PayoutResult(outcome=PayoutOutcome.EXISTING, payout=existing)

        idempotency_key = IdempotencyKeyGenerator.generate("payout", payment.id, field.id)

        adapter = self.adapters.get(field.owner_payout_channel)
        if adapter is None:
            return self._record_unsupported_channel(payment, field, idempotency_key)

        retry_count = self._next_retry_count(payment, field)
        payout = self._claim(payment, field, idempotency_key, retry_count)
        if payout is None:
            winner = self._active_payout(payment, field)
            return PayoutResult(outcome=PayoutOutcome.EXISTING, payout=winner)

        return self._execute(payout, adapter, field, payment)

    def _claim(
        self,
        payment: MarketplacePayment,
        field: Field,
        idempotency_key: str,
        retry_count: int,
    ) -> Payout | None:
        """
        Phase 1: insert the PROCESSING row, or return None if another
        dispatcher holds the active slot.
        """
        try:
            with self.atomic():
                payout = Payout.objects.create(
                    marketplace_payment=payment,
                    field=field,
                    channel=field.owner_payout_channel,
                    recipient=field.owner_mobile_e164,
                    amount=payment.net_to_owner,
                    currency=payment.currency,
                    idempotency_key=idempotency_key,
                    retry_count=retry_count,
                )
                Payout.objects.filter(
                    marketplace_payment=payment,
                    field=field,
                    status=PayoutState.FAILED,
                    next_retry_at__isnull=False,
                ).update(next_retry_at=None)
        except IntegrityError:
            self.get_logger().info(
                "Concurrent dispatcher claimed the payout first",
                extra={"payment_id": str(payment.id), "field_id": str(field.id)},
            )
            return None

        self.get_logger().info(
            "Payout claimed",
            extra={
                "payout_id": str(payout.id),
                "payment_id": str(payment.id),
                "channel": payout.channel,
                "amount": payout.amount,
                "retry_count": retry_count,
            },
        )
        return payout

    def _execute(
        self,
        payout: Payout,
        adapter: PayoutAdapter,
        field: Field,
        payment: MarketplacePayment,
    ) -> PayoutResult:
        """Phase 2 and 3: call the provider, then record what happened."""
        request = PayoutRequest(
            amount=payout.amount,
            recipient=payout.recipient,
            reason=f"Versement réservation {payment.client_reference}",
            idempotency_key=payout.idempotency_key,
            recipient_name=field.name,
        )

        provider = getattr(adapter, "provider_name", "")
        try:
            response = adapter.create_payout(request)
        except (ProviderError, PaymentConfigurationError) as e:
            retryable = getattr(e, "is_retryable", False)
            error = {
                "code": e.error_code,
                "message": e.message,
                "provider": provider,
                "retryable": retryable,
            }
            return self._record_failure(payout, error, retryable=retryable)
        except Exception as e:
            # Never leave the claimed row PROCESSING
            self.get_logger().exception(
                "Payout adapter raised an unexpected error",
                extra={"payout_id": str(payout.id), "error_type": type(e).__name__},
            )
            error = {
                "code": "UNEXPECTED_ERROR",
                "message": str(e),
                "provider": provider,
                "retryable": True,
            }
            return self._record_failure(payout, error)

        return self.record_provider_response(payout, response)

    def record_provider_response(self, payout: Payout, response: PayoutResponse) -> PayoutResult:
        """
        Apply a provider response to a PROCESSING payout.

        Shared with the status poller, which feeds it get_status() results.
        A non-final answer without a provider reference cannot be polled, so
        it is recorded as a failure and retried with the same idempotency key.
        """
        if response.provider_id and not payout.provider_id:
            payout.provider_id = response.provider_id
        if response.raw_status:
            payout.provider_status = str(response.raw_status)[:50]

        if response.status == ProviderStatus.SUCCEEDED:
            payout.complete(provider_id=response.provider_id)
            self._save(payout)
            self.get_logger().info(
                "Payout completed",
                extra={"payout_id": str(payout.id), "provider_id": payout.provider_id},
            )
            return PayoutResult(outcome=PayoutOutcome.COMPLETED, payout=payout)

        if response.status == ProviderStatus.FAILED:
            return self._record_failure(
                payout,
                {
                    "code": "PROVIDER_REPORTED_FAILURE",
                    "message": f"Provider reported status {response.raw_status}",
                    "provider_status": response.raw_status,
                },
            )

        if not payout.provider_id:
            return self._record_failure(
                payout,
                {
                    "code": "NO_PROVIDER_REFERENCE",
                    "message": "Provider accepted the payout without returning a reference",
                    "provider_status": response.raw_status,
                },
            )

        self._save(payout)
        self.get_logger().info(
            "Payout accepted, awaiting provider confirmation",
            extra={
                "payout_id": str(payout.id),
                "provider_id": payout.provider_id,
                "provider_status": payout.provider_status,
            },
        )
        return PayoutResult(outcome=PayoutOutcome.PROCESSING, payout=payout)

    def _record_failure(self, payout: Payout, error: dict[str, Any], retryable: bool = True) -> PayoutResult:
        """Fail ``payout``; only retryable errors get a retry time while attempts remain."""
        attempts = payout.retry_count + 1
        next_retry_at = None
        if retryable and attempts < self.max_attempts:
            next_retry_at = timezone.now() + self.retry_delay

        payout.fail(error=error, next_retry_at=next_retry_at)
        self._save(payout)

        self.get_logger().warning(
            "Payout failed",
            extra={
                "payout_id": str(payout.id),
                "error_code": error.get("code"),
                "retry_count": payout.retry_count,
                "next_retry_at": next_retry_at.isoformat() if next_retry_at else None,
            },
        )
        return PayoutResult(outcome=PayoutOutcome.FAILED, payout=payout, detail=error.get("code", ""))

    def _record_unsupported_channel(
        self,
        payment: MarketplacePayment,
        field: Field,
        idempotency_key: str,
    ) -> PayoutResult:
        """Store a FAILED row that the retry coordinator will never pick up."""
        channel = field.owner_payout_channel
        payout = Payout.objects.create(
            marketplace_payment=payment,
            field=field,
            channel=channel,
            recipient=field.owner_mobile_e164,
            amount=payment.net_to_owner,
            currency=payment.currency,
            idempotency_key=idempotency_key,
            status=PayoutState.FAILED,
            retry_count=0,
            next_retry_at=None,
            failed_at=timezone.now(),
            provider_error={
                "code": "UNSUPPORTED_CHANNEL",
                "message": f"No payout adapter configured for channel '{channel}'",
                "channel": channel,
            },
        )
        self.get_logger().error(
            "Payout channel is not supported",
            extra={
                "payout_id": str(payout.id),
                "payment_id": str(payment.id),
                "channel": channel,
            },
        )
        return PayoutResult(
            outcome=PayoutOutcome.MISCONFIGURED,
            payout=payout,
            detail="UNSUPPORTED_CHANNEL",
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _active_payout(payment: MarketplacePayment, field: Field) -> Payout | None:
        return Payout.objects.filter(
            marketplace_payment=payment,
            field=field,
            status__in=PayoutState.active_states(),
        ).first()

    @staticmethod
    def _next_retry_count(payment: MarketplacePayment, field: Field) -> int:
        """0 for the first attempt, previous attempt's count + 1 afterwards."""
        last_failed = (
            Payout.objects.filter(
                marketplace_payment=payment,
                field=field,
                status=PayoutState.FAILED,
            )
            .order_by("-retry_count")
            .first()
        )
        return last_failed.retry_count + 1 if last_failed else 0

    def _save(self, payout: Payout) -> None:
        try:
            payout.save()
        except ConcurrentTransition:
            self.get_logger().warning(
                "Payout changed concurrently, outcome not recorded",
                extra={"payout_id": str(payout.id)},
            )
            raise
