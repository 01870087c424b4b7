"""
Payout model for forwarding an owner's share to their wallet.

Each row is one attempt. A failed attempt is kept as-is for audit and a
retry inserts a new row carrying the same idempotency key, so the provider
can deduplicate if an earlier attempt actually went through.

Usage:
    from payments.models import Payout

    payout = Payout.objects.create(
        marketplace_payment=payment,
        field=field,
        channel=PayoutChannel.WAVE,
        recipient="+221771234567",
        amount=9000,
        idempotency_key=key,
    )

    payout.complete(provider_id="pt-123")  # processing -> completed
    payout.save()
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q
from django.utils import timezone

from django_fsm import ConcurrentTransitionMixin, FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import PayoutChannel, PayoutState


class Payout(ConcurrentTransitionMixin, UUIDPrimaryKeyMixin, BaseModel):
    """
    One payout attempt to a field owner.

    State Flow:
        PROCESSING -> COMPLETED (provider confirmed the transfer)
        PROCESSING -> FAILED (provider error, timeout or bad configuration)

    Invariant:
        At most one PROCESSING or COMPLETED row per (marketplace_payment,
        field). Enforced by a partial unique constraint, so a concurrent
        dispatcher loses with IntegrityError instead of double-paying.

    Fields:
        marketplace_payment: Paid payment this payout distributes
        field: Field whose owner is paid
        channel: Payout channel used for this attempt
        recipient: Wallet number the money was sent to
        amount: Owner share in XOF
        idempotency_key: Deterministic from (payment, field), same on retries
        status: Current FSM state
        provider_id: Provider payout/transaction id
        provider_error: Error details of a failed attempt
        retry_count: 0 for the first attempt, +1 per retry
        next_retry_at: When the retry coordinator may try again, null when
            no automatic retry is planned
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    marketplace_payment = models.ForeignKey(
        "payments.MarketplacePayment",
        on_delete=models.PROTECT,
        related_name="payouts",
    )

    field = models.ForeignKey(
        "bookings.Field",
        on_delete=models.PROTECT,
        related_name="payouts",
    )

    # ==========================================================================
    # Destination & Amount
    # ==========================================================================

    channel = models.CharField(
        max_length=20,
        choices=PayoutChannel.choices,
    )

    recipient = models.CharField(
        max_length=32,
        blank=True,
        default="",
    )

    amount = models.PositiveIntegerField(
        help_text="Payout amount in XOF",
    )

    currency = models.CharField(max_length=3, default="XOF")

    idempotency_key = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Sent to the provider; identical across retries",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=PayoutState.PROCESSING,
        choices=PayoutState.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the payout (managed by FSM)",
    )

    provider_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
    )

    provider_status = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="Last raw status reported by the provider",
    )

    # ==========================================================================
    # Failure & Retry
    # ==========================================================================

    provider_error = models.JSONField(null=True, blank=True)

    retry_count = models.PositiveIntegerField(default=0)

    next_retry_at = models.DateTimeField(null=True, blank=True)

    completed_at = models.DateTimeField(null=True, blank=True)

    failed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payout"
        verbose_name_plural = "Payouts"
        indexes = [
            models.Index(
                fields=["marketplace_payment", "field", "status"],
                name="payout_pair_status_idx",
            ),
            models.Index(
                fields=["status", "next_retry_at"],
                name="payout_status_retry_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["marketplace_payment", "field"],
                condition=Q(status__in=[PayoutState.PROCESSING, PayoutState.COMPLETED]),
                name="payout_one_active_per_payment_field",
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="payout_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Payout({self.id}, {self.channel}, {self.status}, {self.amount} {self.currency})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=PayoutState.PROCESSING,
        target=PayoutState.COMPLETED,
    )
    def complete(self, provider_id: str | None = None, provider_status: str = ""):
        """
        Mark payout as delivered to the owner.

        Transition: PROCESSING -> COMPLETED
        """
        if provider_id:
            self.provider_id = provider_id
        if provider_status:
            self.provider_status = provider_status
        self.completed_at = timezone.now()
        self.next_retry_at = None

    @transition(
        field=status,
        source=PayoutState.PROCESSING,
        target=PayoutState.FAILED,
    )
    def fail(self, error: dict, next_retry_at=None):
        """
        Mark payout as failed.

        Transition: PROCESSING -> FAILED

        Args:
            error: Serializable error details (code, message, provider)
            next_retry_at: When to retry automatically, None for never
        """
        self.provider_error = error
        self.failed_at = timezone.now()
        self.next_retry_at = next_retry_at
