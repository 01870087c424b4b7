"""
MarketplacePayment model for one checkout attempt on a reservation.

A MarketplacePayment is created by the checkout session manager once the
checkout provider has issued a token, and is then driven exclusively by the
webhook processor. It is a financial audit record and is never deleted.

Usage:
    from payments.models import MarketplacePayment

    payment = MarketplacePayment.objects.get(provider_token=token)

    # State transitions using django-fsm
    payment.mark_paid(confirmation=raw_payload)  # pending -> paid
    payment.save()

Concurrency:
    ConcurrentTransitionMixin turns every save into
    ``UPDATE ... WHERE id = %s AND status = <status read at load time>``.
    Two deliveries racing on the same pending payment cannot both
    transition it: the loser gets django_fsm.ConcurrentTransition.
"""

from __future__ import annotations

import uuid

from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from django_fsm import ConcurrentTransitionMixin, FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import MarketplacePaymentState, PaymentProvider


class MarketplacePayment(ConcurrentTransitionMixin, UUIDPrimaryKeyMixin, BaseModel):
    """
    One checkout attempt for a reservation.

    State Flow:
        PENDING -> PAID (provider confirmed a success-like status)
        PENDING -> FAILED (provider confirmed a failure-like status)

    Fields:
        reservation: Reservation being paid
        session_id: Random id of this checkout attempt
        client_reference: Provider-facing reference derived from
            (reservation, session)
        gross_amount: Amount charged to the player, in XOF
        platform_fee: Platform commission
        net_to_owner: Owner share, always gross_amount - platform_fee
        provider: Checkout provider
        provider_token: Provider invoice token, used to match webhooks
        checkout_url: Hosted payment page
        status: Current FSM state
        webhook_received_at: When the confirming webhook was processed
        provider_data: Raw provider payloads kept for audit/replay
    """

    # ==========================================================================
    # Relationships & Identity
    # ==========================================================================

    reservation = models.ForeignKey(
        "bookings.Reservation",
        on_delete=models.PROTECT,
        related_name="marketplace_payments",
        help_text="Reservation this checkout attempt pays for",
    )

    session_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        help_text="Random identifier of this checkout attempt",
    )

    client_reference = models.CharField(
        max_length=64,
        unique=True,
        help_text="Provider-facing reference, deterministic from reservation and session",
    )

    # ==========================================================================
    # Amounts (XOF has no minor unit)
    # ==========================================================================

    gross_amount = models.PositiveIntegerField(
        help_text="Amount charged to the player",
    )

    platform_fee = models.PositiveIntegerField(
        help_text="Platform commission kept on this payment",
    )

    net_to_owner = models.PositiveIntegerField(
        help_text="Share forwarded to the field owner",
    )

    currency = models.CharField(
        max_length=3,
        default="XOF",
        help_text="ISO 4217 currency code",
    )

    # ==========================================================================
    # Provider Linkage
    # ==========================================================================

    provider = models.CharField(
        max_length=20,
        choices=PaymentProvider.choices,
        default=PaymentProvider.PAYDUNYA,
    )

    provider_token = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="Checkout token issued by the provider",
    )

    checkout_url = models.URLField(
        max_length=500,
        blank=True,
        default="",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=MarketplacePaymentState.PENDING,
        choices=MarketplacePaymentState.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the payment (managed by FSM)",
    )

    webhook_received_at = models.DateTimeField(null=True, blank=True)

    paid_at = models.DateTimeField(null=True, blank=True)

    failed_at = models.DateTimeField(null=True, blank=True)

    provider_data = models.JSONField(
        default=dict,
        blank=True,
        help_text="Raw checkout creation and confirmation payloads",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Marketplace payment"
        verbose_name_plural = "Marketplace payments"
        indexes = [
            models.Index(
                fields=["reservation", "status"],
                name="mpay_reservation_status_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(gross_amount__gt=0),
                name="marketplace_payment_gross_positive",
            ),
            models.CheckConstraint(
                condition=Q(net_to_owner=F("gross_amount") - F("platform_fee")),
                name="marketplace_payment_net_is_gross_minus_fee",
            ),
            models.CheckConstraint(
                condition=Q(platform_fee__lte=F("gross_amount")),
                name="marketplace_payment_fee_within_gross",
            ),
        ]

    def __str__(self) -> str:
        return f"MarketplacePayment({self.client_reference}, {self.status}, {self.gross_amount} {self.currency})"

    @property
    def is_terminal(self) -> bool:
        return self.status in MarketplacePaymentState.terminal_states()

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=MarketplacePaymentState.PENDING,
        target=MarketplacePaymentState.PAID,
    )
    def mark_paid(self, confirmation: dict | None = None):
        """
        Record a provider-confirmed payment.

        Transition: PENDING -> PAID
        """
        now = timezone.now()
        self.paid_at = now
        self.webhook_received_at = now
        self.provider_data = {**(self.provider_data or {}), "confirmation": confirmation or {}}

    @transition(
        field=status,
        source=MarketplacePaymentState.PENDING,
        target=MarketplacePaymentState.FAILED,
    )
    def mark_failed(self, confirmation: dict | None = None):
        """
        Record a provider-confirmed failure (cancelled, expired, ...).

        Transition: PENDING -> FAILED
        """
        now = timezone.now()
        self.failed_at = now
        self.webhook_received_at = now
        self.provider_data = {**(self.provider_data or {}), "confirmation": confirmation or {}}
