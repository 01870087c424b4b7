"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration;
the payment and payout states are driven by django-fsm transitions.

State Machines Overview:

MarketplacePayment States:
    pending → paid
    pending → failed
    paid / failed are terminal

Payout States:
    processing → completed
    processing → failed
    A failed payout is never revived; a retry inserts a new processing row.
"""

from django.db import models


class MarketplacePaymentState(models.TextChoices):
    """
    States for one checkout attempt.

    Terminal states: PAID, FAILED
    """

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"

    @classmethod
    def terminal_states(cls) -> list[str]:
        return [cls.PAID, cls.FAILED]


class PayoutState(models.TextChoices):
    """
    States for one payout attempt towards a field owner.

    PROCESSING and COMPLETED are "active": at most one active payout may
    exist per (payment, field) pair.
    """

    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"

    @classmethod
    def active_states(cls) -> list[str]:
        return [cls.PROCESSING, cls.COMPLETED]


class PayoutChannel(models.TextChoices):
    """Where a field owner receives their share."""

    WAVE = "wave", "Wave"
    PAYDUNYA_PUSH = "paydunya_push", "PayDunya Push"
    ORANGE_MONEY = "orange_money", "Orange Money"
    BANK_TRANSFER = "bank_transfer", "Bank Transfer"


class PaymentProvider(models.TextChoices):
    """Checkout provider that hosted the payment page."""

    PAYDUNYA = "paydunya", "PayDunya"
    WAVE_DIRECT = "wave_direct", "Wave Direct"
