"""
Booking models consumed by the payment flow.

- Field: a bookable sports facility and the owner's payout configuration
- Reservation: one booked slot on a Field, with its price and payment flags

The payments app reads these through bookings.repositories and only ever
writes the reservation's payment/confirmation flags.

Usage:
    from bookings.models import Field, Reservation

    field = Field.objects.create(
        name="Terrain Dakar Plateau",
        price_per_hour=15000,
        owner_payout_channel=PayoutChannel.WAVE,
        owner_mobile_e164="+221771234567",
    )
"""

from __future__ import annotations

from django.conf import settings
from django.core.validators import MaxValueValidator
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import PayoutChannel


class ReservationStatus(models.TextChoices):
    """Lifecycle of a reservation slot."""

    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    CANCELLED = "cancelled", "Cancelled"


class ReservationPaymentStatus(models.TextChoices):
    """Whether the reservation has been paid for."""

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"


class Field(UUIDPrimaryKeyMixin, BaseModel):
    """
    A bookable facility.

    Fields:
        name: Display name
        location: Free-form address
        owner: Account managing the facility (optional)
        price_per_hour: Hourly price in XOF
        owner_payout_channel: Channel used to forward the owner's share
        owner_mobile_e164: Owner wallet number in E.164 format
        commission_rate_bps: Platform commission in basis points, None for the
            platform default
    """

    name = models.CharField(max_length=200)

    location = models.CharField(max_length=255, blank=True, default="")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="owned_fields",
    )

    price_per_hour = models.PositiveIntegerField(
        help_text="Hourly price in XOF (smallest currency unit)",
    )

    owner_payout_channel = models.CharField(
        max_length=20,
        choices=PayoutChannel.choices,
        default=PayoutChannel.WAVE,
        help_text="Payout channel for the owner's share",
    )

    owner_mobile_e164 = models.CharField(
        max_length=20,
        blank=True,
        default="",
        help_text="Owner mobile wallet number, e.g. +221771234567",
    )

    commission_rate_bps = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MaxValueValidator(10000)],
        help_text="Platform commission in basis points (1000 = 10%), empty for PLATFORM_FEE_BPS",
    )

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return f"Field({self.name})"


class Reservation(UUIDPrimaryKeyMixin, BaseModel):
    """
    A booked slot on a Field.

    Fields:
        user: Player who booked and pays
        field: Booked facility
        reservation_date: Day of play
        start_time: Slot start
        duration_hours: Slot length
        total_price: Agreed price in XOF, if set at booking time
        payment_status: pending until a payment is confirmed
        status: pending until a payment is confirmed
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reservations",
    )

    field = models.ForeignKey(
        Field,
        on_delete=models.PROTECT,
        related_name="reservations",
    )

    reservation_date = models.DateField()

    start_time = models.TimeField(null=True, blank=True)

    duration_hours = models.PositiveSmallIntegerField(default=1)

    total_price = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Agreed price in XOF; falls back to the field hourly price",
    )

    payment_status = models.CharField(
        max_length=10,
        choices=ReservationPaymentStatus.choices,
        default=ReservationPaymentStatus.PENDING,
        db_index=True,
    )

    status = models.CharField(
        max_length=10,
        choices=ReservationStatus.choices,
        default=ReservationStatus.PENDING,
        db_index=True,
    )

    class Meta:
        ordering = ["-reservation_date", "-created_at"]

    def __str__(self) -> str:
        return f"Reservation({self.id}, {self.reservation_date}, {self.payment_status})"

    @property
    def is_paid(self) -> bool:
        return self.payment_status == ReservationPaymentStatus.PAID

    @property
    def gross_amount(self) -> int:
        """Amount to charge: the agreed price, else the field's hourly price."""
        if self.total_price:
            return self.total_price
        return self.field.price_per_hour
