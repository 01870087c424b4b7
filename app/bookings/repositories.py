"""
Narrow data-access interface the payment flow uses for bookings.

The payments app never queries Field or Reservation directly; it receives
these repositories (or test doubles) through its constructors.

Usage:
    from bookings.repositories import FieldRepository, ReservationRepository

    reservations = ReservationRepository()
    reservation = reservations.get_for_user(reservation_id, user.id)
    reservations.mark_paid(reservation.id)
"""

from __future__ import annotations

import logging
import uuid

from bookings.models import (
    Field,
    Reservation,
    ReservationPaymentStatus,
    ReservationStatus,
)

logger = logging.getLogger(__name__)


class ReservationRepository:
    """Lookup and payment flag updates for reservations."""

    def get(self, reservation_id: uuid.UUID | str) -> Reservation | None:
        return (
            Reservation.objects.select_related("field")
            .filter(id=reservation_id)
            .first()
        )

    def get_for_user(
        self,
        reservation_id: uuid.UUID | str,
        user_id,
    ) -> Reservation | None:
        """Return the reservation only if it was booked by ``user_id``."""
        return (
            Reservation.objects.select_related("field")
            .filter(id=reservation_id, user_id=user_id)
            .first()
        )

    def mark_paid(self, reservation_id: uuid.UUID | str) -> bool:
        """
        Flag the reservation as paid and confirmed.

        Returns:
            True if a row was updated, False if the reservation is missing
        """
        updated = Reservation.objects.filter(id=reservation_id).update(
            payment_status=ReservationPaymentStatus.PAID,
            status=ReservationStatus.CONFIRMED,
        )
        if not updated:
            logger.warning(
                "Reservation to mark paid was not found",
                extra={"reservation_id": str(reservation_id)},
            )
        return bool(updated)


class FieldRepository:
    """Read access to a field's payout configuration."""

    def get(self, field_id: uuid.UUID | str) -> Field | None:
        return Field.objects.filter(id=field_id).first()
