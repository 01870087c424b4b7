"""
Bookings application configuration.

This app holds the minimal reservation records the payment flow relies on:
- Field: a bookable facility and its owner's payout configuration
- Reservation: a time slot booked by a user, awaiting or holding payment
"""

from django.apps import AppConfig


class BookingsConfig(AppConfig):
    """Configuration for the bookings application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "bookings"
    verbose_name = "Bookings"
