"""
Payments app configuration.

This app provides marketplace payment orchestration:
- Checkout sessions against the checkout provider
- Webhook-driven payment state machine
- Owner payouts with retry scheduling
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
