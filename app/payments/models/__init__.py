"""
Payment domain models.

This module contains all payment-related models:
- MarketplacePayment: One checkout attempt for a reservation
- Payout: One attempt at forwarding the owner's share
"""

from payments.models.marketplace_payment import MarketplacePayment
from payments.models.payout import Payout

__all__ = [
    "MarketplacePayment",
    "Payout",
]
