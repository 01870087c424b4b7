"""
Platform commission calculation.

The platform keeps ``floor(gross * bps / 10000)`` and the owner receives the
rest. Integer arithmetic only: the floor biases any remainder towards the
owner by at most one XOF.

Usage:
    from payments.commission import calculate_commission

    breakdown = calculate_commission(10_000, 1000)
    breakdown.platform_fee  # 1000
    breakdown.net_to_owner  # 9000
"""

from __future__ import annotations

from dataclasses import dataclass

from payments.exceptions import PaymentValidationError

BPS_DENOMINATOR = 10_000


@dataclass(frozen=True)
class CommissionBreakdown:
    """Split of a gross amount between platform and field owner."""

    gross_amount: int
    commission_rate_bps: int
    platform_fee: int
    net_to_owner: int


def calculate_commission(gross_amount: int, commission_rate_bps: int) -> CommissionBreakdown:
    """
    Split ``gross_amount`` into platform fee and owner net.

    Args:
        gross_amount: Positive amount in the smallest currency unit
        commission_rate_bps: Commission in basis points, 0 to 10000

    Returns:
        CommissionBreakdown with platform_fee + net_to_owner == gross_amount

    Raises:
        PaymentValidationError: Non-integer, non-positive gross amount or
            rate outside 0..10000
    """
    if isinstance(gross_amount, bool) or not isinstance(gross_amount, int):
        raise PaymentValidationError(
            "Gross amount must be an integer amount in XOF",
            error_code="INVALID_AMOUNT",
            details={"gross_amount": repr(gross_amount)},
        )
    if gross_amount <= 0:
        raise PaymentValidationError(
            "Gross amount must be positive",
            error_code="INVALID_AMOUNT",
            details={"gross_amount": gross_amount},
        )
    if (
        isinstance(commission_rate_bps, bool)
        or not isinstance(commission_rate_bps, int)
        or not 0 <= commission_rate_bps <= BPS_DENOMINATOR
    ):
        raise PaymentValidationError(
            "Commission rate must be between 0 and 10000 basis points",
            error_code="INVALID_COMMISSION_RATE",
            details={"commission_rate_bps": repr(commission_rate_bps)},
        )

    platform_fee = gross_amount * commission_rate_bps // BPS_DENOMINATOR
    return CommissionBreakdown(
        gross_amount=gross_amount,
        commission_rate_bps=commission_rate_bps,
        platform_fee=platform_fee,
        net_to_owner=gross_amount - platform_fee,
    )
