"""
Shared contract for payment provider adapters.

Every provider speaks its own JSON dialect. Adapters translate requests into
that dialect and translate responses back into the dataclasses below, with
provider status strings normalised once, here, into ProviderStatus. Nothing
downstream of an adapter inspects raw provider payloads to make decisions.

Contracts:
    CheckoutAdapter: hosted checkout (create, confirm, webhook helpers)
    PayoutAdapter: push money to a wallet (create, status, recipient check)

Usage:
    from payments.adapters.base import PayoutRequest, ProviderStatus

    response = adapter.create_payout(
        PayoutRequest(
            amount=9000,
            recipient="+221771234567",
            reason="Reservation BK-1a2b3c4d-9F00AA12BC",
            idempotency_key=key,
        )
    )
    if response.status == ProviderStatus.SUCCEEDED:
        ...
"""

from __future__ import annotations

import hashlib
import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from django.conf import settings

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Status Normalisation
# =============================================================================


class ProviderStatus(str, Enum):
    """Provider-independent outcome of a checkout or payout."""

    SUCCEEDED = "succeeded"
    PENDING = "pending"
    FAILED = "failed"
    UNKNOWN = "unknown"


SUCCESS_STATUSES = frozenset({"completed", "succeeded", "success", "paid"})

FAILURE_STATUSES = frozenset(
    {"cancelled", "canceled", "failed", "timeout", "expired", "rejected", "reversed"}
)

PENDING_STATUSES = frozenset({"pending", "processing", "initiated", "in_progress", "queued"})


def normalize_status(raw_status: str | None) -> ProviderStatus:
    """
    Map a provider status string onto ProviderStatus.

    Unrecognised values map to UNKNOWN so callers leave state untouched.
    """
    if not raw_status:
        return ProviderStatus.UNKNOWN
    value = str(raw_status).strip().lower()
    if value in SUCCESS_STATUSES:
        return ProviderStatus.SUCCEEDED
    if value in FAILURE_STATUSES:
        return ProviderStatus.FAILED
    if value in PENDING_STATUSES:
        return ProviderStatus.PENDING
    return ProviderStatus.UNKNOWN


# =============================================================================
# Request / Result Types
# =============================================================================


@dataclass
class CheckoutRequest:
    """Parameters for creating a hosted checkout invoice."""

    amount: int
    description: str
    item_name: str
    client_reference: str
    callback_url: str
    return_url: str
    cancel_url: str
    custom_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class CheckoutResponse:
    """Token and redirect URL issued by the checkout provider."""

    token: str
    checkout_url: str
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class CheckoutConfirmation:
    """Authoritative status of a checkout, fetched from the provider."""

    token: str
    status: ProviderStatus
    raw_status: str | None = None
    amount: int | None = None
    custom_data: dict[str, Any] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class PayoutRequest:
    """Parameters for pushing money to a recipient wallet."""

    amount: int
    recipient: str
    reason: str
    idempotency_key: str
    recipient_name: str = ""


@dataclass
class PayoutResponse:
    """Provider reference and normalised status of a payout."""

    provider_id: str | None
    status: ProviderStatus
    raw_status: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Adapter Contracts
# =============================================================================


class CheckoutAdapter(Protocol):
    """Provider hosting the payment page and confirming payments."""

    provider_name: str

    def create_checkout(self, request: CheckoutRequest) -> CheckoutResponse: ...

    def confirm_checkout(self, token: str) -> CheckoutConfirmation: ...

    def extract_token(self, payload: dict[str, Any]) -> str | None: ...

    def verify_webhook_signature(self, raw_body: bytes, signature: str | None) -> None: ...


class PayoutAdapter(Protocol):
    """Provider pushing money to an owner's wallet."""

    provider_name: str

    def validate_recipient(self, recipient: str) -> str: ...

    def create_payout(self, request: PayoutRequest) -> PayoutResponse: ...

    def get_status(self, provider_id: str) -> PayoutResponse: ...


# =============================================================================
# Idempotency Keys
# =============================================================================


class IdempotencyKeyGenerator:
    """
    Generate deterministic idempotency keys for provider calls.

    Format: "{operation}:{id1}:{id2}...:{hash}"

    The same inputs always give the same key, so a retried payout reuses the
    key of the first attempt. The hash is salted with SECRET_KEY so keys
    cannot be forged from public identifiers alone.

    Example:
        key = IdempotencyKeyGenerator.generate("payout", payment.id, field.id)
        # "payout:550e8400-...:7c9e6679-...:a1b2c3d4"
    """

    @staticmethod
    def generate(operation: str, *entity_ids: uuid.UUID | str) -> str:
        parts = [operation, *(str(entity_id) for entity_id in entity_ids)]
        joined = ":".join(parts)
        short_hash = hashlib.sha256(f"{joined}:{settings.SECRET_KEY}".encode()).hexdigest()[:8]
        return f"{joined}:{short_hash}"


# =============================================================================
# Recipient Helpers
# =============================================================================

# Senegal mobile wallets: +221 followed by 9 digits starting with 6 or 7
SENEGAL_MOBILE_RE = re.compile(r"^\+221[67]\d{8}$")


def normalize_senegal_mobile(number: str | None) -> str:
    """
    Best-effort conversion of a Senegal mobile number to E.164.

    Accepts "77 123 45 67", "221771234567" and "+221771234567".
    Anything it cannot recognise is returned cleaned but otherwise unchanged,
    leaving the verdict to the adapter's validate_recipient().
    """
    if not number:
        return ""
    cleaned = re.sub(r"[^\d+]", "", number)
    if re.fullmatch(r"[67]\d{8}", cleaned):
        return f"+221{cleaned}"
    if re.fullmatch(r"221[67]\d{8}", cleaned):
        return f"+{cleaned}"
    if re.fullmatch(r"00221[67]\d{8}", cleaned):
        return f"+{cleaned[2:]}"
    return cleaned


def is_valid_senegal_mobile(number: str | None) -> bool:
    return bool(number) and bool(SENEGAL_MOBILE_RE.match(number))
