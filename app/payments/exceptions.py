"""
Payment-specific exceptions for checkout, webhook and payout operations.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PaymentNotFoundError - Reservation/payment lookup failures (also NotFoundError)
    ├── PaymentValidationError - Invalid amounts, rates or request data (also ValidationError)
    ├── InvalidSignatureError - Webhook signature mismatch (security event)
    └── ProviderError - Base for all payment provider errors (also ExternalServiceError)
        ├── ProviderUnavailableError - Network failure or 5xx (transient, retry)
        │   └── ProviderTimeoutError - Request timed out (transient, retry)
        ├── ProviderRequestError - Provider refused the request (permanent)
        └── InvalidRecipientError - Malformed payout recipient (permanent)

    AlreadyPaidError - Reservation already paid (inherits ConflictError)
    PaymentConfigurationError - Missing keys, secret or channel (inherits ConfigurationError)

Usage:
    from payments.exceptions import ProviderError, ProviderUnavailableError

    try:
        adapter.create_payout(request)
    except ProviderError as e:
        if e.is_retryable:
            schedule_retry()
        else:
            alert_operator(e)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import (
    BaseApplicationError,
    ConfigurationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    Example:
        try:
            manager.create_checkout(reservation_id, user.id)
        except PaymentError as e:
            return Response(e.to_dict(), status=e.http_status)
    """

    default_error_code: str = "PAYMENT_ERROR"


class PaymentNotFoundError(PaymentError, NotFoundError):
    """
    Raised when a reservation or payment cannot be found for the caller.

    A reservation that exists but belongs to someone else is reported the
    same way, so callers cannot probe other users' reservations.
    """

    default_error_code: str = "PAYMENT_NOT_FOUND"
    http_status: int = 404


class PaymentValidationError(PaymentError, ValidationError):
    """
    Raised when payment validation fails.

    Example:
        if gross_amount <= 0:
            raise PaymentValidationError(
                "Gross amount must be positive",
                details={"gross_amount": gross_amount},
            )
    """

    default_error_code: str = "PAYMENT_VALIDATION_ERROR"
    http_status: int = 400


class InvalidSignatureError(PaymentError):
    """Webhook signature did not match the shared secret."""

    default_error_code: str = "INVALID_SIGNATURE"
    http_status: int = 401


class AlreadyPaidError(ConflictError):
    """Raised when a checkout is requested for a reservation already paid."""

    default_error_code: str = "ALREADY_PAID"


class PaymentConfigurationError(ConfigurationError):
    """
    Raised when payments cannot run with the current configuration.

    Covers missing provider credentials, a missing webhook secret when
    unsigned webhooks are not allowed, and payout channels without an
    adapter. Never retried automatically.
    """

    default_error_code: str = "PAYMENT_CONFIGURATION_ERROR"


# =============================================================================
# Provider Exceptions
# =============================================================================


class ProviderError(PaymentError, ExternalServiceError):
    """
    Base exception for errors reported by, or while talking to, a provider.

    Attributes:
        provider: Provider name (paydunya, wave)
        provider_code: Provider response code, if any
        is_retryable: Whether the same call may succeed later
    """

    default_error_code: str = "PROVIDER_ERROR"
    http_status: int = 502
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        provider: str | None = None,
        provider_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if provider:
            details["provider"] = provider
        if provider_code:
            details["provider_code"] = provider_code
        super().__init__(message, error_code=error_code, details=details)
        self.provider = provider
        self.provider_code = provider_code


class ProviderUnavailableError(ProviderError):
    """
    Provider could not be reached or answered with a server error.

    For checkout creation the caller may simply retry; for payouts the
    retry coordinator picks the failed row up again.
    """

    default_error_code: str = "PROVIDER_UNAVAILABLE"
    http_status: int = 503
    is_retryable: bool = True


class ProviderTimeoutError(ProviderUnavailableError):
    """
    Provider call exceeded its timeout.

    A timeout never means success: the payout is recorded as failed and
    retried with the same idempotency key.
    """

    default_error_code: str = "PROVIDER_TIMEOUT"


class ProviderRequestError(ProviderError):
    """Provider rejected the request (4xx or a non-success response code)."""

    default_error_code: str = "PROVIDER_REQUEST_REJECTED"


class InvalidRecipientError(ProviderError):
    """
    Payout recipient does not match the channel's number format.

    Raised by adapters before any network call.
    """

    default_error_code: str = "INVALID_RECIPIENT"
    http_status: int = 400
