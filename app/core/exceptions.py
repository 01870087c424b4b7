"""
Base exception classes for application-wide error handling.

Every domain error raised by the services carries a human-readable message,
a machine-readable error code and an optional details dict, so that views
can turn any of them into the same JSON error shape.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures
    ├── NotFoundError - Resource not found
    ├── ConflictError - State conflicts (already paid, concurrent transitions)
    ├── ExternalServiceError - Payment provider failures
    └── ConfigurationError - Deployment/configuration problems

Usage:
    from core.exceptions import ConflictError, NotFoundError

    raise NotFoundError(
        "Reservation not found",
        error_code="RESERVATION_NOT_FOUND",
        details={"reservation_id": str(reservation_id)},
    )

    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.http_status)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (identifiers, provider codes, ...)
        http_status: Status code views should answer with
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Reservation already paid",
                "error_code": "ALREADY_PAID",
                "details": {"reservation_id": "..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails in the service layer.

    For request body validation, prefer DRF serializers; use this one for
    business rules (amount must be positive, rate out of range, ...).
    """

    default_error_code: str = "VALIDATION_ERROR"
    http_status: int = 400


class NotFoundError(BaseApplicationError):
    """Raised when a requested resource is not found."""

    default_error_code: str = "NOT_FOUND"
    http_status: int = 404


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Example:
        if reservation.payment_status == "paid":
            raise ConflictError(
                "Reservation already paid",
                error_code="ALREADY_PAID",
                details={"reservation_id": str(reservation.id)},
            )
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Log the original error for debugging but do not echo provider
    internals to clients.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
    http_status: int = 503


class ConfigurationError(BaseApplicationError):
    """
    Raised when the deployment is missing required configuration.

    These errors need an operator, they never resolve by retrying.
    """

    default_error_code: str = "CONFIGURATION_ERROR"
    http_status: int = 503
