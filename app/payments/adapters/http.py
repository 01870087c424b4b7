"""
HTTP transport shared by the provider adapters.

ProviderHTTPClient wraps a requests.Session with:
    - a bounded timeout on every call
    - translation of transport and HTTP errors into payment exceptions
    - structured logging with timing metrics

Error translation:
    requests.Timeout          -> ProviderTimeoutError (retryable)
    requests.ConnectionError  -> ProviderUnavailableError (retryable)
    HTTP 429 / 5xx            -> ProviderUnavailableError (retryable)
    HTTP 4xx                  -> ProviderRequestError (permanent)
    Non-JSON body             -> ProviderUnavailableError (retryable)

Usage:
    client = ProviderHTTPClient(
        provider="wave",
        base_url="https://api.wave.com",
        headers={"Authorization": "Bearer ..."},
        timeout=30,
    )
    data = client.post("/v1/payout", json=payload, headers={"Idempotency-Key": key})
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import requests

from payments.exceptions import (
    ProviderRequestError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)

if TYPE_CHECKING:
    from typing import Any


logger = logging.getLogger(__name__)


class ProviderHTTPClient:
    """JSON-over-HTTPS client for one provider."""

    def __init__(
        self,
        provider: str,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )
        if headers:
            self.session.headers.update(headers)

    def get(self, path: str, timeout: float | None = None, **kwargs) -> dict[str, Any]:
        return self.request("GET", path, timeout=timeout, **kwargs)

    def post(self, path: str, timeout: float | None = None, **kwargs) -> dict[str, Any]:
        return self.request("POST", path, timeout=timeout, **kwargs)

    def request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """
        Perform a request and return the decoded JSON body.

        Raises:
            ProviderTimeoutError: The call exceeded its timeout
            ProviderUnavailableError: Network failure, 429/5xx or invalid body
            ProviderRequestError: The provider rejected the request (4xx)
        """
        url = f"{self.base_url}{path}"
        effective_timeout = timeout or self.timeout
        log_context = {
            "provider": self.provider,
            "method": method,
            "path": path,
            "timeout": effective_timeout,
        }

        start_time = time.monotonic()
        try:
            response = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=effective_timeout,
            )
        except requests.Timeout as e:
            logger.warning(
                "Provider request timed out",
                extra={**log_context, "duration_ms": _elapsed_ms(start_time)},
            )
            raise ProviderTimeoutError(
                f"{self.provider} did not answer within {effective_timeout}s",
                provider=self.provider,
            ) from e
        except requests.RequestException as e:
            logger.error(
                f"Provider request failed: {type(e).__name__}",
                extra={**log_context, "duration_ms": _elapsed_ms(start_time)},
                exc_info=True,
            )
            raise ProviderUnavailableError(
                f"Could not reach {self.provider}",
                provider=self.provider,
                details={"error": str(e)},
            ) from e

        duration_ms = _elapsed_ms(start_time)
        log_context = {
            **log_context,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }

        if response.status_code == 429 or response.status_code >= 500:
            logger.error("Provider server error", extra=log_context)
            raise ProviderUnavailableError(
                f"{self.provider} returned HTTP {response.status_code}",
                provider=self.provider,
                provider_code=str(response.status_code),
                details={"body": _safe_body(response)},
            )

        if response.status_code >= 400:
            logger.warning("Provider rejected request", extra=log_context)
            raise ProviderRequestError(
                f"{self.provider} rejected the request (HTTP {response.status_code})",
                provider=self.provider,
                provider_code=str(response.status_code),
                details={"body": _safe_body(response)},
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Provider returned a non-JSON body", extra=log_context)
            raise ProviderUnavailableError(
                f"{self.provider} returned an unreadable response",
                provider=self.provider,
                details={"body": _safe_body(response)},
            ) from e

        logger.info("Provider request completed", extra=log_context)
        return data if isinstance(data, dict) else {"data": data}


def _elapsed_ms(start_time: float) -> float:
    return (time.monotonic() - start_time) * 1000


def _safe_body(response: requests.Response, limit: int = 500) -> str:
    """Truncated response text for error details."""
    return (response.text or "")[:limit]
