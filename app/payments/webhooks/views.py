"""
Webhook endpoint for checkout provider notifications.

The view only extracts the raw body and signature header and hands them to
the WebhookProcessor, which re-confirms with the provider before touching
any payment. It always answers, with the status code chosen by the
processor:
    - 200: handled, replayed, still pending or ignored
    - 400: body without a usable token
    - 401: signature mismatch
    - 404: unknown provider
    - 503: provider unreachable or webhook secret missing (redeliver later)

Usage:
    # In urls.py
    from payments.webhooks.views import provider_webhook

    urlpatterns = [
        path("webhook/<str:provider>/", provider_webhook, name="provider_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.services import WebhookProcessor

logger = logging.getLogger(__name__)

SIGNATURE_HEADERS = {
    "paydunya": "X-Paydunya-Signature",
}


@csrf_exempt
@require_POST
def provider_webhook(request: HttpRequest, provider: str) -> JsonResponse:
    """
    Receive a checkout provider notification.

    Security:
    - CSRF exemption required for external webhooks
    - Only POST requests accepted
    - HMAC signature checked by the processor on the raw body
    """
    processor = WebhookProcessor.from_settings(provider)
    if processor is None:
        logger.warning("Webhook for unknown provider", extra={"provider": provider})
        return JsonResponse({"status": "unknown_provider"}, status=404)

    signature = request.headers.get(SIGNATURE_HEADERS.get(provider, ""))
    ack = processor.handle_webhook(request.body, signature)

    logger.info(
        "Webhook handled",
        extra={
            "provider": provider,
            "outcome": ack.outcome,
            "status_code": ack.status_code,
        },
    )
    return JsonResponse(ack.to_dict(), status=ack.status_code)
