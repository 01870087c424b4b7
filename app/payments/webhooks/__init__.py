"""
Inbound provider webhooks.

The HTTP endpoint lives in payments.webhooks.views; the processing logic
is payments.services.WebhookProcessor.
"""
