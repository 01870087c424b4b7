"""
Celery configuration for the marketplace payment service.

Celery runs the payout background work:
- retry_failed_payouts: re-dispatches failed payouts whose retry time passed
- sync_processing_payouts: polls providers for payouts still processing

Schedules live in the database (django-celery-beat) and are installed by
the payments data migrations. Redis is the broker and result backend.
Tasks are auto-discovered from all installed Django apps.

Usage:
    celery -A config worker -l info
    celery -A config beat -l info

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Celery will look for a tasks.py module in each installed app
app.autodiscover_tasks()
