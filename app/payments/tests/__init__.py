"""
Tests for payments app.

This package contains test modules for:
- test_commission.py: Commission split
- test_models.py: Database constraints on payments and payouts
- test_state_transitions.py: django-fsm transitions and concurrency guard
- test_views.py: API endpoint tests
- test_tasks.py: Payout retry and status sync tasks
- test_integration.py: Checkout to payout journeys

Service, adapter and webhook tests live next to their packages.

Usage:
    pytest payments/tests/
    pytest payments/tests/test_views.py
"""
