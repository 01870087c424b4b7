"""
URL configuration for the payments app.

Routes:
    - POST checkout/ - Create checkout session
    - GET payment/<uuid>/status/ - Payment status
    - POST webhook/<provider>/ - Provider webhook endpoint
    - GET payments/ - Admin payment list
    - GET health/ - Admin provider configuration report

All routes are prefixed with /api/v1/marketplace/ when included in the main URLconf.

Usage:
    # In config/urls.py
    api_v1_patterns = [
        path("marketplace/", include("payments.urls")),
    ]
"""

from django.urls import path

from payments.views import (
    AdminPaymentListView,
    CheckoutView,
    PaymentStatusView,
    ProviderHealthView,
)
from payments.webhooks.views import provider_webhook

app_name = "payments"

urlpatterns = [
    path("checkout/", CheckoutView.as_view(), name="checkout"),
    path("payment/<uuid:payment_id>/status/", PaymentStatusView.as_view(), name="payment_status"),
    # Webhook endpoints
    path("webhook/<str:provider>/", provider_webhook, name="provider_webhook"),
    # Admin
    path("payments/", AdminPaymentListView.as_view(), name="admin_payment_list"),
    path("health/", ProviderHealthView.as_view(), name="provider_health"),
]
