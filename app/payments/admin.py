"""
Payment admin configuration.

Payments and payouts are financial audit records: state fields are
read-only here and rows cannot be deleted from the admin.
"""

from django.contrib import admin

from payments.models import MarketplacePayment, Payout

__all__ = [
    "MarketplacePaymentAdmin",
    "PayoutAdmin",
]


class PayoutInline(admin.TabularInline):
    model = Payout
    extra = 0
    can_delete = False
    fields = [
        "field",
        "channel",
        "recipient",
        "amount",
        "status",
        "provider_id",
        "retry_count",
        "next_retry_at",
    ]
    readonly_fields = fields
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(MarketplacePayment)
class MarketplacePaymentAdmin(admin.ModelAdmin):
    """
    Admin configuration for MarketplacePayment.

    Provides visibility into checkout attempts and the payouts they fed.
    """

    list_display = [
        "client_reference",
        "reservation",
        "gross_amount",
        "platform_fee",
        "net_to_owner",
        "status",
        "provider",
        "paid_at",
        "created_at",
    ]
    list_filter = ["status", "provider", "created_at"]
    search_fields = ["id", "client_reference", "provider_token", "reservation__id"]
    readonly_fields = [
        "id",
        "reservation",
        "session_id",
        "client_reference",
        "gross_amount",
        "platform_fee",
        "net_to_owner",
        "currency",
        "provider",
        "provider_token",
        "checkout_url",
        "status",
        "webhook_received_at",
        "paid_at",
        "failed_at",
        "provider_data",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    inlines = [PayoutInline]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "reservation", "session_id", "client_reference", "status"),
            },
        ),
        (
            "Amounts",
            {
                "fields": ("gross_amount", "platform_fee", "net_to_owner", "currency"),
            },
        ),
        (
            "Provider",
            {
                "fields": ("provider", "provider_token", "checkout_url"),
            },
        ),
        (
            "Status Timestamps",
            {
                "fields": ("webhook_received_at", "paid_at", "failed_at"),
            },
        ),
        (
            "Provider Payloads",
            {
                "fields": ("provider_data",),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    """
    Admin configuration for Payout.

    Provides visibility into payout attempts, failures and retry schedule.
    """

    list_display = [
        "id",
        "marketplace_payment",
        "field",
        "channel",
        "amount",
        "status",
        "retry_count",
        "next_retry_at",
        "created_at",
    ]
    list_filter = ["status", "channel", "created_at"]
    search_fields = [
        "id",
        "provider_id",
        "idempotency_key",
        "marketplace_payment__client_reference",
    ]
    readonly_fields = [
        "id",
        "marketplace_payment",
        "field",
        "channel",
        "recipient",
        "amount",
        "currency",
        "idempotency_key",
        "status",
        "provider_id",
        "provider_status",
        "provider_error",
        "retry_count",
        "next_retry_at",
        "completed_at",
        "failed_at",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "marketplace_payment", "field", "status"),
            },
        ),
        (
            "Destination",
            {
                "fields": ("channel", "recipient", "amount", "currency"),
            },
        ),
        (
            "Provider Details",
            {
                "fields": ("provider_id", "provider_status", "idempotency_key"),
            },
        ),
        (
            "Failure & Retry",
            {
                "fields": ("provider_error", "retry_count", "next_retry_at"),
                "classes": ("collapse",),
            },
        ),
        (
            "Status Timestamps",
            {
                "fields": ("completed_at", "failed_at"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def has_delete_permission(self, request, obj=None):
        return False
