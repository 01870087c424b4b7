from django.contrib import admin

from bookings.models import Field, Reservation


@admin.register(Field)
class FieldAdmin(admin.ModelAdmin):
    list_display = [
        "name",
        "price_per_hour",
        "owner_payout_channel",
        "owner_mobile_e164",
        "commission_rate_bps",
    ]
    list_filter = ["owner_payout_channel"]
    search_fields = ["name", "location"]


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "field",
        "user",
        "reservation_date",
        "total_price",
        "payment_status",
        "status",
    ]
    list_filter = ["payment_status", "status"]
    raw_id_fields = ["field", "user"]
