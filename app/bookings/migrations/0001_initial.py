import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Field",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier (UUID4)",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=200)),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                (
                    "price_per_hour",
                    models.PositiveIntegerField(
                        help_text="Hourly price in XOF (smallest currency unit)"
                    ),
                ),
                (
                    "owner_payout_channel",
                    models.CharField(
                        choices=[
                            ("wave", "Wave"),
                            ("paydunya_push", "PayDunya Push"),
                            ("orange_money", "Orange Money"),
                            ("bank_transfer", "Bank Transfer"),
                        ],
                        default="wave",
                        help_text="Payout channel for the owner's share",
                        max_length=20,
                    ),
                ),
                (
                    "owner_mobile_e164",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Owner mobile wallet number, e.g. +221771234567",
                        max_length=20,
                    ),
                ),
                (
                    "commission_rate_bps",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Platform commission in basis points (1000 = 10%), empty for PLATFORM_FEE_BPS",
                        null=True,
                        validators=[django.core.validators.MaxValueValidator(10000)],
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="owned_fields",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Reservation",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier (UUID4)",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("reservation_date", models.DateField()),
                ("start_time", models.TimeField(blank=True, null=True)),
                ("duration_hours", models.PositiveSmallIntegerField(default=1)),
                (
                    "total_price",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Agreed price in XOF; falls back to the field hourly price",
                        null=True,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("paid", "Paid")],
                        db_index=True,
                        default="pending",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=10,
                    ),
                ),
                (
                    "field",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="bookings.field",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-reservation_date", "-created_at"],
            },
        ),
    ]
