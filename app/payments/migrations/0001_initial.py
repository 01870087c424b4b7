import uuid

import django.db.models.deletion
import django_fsm
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MarketplacePayment",
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
                (
                    "session_id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Random identifier of this checkout attempt",
                    ),
                ),
                (
                    "client_reference",
                    models.CharField(
                        help_text="Provider-facing reference, deterministic from reservation and session",
                        max_length=64,
                        unique=True,
                    ),
                ),
                (
                    "gross_amount",
                    models.PositiveIntegerField(help_text="Amount charged to the player"),
                ),
                (
                    "platform_fee",
                    models.PositiveIntegerField(
                        help_text="Platform commission kept on this payment"
                    ),
                ),
                (
                    "net_to_owner",
                    models.PositiveIntegerField(
                        help_text="Share forwarded to the field owner"
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="XOF", help_text="ISO 4217 currency code", max_length=3
                    ),
                ),
                (
                    "provider",
                    models.CharField(
                        choices=[("paydunya", "PayDunya"), ("wave_direct", "Wave Direct")],
                        default="paydunya",
                        max_length=20,
                    ),
                ),
                (
                    "provider_token",
                    models.CharField(
                        blank=True,
                        help_text="Checkout token issued by the provider",
                        max_length=255,
                        null=True,
                        unique=True,
                    ),
                ),
                ("checkout_url", models.URLField(blank=True, default="", max_length=500)),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("paid", "Paid"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the payment (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                ("webhook_received_at", models.DateTimeField(blank=True, null=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("failed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "provider_data",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Raw checkout creation and confirmation payloads",
                    ),
                ),
                (
                    "reservation",
                    models.ForeignKey(
                        help_text="Reservation this checkout attempt pays for",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="marketplace_payments",
                        to="bookings.reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Marketplace payment",
                "verbose_name_plural": "Marketplace payments",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["reservation", "status"],
                        name="mpay_reservation_status_idx",
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("gross_amount__gt", 0)),
                        name="marketplace_payment_gross_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            (
                                "net_to_owner",
                                models.F("gross_amount") - models.F("platform_fee"),
                            )
                        ),
                        name="marketplace_payment_net_is_gross_minus_fee",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("platform_fee__lte", models.F("gross_amount"))),
                        name="marketplace_payment_fee_within_gross",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payout",
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
                (
                    "channel",
                    models.CharField(
                        choices=[
                            ("wave", "Wave"),
                            ("paydunya_push", "PayDunya Push"),
                            ("orange_money", "Orange Money"),
                            ("bank_transfer", "Bank Transfer"),
                        ],
                        max_length=20,
                    ),
                ),
                ("recipient", models.CharField(blank=True, default="", max_length=32)),
                ("amount", models.PositiveIntegerField(help_text="Payout amount in XOF")),
                ("currency", models.CharField(default="XOF", max_length=3)),
                (
                    "idempotency_key",
                    models.CharField(
                        db_index=True,
                        help_text="Sent to the provider; identical across retries",
                        max_length=255,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="processing",
                        help_text="Current state of the payout (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "provider_id",
                    models.CharField(blank=True, db_index=True, max_length=255, null=True),
                ),
                (
                    "provider_status",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Last raw status reported by the provider",
                        max_length=50,
                    ),
                ),
                ("provider_error", models.JSONField(blank=True, null=True)),
                ("retry_count", models.PositiveIntegerField(default=0)),
                ("next_retry_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("failed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "field",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payouts",
                        to="bookings.field",
                    ),
                ),
                (
                    "marketplace_payment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payouts",
                        to="payments.marketplacepayment",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payout",
                "verbose_name_plural": "Payouts",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["marketplace_payment", "field", "status"],
                        name="payout_pair_status_idx",
                    ),
                    models.Index(
                        fields=["status", "next_retry_at"],
                        name="payout_status_retry_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status__in", ["processing", "completed"])),
                        fields=("marketplace_payment", "field"),
                        name="payout_one_active_per_payment_field",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="payout_amount_positive",
                    ),
                ],
            },
        ),
    ]
