# payments/migrations/0001_initial.py

from __future__ import annotations

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentMethodConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("method_name", models.CharField(max_length=32, unique=True)),
                ("display_name", models.CharField(blank=True, default="", max_length=64)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("capture", "Gateway capture"),
                            ("wallet", "Wallet"),
                            ("manual", "Manual confirmation"),
                        ],
                        max_length=16,
                    ),
                ),
                ("enabled", models.BooleanField(default=True)),
                ("customer_access", models.BooleanField(default=True)),
                ("partner_access", models.BooleanField(default=True)),
                ("admin_access", models.BooleanField(default=True)),
                ("admin_confirmation_required", models.BooleanField(default=False)),
                ("collect_data_only", models.BooleanField(default=False)),
                ("config_data", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["method_name"],
            },
        ),
        migrations.CreateModel(
            name="PaymentRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_number", models.CharField(db_index=True, max_length=64)),
                ("method", models.CharField(max_length=32)),
                ("kind", models.CharField(max_length=16)),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("currency", models.CharField(default="USD", max_length=8)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("verified", "Verified"),
                            ("rejected", "Rejected"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("external_reference", models.CharField(blank=True, db_index=True, default="", max_length=128)),
                ("rejection_reason", models.TextField(blank=True, default="")),
                ("collected_data", models.JSONField(blank=True, default=dict)),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payment_records",
                        to="orders.order",
                    ),
                ),
                (
                    "payer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "verifier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="verified_payments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="payments_status_created_idx"),
                    models.Index(fields=["order", "status"], name="payments_order_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentSecurityLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("policy_rejected", "Method not allowed for role"),
                            ("collect_data_only", "Collect-data-only method"),
                            ("capture_declined", "Capture declined"),
                            ("partial_failure", "Captured but order not confirmed"),
                        ],
                        max_length=32,
                    ),
                ),
                ("order_number", models.CharField(blank=True, default="", max_length=64)),
                ("method", models.CharField(blank=True, default="", max_length=32)),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payment_security_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="PaidOrderArchive",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_id", models.UUIDField(db_index=True)),
                ("order_number", models.CharField(max_length=64, unique=True)),
                ("payment_id", models.UUIDField()),
                ("customer_email", models.EmailField(blank=True, default="", max_length=254)),
                ("method", models.CharField(max_length=32)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(default="USD", max_length=8)),
                ("snapshot", models.JSONField(blank=True, default=dict)),
                ("archived_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "ordering": ["-archived_at"],
            },
        ),
    ]
