# notifications/migrations/0001_initial.py

from __future__ import annotations

import uuid

import django.db.models.deletion
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
            name="Notification",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("order_confirmed", "Order confirmed"),
                            ("order_assigned", "Order assigned"),
                            ("order_shipped", "Order shipped"),
                            ("order_completed", "Order completed"),
                            ("order_cancelled", "Order cancelled"),
                            ("order_refunded", "Order refunded"),
                            ("payment_pending_confirmation", "Payment awaiting confirmation"),
                            ("payment_verified", "Payment verified"),
                            ("payment_rejected", "Payment rejected"),
                            ("commission_paid", "Commission paid"),
                            ("funding_requested", "Wallet funding requested"),
                            ("funding_reviewed", "Wallet funding reviewed"),
                        ],
                        max_length=64,
                    ),
                ),
                ("title", models.CharField(blank=True, default="", max_length=255)),
                ("message", models.TextField(blank=True, default="")),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("is_read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to="orders.order",
                    ),
                ),
                (
                    "recipient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["recipient", "is_read"], name="notif_recipient_read_idx"),
                ],
            },
        ),
    ]
