# payments/models/payment_record.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


class PaymentRecord(models.Model):
    """
    One payment attempt.

    Key rules:
    - Created by the payment router; only verify / reject move it afterwards.
    - pending -> verified | rejected happens exactly once.
    - order is SET_NULL on admin delete; order_number keeps it traceable.
    """

    STATUS_PENDING = "pending"
    STATUS_VERIFIED = "verified"
    STATUS_REJECTED = "rejected"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_VERIFIED, "Verified"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_FAILED, "Failed"),
    ]

    FINAL_STATUSES = {STATUS_VERIFIED, STATUS_REJECTED, STATUS_FAILED}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payment_records",
    )
    order_number = models.CharField(max_length=64, db_index=True)

    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payment_records",
    )

    method = models.CharField(max_length=32)
    kind = models.CharField(max_length=16)

    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=8, default="USD")

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    external_reference = models.CharField(max_length=128, blank=True, default="", db_index=True)
    rejection_reason = models.TextField(blank=True, default="")

    # Validated per-kind payload (card last4, transfer reference, tx hash ...)
    collected_data = models.JSONField(default=dict, blank=True)

    verifier = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="verified_payments",
    )
    verified_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="payments_status_created_idx"),
            models.Index(fields=["order", "status"], name="payments_order_status_idx"),
        ]

    def __str__(self):
        return f"{self.order_number} | {self.method} | {self.amount} | {self.status}"
