# payments/models/paid_order.py

import uuid

from django.db import models
from django.utils import timezone


class PaidOrderArchive(models.Model):
    """
    "Paid orders" reporting projection: one row per verified order.
    Plain values only, so rows outlive the order itself.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_id = models.UUIDField(db_index=True)
    order_number = models.CharField(max_length=64, unique=True)
    payment_id = models.UUIDField()

    customer_email = models.EmailField(blank=True, default="")
    method = models.CharField(max_length=32)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=8, default="USD")

    snapshot = models.JSONField(default=dict, blank=True)
    archived_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-archived_at"]

    def __str__(self):
        return f"Paid | {self.order_number} | {self.amount}"
