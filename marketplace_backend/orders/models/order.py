# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


class Order(models.Model):
    """
    A marketplace purchase.

    Key rules:
    - total_amount is computed server-side from the items at creation and
      never recomputed afterwards.
    - status is mutated only by the lifecycle controller (orders.services).
    - version is bumped on every controller write (row-level CAS counter).
    """

    STATUS_PENDING = "pending"
    STATUS_WAITING_CONFIRMATION = "waiting_confirmation"
    STATUS_CONFIRMED = "confirmed"
    STATUS_PROCESSING = "processing"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_WAITING_CONFIRMATION, "Waiting Confirmation"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    # Customer-facing wording (never expose internal codes to buyers)
    STATUS_LABELS = {
        STATUS_PENDING: "Awaiting payment",
        STATUS_WAITING_CONFIRMATION: "Payment being confirmed",
        STATUS_CONFIRMED: "Order confirmed",
        STATUS_PROCESSING: "Being prepared",
        STATUS_SHIPPED: "On its way",
        STATUS_DELIVERED: "Delivered",
        STATUS_COMPLETED: "Completed",
        STATUS_CANCELLED: "Cancelled",
    }

    PAYMENT_PENDING = "pending"
    PAYMENT_PAID = "paid"
    PAYMENT_FAILED = "failed"
    PAYMENT_REFUNDED = "refunded"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_FAILED, "Failed"),
        (PAYMENT_REFUNDED, "Refunded"),
    ]

    PAYOUT_NONE = "none"
    PAYOUT_COMPLETED = "completed"

    PAYOUT_STATUS_CHOICES = [
        (PAYOUT_NONE, "None"),
        (PAYOUT_COMPLETED, "Completed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(
        max_length=64,
        unique=True,
        help_text="Human-readable order number (ORD-<ms>-<suffix>).",
    )

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    partner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_orders",
    )

    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=8, default="USD")

    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_PENDING)
    payment_status = models.CharField(
        max_length=16,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PENDING,
    )
    payment_method = models.CharField(max_length=32, blank=True, default="")

    shipping_address = models.JSONField(default=dict)
    billing_address = models.JSONField(default=dict, blank=True)
    notes = models.TextField(blank=True, default="")

    cancellation_reason = models.TextField(blank=True, default="")
    payment_rejection_reason = models.TextField(blank=True, default="")

    partner_payout_status = models.CharField(
        max_length=16,
        choices=PAYOUT_STATUS_CHOICES,
        default=PAYOUT_NONE,
    )

    version = models.PositiveIntegerField(default=1)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["customer", "created_at"], name="orders_customer_created_idx"),
            models.Index(fields=["partner", "created_at"], name="orders_partner_created_idx"),
            models.Index(fields=["payment_status"], name="orders_payment_status_idx"),
        ]

    @property
    def status_label(self) -> str:
        return self.STATUS_LABELS.get(self.status, self.status)

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.STATUS_COMPLETED, self.STATUS_CANCELLED)

    def __str__(self):
        return f"{self.order_number} | {self.total_amount} | {self.status}"
