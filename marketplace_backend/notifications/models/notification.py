# notifications/models/notification.py

import uuid

from django.conf import settings
from django.db import models


class Notification(models.Model):
    """
    In-app notification outbox row.

    Delivery (email/push) is an external collaborator that reads this table;
    the order core only writes rows. Rows tied to an order are removed with it.
    """

    EVENT_ORDER_CONFIRMED = "order_confirmed"
    EVENT_ORDER_ASSIGNED = "order_assigned"
    EVENT_ORDER_SHIPPED = "order_shipped"
    EVENT_ORDER_COMPLETED = "order_completed"
    EVENT_ORDER_CANCELLED = "order_cancelled"
    EVENT_ORDER_REFUNDED = "order_refunded"
    EVENT_PAYMENT_PENDING = "payment_pending_confirmation"
    EVENT_PAYMENT_VERIFIED = "payment_verified"
    EVENT_PAYMENT_REJECTED = "payment_rejected"
    EVENT_COMMISSION_PAID = "commission_paid"
    EVENT_FUNDING_REQUESTED = "funding_requested"
    EVENT_FUNDING_REVIEWED = "funding_reviewed"

    EVENT_CHOICES = [
        (EVENT_ORDER_CONFIRMED, "Order confirmed"),
        (EVENT_ORDER_ASSIGNED, "Order assigned"),
        (EVENT_ORDER_SHIPPED, "Order shipped"),
        (EVENT_ORDER_COMPLETED, "Order completed"),
        (EVENT_ORDER_CANCELLED, "Order cancelled"),
        (EVENT_ORDER_REFUNDED, "Order refunded"),
        (EVENT_PAYMENT_PENDING, "Payment awaiting confirmation"),
        (EVENT_PAYMENT_VERIFIED, "Payment verified"),
        (EVENT_PAYMENT_REJECTED, "Payment rejected"),
        (EVENT_COMMISSION_PAID, "Commission paid"),
        (EVENT_FUNDING_REQUESTED, "Wallet funding requested"),
        (EVENT_FUNDING_REVIEWED, "Wallet funding reviewed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )

    event_type = models.CharField(max_length=64, choices=EVENT_CHOICES)
    title = models.CharField(max_length=255, blank=True, default="")
    message = models.TextField(blank=True, default="")
    payload = models.JSONField(default=dict, blank=True)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
    )

    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "is_read"], name="notif_recipient_read_idx"),
        ]

    def __str__(self):
        return f"{self.event_type} -> {self.recipient_id}"
