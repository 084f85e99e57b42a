# orders/models/logistics.py

"""
SHIPMENT TRACKING

LogisticsRecord: one per order, upserted by the admin shipping actions.
TrackingUpdate: append-only timeline rows (public tracking reads these).

Exception statuses (delayed, customs_hold, damaged, lost, ...) are
informational only and never gate order status.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from .order import Order


class LogisticsRecord(models.Model):
    STATUS_PROCESSING = "processing"
    STATUS_SHIPPED = "shipped"
    STATUS_IN_TRANSIT = "in_transit"
    STATUS_OUT_FOR_DELIVERY = "out_for_delivery"
    STATUS_DELIVERED = "delivered"

    STATUS_DELAYED = "delayed"
    STATUS_WEATHER_DELAY = "weather_delay"
    STATUS_MECHANICAL_DELAY = "mechanical_delay"
    STATUS_ADDRESS_ISSUE = "address_issue"
    STATUS_CUSTOMER_UNAVAILABLE = "customer_unavailable"
    STATUS_SECURITY_DELAY = "security_delay"
    STATUS_CUSTOMS_HOLD = "customs_hold"
    STATUS_DAMAGED = "damaged"
    STATUS_LOST = "lost"

    STATUS_CHOICES = [
        (STATUS_PROCESSING, "Processing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_IN_TRANSIT, "In Transit"),
        (STATUS_OUT_FOR_DELIVERY, "Out for Delivery"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_DELAYED, "Delayed"),
        (STATUS_WEATHER_DELAY, "Weather Delay"),
        (STATUS_MECHANICAL_DELAY, "Mechanical Delay"),
        (STATUS_ADDRESS_ISSUE, "Address Issue"),
        (STATUS_CUSTOMER_UNAVAILABLE, "Customer Unavailable"),
        (STATUS_SECURITY_DELAY, "Security Delay"),
        (STATUS_CUSTOMS_HOLD, "Customs Hold"),
        (STATUS_DAMAGED, "Damaged"),
        (STATUS_LOST, "Lost"),
    ]

    EXCEPTION_STATUSES = {
        STATUS_DELAYED,
        STATUS_WEATHER_DELAY,
        STATUS_MECHANICAL_DELAY,
        STATUS_ADDRESS_ISSUE,
        STATUS_CUSTOMER_UNAVAILABLE,
        STATUS_SECURITY_DELAY,
        STATUS_CUSTOMS_HOLD,
        STATUS_DAMAGED,
        STATUS_LOST,
    }

    # Statuses an admin may post while the parcel is moving.
    IN_FLIGHT_STATUSES = {
        STATUS_IN_TRANSIT,
        STATUS_OUT_FOR_DELIVERY,
        *EXCEPTION_STATUSES,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name="logistics")

    provider = models.CharField(max_length=64, help_text="Carrier name")
    tracking_number = models.CharField(max_length=128, db_index=True)
    shipping_method = models.CharField(max_length=32, blank=True, default="standard")

    current_status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_PROCESSING)

    estimated_delivery = models.DateField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    actual_delivery = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    @property
    def is_exception(self) -> bool:
        return self.current_status in self.EXCEPTION_STATUSES

    def __str__(self):
        return f"{self.provider}:{self.tracking_number} | {self.current_status}"


class TrackingUpdate(models.Model):
    """
    Append-only tracking timeline entry.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    logistics = models.ForeignKey(LogisticsRecord, on_delete=models.CASCADE, related_name="updates")

    status = models.CharField(max_length=32, choices=LogisticsRecord.STATUS_CHOICES)
    location = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tracking_updates",
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("TrackingUpdate records are append-only")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.logistics_id} | {self.status}"
