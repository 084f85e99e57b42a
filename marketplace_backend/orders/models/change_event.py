# orders/models/change_event.py

from django.db import models
from django.utils import timezone


class OrderChangeEvent(models.Model):
    """
    Authoritative change feed consumed by admin dashboards.

    - sequence is monotonic; clients resync with ?after=<sequence>
    - order_id is a plain value (not FK) so delete events survive the delete
    - written inside the same transaction as the change it describes
    """

    TYPE_INSERT = "insert"
    TYPE_UPDATE = "update"
    TYPE_DELETE = "delete"

    TYPE_CHOICES = [
        (TYPE_INSERT, "Insert"),
        (TYPE_UPDATE, "Update"),
        (TYPE_DELETE, "Delete"),
    ]

    sequence = models.BigAutoField(primary_key=True)

    order_id = models.UUIDField(db_index=True)
    order_number = models.CharField(max_length=64, blank=True, default="")
    event_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    snapshot = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["sequence"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("OrderChangeEvent records are append-only")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"#{self.sequence} {self.event_type} {self.order_number or self.order_id}"
