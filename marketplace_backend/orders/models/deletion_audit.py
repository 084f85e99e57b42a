# orders/models/deletion_audit.py

"""
ORDER DELETION AUDIT (IMMUTABLE)

Admin delete is irreversible. This row is the only trace left of the order:
who deleted it, what it looked like, and what the cascade removed.
Created once. Never updated. Never deleted.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class OrderDeletionAudit(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_id = models.UUIDField(db_index=True)
    order_number = models.CharField(max_length=64, db_index=True)

    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="order_deletions",
    )

    order_snapshot = models.JSONField(default=dict)
    cascade_summary = models.JSONField(default=dict)

    deleted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-deleted_at"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("OrderDeletionAudit records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("OrderDeletionAudit records cannot be deleted")

    def __str__(self):
        return f"Deleted | {self.order_number}"
