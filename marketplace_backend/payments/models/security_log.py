# payments/models/security_log.py

from django.conf import settings
from django.db import models
from django.utils import timezone


class PaymentSecurityLog(models.Model):
    """
    Append-only record of suspicious or refused payment attempts
    (policy rejections, declines). Never updated. Never deleted.
    """

    EVENT_POLICY_REJECTED = "policy_rejected"
    EVENT_COLLECT_ONLY = "collect_data_only"
    EVENT_DECLINED = "capture_declined"
    EVENT_PARTIAL_FAILURE = "partial_failure"

    EVENT_CHOICES = [
        (EVENT_POLICY_REJECTED, "Method not allowed for role"),
        (EVENT_COLLECT_ONLY, "Collect-data-only method"),
        (EVENT_DECLINED, "Capture declined"),
        (EVENT_PARTIAL_FAILURE, "Captured but order not confirmed"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="payment_security_logs",
    )
    event_type = models.CharField(max_length=32, choices=EVENT_CHOICES)
    order_number = models.CharField(max_length=64, blank=True, default="")
    method = models.CharField(max_length=32, blank=True, default="")
    payload = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("PaymentSecurityLog entries are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("PaymentSecurityLog entries cannot be deleted")

    def __str__(self):
        return f"{self.event_type} | {self.order_number}"
