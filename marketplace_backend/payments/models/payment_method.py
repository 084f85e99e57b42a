# payments/models/payment_method.py

from django.db import models


class PaymentMethodConfig(models.Model):
    """
    Per-method policy row (configuration, not logic).

    kind decides the handling strategy:
    - capture: synchronous gateway capture (card-style)
    - wallet:  internal wallet debit
    - manual:  pending until an admin verifies (bank transfer, crypto)

    admin_confirmation_required forces the manual strategy regardless of kind.
    collect_data_only: accept the form, never process the payment.
    """

    KIND_CAPTURE = "capture"
    KIND_WALLET = "wallet"
    KIND_MANUAL = "manual"

    KIND_CHOICES = [
        (KIND_CAPTURE, "Gateway capture"),
        (KIND_WALLET, "Wallet"),
        (KIND_MANUAL, "Manual confirmation"),
    ]

    method_name = models.CharField(max_length=32, unique=True)
    display_name = models.CharField(max_length=64, blank=True, default="")
    kind = models.CharField(max_length=16, choices=KIND_CHOICES)

    enabled = models.BooleanField(default=True)
    customer_access = models.BooleanField(default=True)
    partner_access = models.BooleanField(default=True)
    admin_access = models.BooleanField(default=True)

    admin_confirmation_required = models.BooleanField(default=False)
    collect_data_only = models.BooleanField(default=False)

    # Instructions shown to payers (bank details, deposit address, ...)
    config_data = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["method_name"]

    def __str__(self):
        return f"{self.method_name} ({self.kind})"
