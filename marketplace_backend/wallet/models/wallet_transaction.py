# wallet/models/wallet_transaction.py

"""
WALLET TRANSACTION (APPEND-ONLY)

The transaction log is the audit trail: summing a user's completed
amounts from zero reproduces WalletBalance.balance exactly.
Created once. Never updated. Never deleted.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class WalletTransaction(models.Model):
    TYPE_DEPOSIT = "deposit"
    TYPE_WITHDRAWAL = "withdrawal"
    TYPE_REFUND = "refund"
    TYPE_EARNING = "earning"
    TYPE_PAYMENT = "payment"

    TYPE_CHOICES = [
        (TYPE_DEPOSIT, "Deposit"),
        (TYPE_WITHDRAWAL, "Withdrawal"),
        (TYPE_REFUND, "Refund"),
        (TYPE_EARNING, "Earning"),
        (TYPE_PAYMENT, "Order Payment"),
    ]

    CREDIT_TYPES = {TYPE_DEPOSIT, TYPE_REFUND, TYPE_EARNING}
    DEBIT_TYPES = {TYPE_WITHDRAWAL, TYPE_PAYMENT}

    STATUS_COMPLETED = "completed"
    STATUS_PENDING = "pending"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_COMPLETED, "Completed"),
        (STATUS_PENDING, "Pending"),
        (STATUS_FAILED, "Failed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="wallet_transactions",
    )

    # signed: credits > 0, debits < 0
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    tx_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_COMPLETED)

    balance_after = models.DecimalField(max_digits=14, decimal_places=2)

    related_order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="wallet_transactions",
    )
    # survives order deletion
    order_number = models.CharField(max_length=64, blank=True, default="")

    description = models.CharField(max_length=255, blank=True, default="")

    idempotency_key = models.CharField(max_length=128, unique=True, null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="wallet_tx_user_created_idx"),
            models.Index(fields=["tx_type"], name="wallet_tx_type_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("WalletTransaction records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("WalletTransaction records cannot be deleted")

    def __str__(self):
        return f"{self.tx_type} {self.amount} | {self.user_id}"
