# wallet/models/funding_request.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class WalletFundingRequest(models.Model):
    """
    Pending crypto deposit / withdrawal awaiting admin review.

    Deposit: nothing moves until approval (amount parked in pending_balance).
    Withdrawal: balance is debited at request time; rejection credits it back.
    """

    KIND_DEPOSIT = "deposit"
    KIND_WITHDRAWAL = "withdrawal"

    KIND_CHOICES = [
        (KIND_DEPOSIT, "Deposit"),
        (KIND_WITHDRAWAL, "Withdrawal"),
    ]

    CRYPTO_BTC = "BTC"
    CRYPTO_ETH = "ETH"
    CRYPTO_USDT_TRX = "USDT_TRX"
    CRYPTO_XRP = "XRP"

    CRYPTO_CHOICES = [
        (CRYPTO_BTC, "Bitcoin"),
        (CRYPTO_ETH, "Ethereum"),
        (CRYPTO_USDT_TRX, "USDT (TRC20)"),
        (CRYPTO_XRP, "Ripple"),
    ]

    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="funding_requests",
    )

    kind = models.CharField(max_length=16, choices=KIND_CHOICES)
    crypto_type = models.CharField(max_length=16, choices=CRYPTO_CHOICES)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    crypto_amount = models.DecimalField(max_digits=24, decimal_places=8, null=True, blank=True)

    wallet_address = models.CharField(max_length=255, blank=True, default="")
    destination_tag = models.CharField(max_length=64, blank=True, default="")
    proof = models.CharField(max_length=255, blank=True, default="", help_text="Transaction hash or proof reference")
    required_confirmations = models.PositiveIntegerField(default=12)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    review_note = models.TextField(blank=True, default="")

    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_funding_requests",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="wallet_funding_status_idx"),
            models.Index(fields=["user", "created_at"], name="wallet_funding_user_idx"),
        ]

    def __str__(self):
        return f"{self.kind} {self.amount} {self.crypto_type} | {self.status}"
