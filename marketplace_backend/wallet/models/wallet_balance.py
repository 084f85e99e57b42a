# wallet/models/wallet_balance.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


class WalletBalance(models.Model):
    """
    Per-user spendable + pending funds.

    Rules:
    - Created lazily on first access (get_balance).
    - Mutated ONLY by wallet.services.ledger via single-statement F() updates.
    - balance >= 0 is enforced by the database as well as the service.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="wallet",
    )

    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    pending_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=8, default="USD")

    version = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(condition=models.Q(balance__gte=0), name="wallet_balance_non_negative"),
            models.CheckConstraint(
                condition=models.Q(pending_balance__gte=0),
                name="wallet_pending_balance_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.user_id} | {self.balance} {self.currency}"
