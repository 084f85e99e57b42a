# orders/models/order_item.py

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from .order import Order


class OrderItem(models.Model):
    """
    Order line. Created with its Order in one transaction; immutable afterwards.
    subtotal = quantity * unit_price (server computed).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )

    # snapshots (catalog may change later)
    product_name = models.CharField(max_length=255, blank=True, default="")
    sku = models.CharField(max_length=128, blank=True, default="")

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="orderitem_quantity_positive"),
            models.CheckConstraint(condition=models.Q(unit_price__gt=0), name="orderitem_unit_price_positive"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("OrderItem records are immutable")
        self.subtotal = (Decimal(self.unit_price) * int(self.quantity)).quantize(Decimal("0.01"))
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.sku or self.product_id} x{self.quantity}"
