# orders/services/order_store.py

"""
ORDER STORE

Owns Order + OrderItem creation and read access.

GUARANTEES:
- total_amount is computed here from quantity x unit_price; a client total
  is never read.
- Order row and OrderItem rows are written in ONE transaction; a failed
  item insert leaves nothing behind.
- order_number collisions are fatal (ConflictError), never retried with a
  different number: the number is what humans quote on the phone.
"""

from __future__ import annotations

import logging
import secrets
import string
import time

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.money import ZERO, money, positive_money
from orders.models import LogisticsRecord, Order, OrderChangeEvent, OrderItem
from orders.services.change_feed import record_change
from products.services.catalog import get_products

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
_SUFFIX_LENGTH = 9

DEFAULT_LIST_LIMIT = 50


# ============================================================
# ORDER NUMBER
# ============================================================


def generate_order_number() -> str:
    """
    <prefix>-<epoch ms>-<9 random base36 chars>
    """
    prefix = getattr(settings, "ORDER_NUMBER_PREFIX", "ORD")
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{prefix}-{millis}-{suffix}"


# ============================================================
# INPUT NORMALISATION
# ============================================================


def _clean_quantity(raw, *, index: int) -> int:
    if isinstance(raw, bool):
        raise ValidationError(f"Item {index}: quantity must be a whole number")
    try:
        qty = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Item {index}: quantity must be a whole number") from exc

    if qty != raw and str(qty) != str(raw).strip():
        raise ValidationError(f"Item {index}: quantity must be a whole number")
    if qty <= 0:
        raise ValidationError(f"Item {index}: quantity must be greater than zero")
    return qty


def _resolve_lines(items) -> list[dict]:
    if not items:
        raise ValidationError("An order needs at least one item")

    product_ids = []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict) or not item.get("product_id"):
            raise ValidationError(f"Item {index}: product_id is required")
        product_ids.append(str(item["product_id"]))

    catalog = get_products(product_ids)

    lines = []
    for index, item in enumerate(items, start=1):
        entry = catalog.get(str(item["product_id"]))
        if entry is None:
            raise NotFoundError(f"Item {index}: product {item['product_id']} not found", entity_id=item["product_id"])
        if not entry.is_active:
            raise ValidationError(f"Item {index}: product {entry.sku} is not available")

        qty = _clean_quantity(item.get("quantity"), index=index)
        if qty > entry.stock:
            raise ValidationError(f"Item {index}: only {entry.stock} of {entry.sku} in stock")

        raw_price = item.get("unit_price")
        unit_price = entry.unit_price if raw_price in (None, "") else raw_price
        unit_price = positive_money(unit_price, field=f"item {index} unit_price")

        lines.append(
            {
                "entry": entry,
                "quantity": qty,
                "unit_price": unit_price,
                "subtotal": money(unit_price * qty),
            }
        )
    return lines


# ============================================================
# CREATE
# ============================================================


def create_order(
    *,
    customer,
    items,
    shipping_address,
    payment_method=None,
    billing_address=None,
    partner=None,
    notes: str = "",
) -> Order:
    """
    Validate -> price -> write Order + items atomically -> change event.
    """

    if not shipping_address:
        raise ValidationError("A shipping address is required")

    lines = _resolve_lines(items)
    total = sum((line["subtotal"] for line in lines), ZERO)

    order_number = generate_order_number()

    try:
        with transaction.atomic():
            order = Order.objects.create(
                order_number=order_number,
                customer=customer,
                partner=partner,
                total_amount=money(total),
                currency=getattr(settings, "WALLET_CURRENCY", "USD"),
                payment_method=(payment_method or "").strip(),
                shipping_address=shipping_address,
                billing_address=billing_address or {},
                notes=(notes or "").strip(),
            )

            for line in lines:
                entry = line["entry"]
                OrderItem.objects.create(
                    order=order,
                    product_id=entry.product_id,
                    product_name=entry.name,
                    sku=entry.sku,
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                )

            record_change(order=order, event_type=OrderChangeEvent.TYPE_INSERT)

    except IntegrityError as exc:
        if Order.objects.filter(order_number=order_number).exists():
            logger.error("Order number collision", extra={"order_number": order_number})
            raise ConflictError(
                f"Order number {order_number} already exists",
                entity_id=order_number,
            ) from exc
        raise

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "customer_id": str(customer.pk),
            "total_amount": str(order.total_amount),
            "items": len(lines),
        },
    )
    return order


# ============================================================
# READS
# ============================================================


def _base_queryset():
    return Order.objects.select_related("customer", "partner").prefetch_related("items__product")


def get_order(*, order_id) -> Order:
    try:
        return _base_queryset().get(id=order_id)
    except (Order.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise NotFoundError(f"Order {order_id} not found", entity_id=order_id) from exc


def get_order_by_number(*, order_number: str) -> Order:
    try:
        return _base_queryset().get(order_number=(order_number or "").strip())
    except Order.DoesNotExist as exc:
        raise NotFoundError(f"Order {order_number} not found", entity_id=order_number) from exc


def list_for_customer(*, customer, limit: int = DEFAULT_LIST_LIMIT):
    return list(_base_queryset().filter(customer=customer).order_by("-created_at")[:limit])


def list_for_partner(*, partner, limit: int = DEFAULT_LIST_LIMIT):
    return list(_base_queryset().filter(partner=partner).order_by("-created_at")[:limit])


def get_order_tracking(*, order: Order) -> LogisticsRecord | None:
    return LogisticsRecord.objects.filter(order=order).prefetch_related("updates").first()
