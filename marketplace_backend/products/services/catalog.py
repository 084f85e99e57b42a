# products/services/catalog.py

"""
CATALOG LOOKUP

getProduct(id) -> price, stock

Read-only view of the catalog used by order creation. Order code never
touches Product rows directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError

from core.exceptions import NotFoundError
from products.models import Product


@dataclass(frozen=True)
class CatalogEntry:
    product_id: str
    sku: str
    name: str
    unit_price: Decimal
    stock: int
    is_active: bool


def _entry(product: Product) -> CatalogEntry:
    return CatalogEntry(
        product_id=str(product.id),
        sku=product.sku,
        name=product.name,
        unit_price=product.unit_price,
        stock=int(product.stock_quantity),
        is_active=bool(product.is_active),
    )


def get_product(product_id) -> CatalogEntry:
    try:
        product = Product.objects.get(id=product_id)
    except (Product.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise NotFoundError(f"Product {product_id} not found", entity_id=product_id) from exc
    return _entry(product)


def get_products(product_ids) -> dict[str, CatalogEntry]:
    """
    Bulk variant: one query, keyed by str(product_id). Unknown ids are absent.
    """
    ids = {str(pid) for pid in product_ids}
    try:
        return {str(p.id): _entry(p) for p in Product.objects.filter(id__in=ids)}
    except (DjangoValidationError, ValueError) as exc:
        raise NotFoundError("One or more products not found") from exc
