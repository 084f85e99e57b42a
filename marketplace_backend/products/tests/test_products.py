# products/tests/test_products.py

import uuid
from decimal import Decimal

from django.db import IntegrityError
from django.test import TestCase

from core.exceptions import NotFoundError
from products.models import Product
from products.services.catalog import get_product, get_products


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - Products can be created safely
    - SKU uniqueness is enforced
    """

    def test_product_creation(self):
        product = Product.objects.create(
            name="Brake Pad Set (Front)",
            sku="BRK-PAD-F01",
            brand="Bosch",
            unit_price=Decimal("45.00"),
            stock_quantity=12,
        )

        self.assertEqual(product.sku, "BRK-PAD-F01")
        self.assertTrue(product.is_active)
        self.assertEqual(str(product), "Brake Pad Set (Front) (BRK-PAD-F01)")

    def test_sku_must_be_unique(self):
        Product.objects.create(name="Oil Filter", sku="OIL-F-100", unit_price=Decimal("8.50"))

        with self.assertRaises(IntegrityError):
            Product.objects.create(name="Oil Filter Duplicate", sku="OIL-F-100", unit_price=Decimal("9.00"))


class CatalogLookupTests(TestCase):
    """
    GUARANTEES:
    - get_product returns price + stock
    - unknown or malformed ids raise NotFoundError
    """

    def setUp(self):
        self.product = Product.objects.create(
            name="Spark Plug",
            sku="SPK-IR-4",
            unit_price=Decimal("6.25"),
            stock_quantity=40,
        )

    def test_get_product_returns_price_and_stock(self):
        entry = get_product(self.product.id)

        self.assertEqual(entry.unit_price, Decimal("6.25"))
        self.assertEqual(entry.stock, 40)
        self.assertTrue(entry.is_active)

    def test_unknown_product_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            get_product(uuid.uuid4())

    def test_malformed_id_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            get_product("not-a-uuid")

    def test_bulk_lookup_skips_unknown_ids(self):
        entries = get_products([self.product.id, uuid.uuid4()])

        self.assertEqual(list(entries.keys()), [str(self.product.id)])
