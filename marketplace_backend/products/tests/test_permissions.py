# products/tests/test_permissions.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from products.models import Product

User = get_user_model()


class ProductPermissionTests(TestCase):
    """
    GUARANTEES:
    - Anonymous users cannot read or modify the catalog
    - Customers read active parts only
    - Only admins write
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@parts.test", password="pass", role="admin")
        self.customer = User.objects.create_user(email="buyer@parts.test", password="pass", role="customer")

        self.active = Product.objects.create(name="Alternator", sku="ALT-90A", unit_price=Decimal("120.00"))
        self.hidden = Product.objects.create(
            name="Discontinued Pump",
            sku="PMP-OLD",
            unit_price=Decimal("30.00"),
            is_active=False,
        )
        self.url = "/api/products/"

    def test_anonymous_user_cannot_list_products(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_customer_sees_only_active_products(self):
        self.client.force_authenticate(self.customer)
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        skus = [row["sku"] for row in response.data["results"]]
        self.assertEqual(skus, ["ALT-90A"])

    def test_customer_cannot_create_product(self):
        self.client.force_authenticate(self.customer)
        response = self.client.post(
            self.url,
            {"name": "Radiator", "sku": "RAD-1", "unit_price": "80.00"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_can_create_product(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            self.url,
            {"name": "Radiator", "sku": "RAD-1", "unit_price": "80.00", "stock_quantity": 3},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Product.objects.filter(sku="RAD-1").exists())
