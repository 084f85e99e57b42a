# orders/tests/test_api.py

from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.services.lifecycle_controller import assign_partner, confirm_payment
from orders.tests.builders import SHIPPING_ADDRESS, make_order, make_product, make_user
from wallet.services.ledger import get_balance


class OrderApiPermissionTests(TestCase):
    """
    GUARANTEES:
    - customers see only their own orders, with friendly labels
    - partners see their assignments
    - lifecycle actions are admin-only
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin")
        self.customer = make_user("customer")
        self.partner = make_user("partner")
        self.order = make_order(customer=self.customer)
        self.other_order = make_order(customer=make_user("customer"))

    def test_anonymous_rejected(self):
        response = self.client.get("/api/orders/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_customer_lists_own_orders_only(self):
        self.client.force_authenticate(self.customer)
        response = self.client.get("/api/orders/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [row["id"] for row in response.data["results"]]
        self.assertEqual(ids, [str(self.order.id)])
        self.assertEqual(response.data["results"][0]["status_label"], "Awaiting payment")
        self.assertNotIn("status", response.data["results"][0])

    def test_customer_cannot_read_foreign_order(self):
        self.client.force_authenticate(self.customer)
        response = self.client.get(f"/api/orders/{self.other_order.id}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_partner_sees_assigned_orders(self):
        assign_partner(order_id=self.order.id, partner=self.partner, actor=self.admin)
        self.client.force_authenticate(self.partner)

        response = self.client.get("/api/orders/")
        ids = [row["id"] for row in response.data["results"]]
        self.assertEqual(ids, [str(self.order.id)])
        self.assertEqual(response.data["results"][0]["status"], Order.STATUS_PENDING)

    def test_admin_sees_all(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/orders/")
        self.assertEqual(response.data["count"], 2)

    def test_customer_cannot_cancel_or_delete(self):
        self.client.force_authenticate(self.customer)

        response = self.client.post(f"/api/orders/{self.order.id}/cancel/", {"reason": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.delete(f"/api/orders/{self.order.id}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_lookup_by_number(self):
        self.client.force_authenticate(self.customer)
        response = self.client.get(f"/api/orders/by-number/{self.order.order_number}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], str(self.order.id))

        response = self.client.get(f"/api/orders/by-number/{self.other_order.order_number}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class OrderApiFlowTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin")
        self.customer = make_user("customer")
        self.partner = make_user("partner")

    def test_customer_creates_order(self):
        part_a = make_product(price="10.00")
        part_b = make_product(price="20.00")
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            "/api/orders/",
            {
                "items": [
                    {"product_id": str(part_a.id), "quantity": 2, "unit_price": "10.00"},
                    {"product_id": str(part_b.id), "quantity": 2, "unit_price": "20.00"},
                ],
                "shipping_address": SHIPPING_ADDRESS,
                "total_amount": "1.00",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data["total_amount"]), Decimal("60.00"))
        self.assertEqual(len(response.data["items"]), 2)

    def test_create_rejects_empty_items(self):
        self.client.force_authenticate(self.customer)
        response = self.client.post(
            "/api/orders/",
            {"items": [], "shipping_address": SHIPPING_ADDRESS},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_unknown_product_is_404(self):
        self.client.force_authenticate(self.customer)
        response = self.client.post(
            "/api/orders/",
            {
                "items": [{"product_id": "00000000-0000-0000-0000-000000000001", "quantity": 1}],
                "shipping_address": SHIPPING_ADDRESS,
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertNotIn("error", response.data)

    def test_admin_full_lifecycle(self):
        order = make_order(customer=self.customer)
        confirm_payment(order=order)
        self.client.force_authenticate(self.admin)
        base = f"/api/orders/{order.id}"

        response = self.client.post(f"{base}/assign-partner/", {"partner_id": str(self.partner.id)}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["partner"], self.partner.id)

        response = self.client.post(f"{base}/status/", {"status": "processing"}, format="json")
        self.assertEqual(response.data["status"], Order.STATUS_PROCESSING)

        response = self.client.post(f"{base}/ship/", {"tracking_number": "API-1", "carrier": "DHL"}, format="json")
        self.assertEqual(response.data["status"], Order.STATUS_SHIPPED)
        self.assertEqual(response.data["logistics"]["tracking_number"], "API-1")

        response = self.client.post(
            f"{base}/tracking-updates/",
            {"status": "out_for_delivery", "location": "Depot 4"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post(f"{base}/complete/")
        self.assertEqual(response.data["status"], Order.STATUS_COMPLETED)
        self.assertEqual(get_balance(user=self.partner).balance, Decimal("6.00"))

    def test_backward_status_edit_is_conflict_with_admin_details(self):
        order = make_order(customer=self.customer)
        confirm_payment(order=order)
        self.client.force_authenticate(self.admin)

        response = self.client.post(f"/api/orders/{order.id}/status/", {"status": "pending"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "INVALID_ORDER_TRANSITION")
        self.assertEqual(response.data["error"]["entity_id"], str(order.id))

    def test_cancel_returns_success_envelope(self):
        order = make_order(customer=self.customer)
        assign_partner(order_id=order.id, partner=self.partner, actor=self.admin)
        confirm_payment(order=order)
        self.client.force_authenticate(self.admin)

        response = self.client.post(f"/api/orders/{order.id}/cancel/", {"reason": "Supplier delay"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["refund"]["amount"], "60.00")

        response = self.client.post(f"/api/orders/{order.id}/cancel/", {"reason": "again"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data["success"])

    def test_cancel_without_reason(self):
        order = make_order(customer=self.customer)
        self.client.force_authenticate(self.admin)

        response = self.client.post(f"/api/orders/{order.id}/cancel/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])

    def test_admin_delete(self):
        order = make_order(customer=self.customer)
        self.client.force_authenticate(self.admin)

        response = self.client.delete(f"/api/orders/{order.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["order_number"], order.order_number)

        response = self.client.get(f"/api/orders/{order.id}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_change_feed(self):
        order = make_order(customer=self.customer)
        self.client.force_authenticate(self.admin)

        response = self.client.get("/api/orders/changes/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["events"][0]["event_type"], "insert")
        self.assertEqual(response.data["events"][0]["order_id"], str(order.id))

        cursor = response.data["last_sequence"]
        confirm_payment(order=order)
        response = self.client.get(f"/api/orders/changes/?after={cursor}")
        self.assertEqual([e["event_type"] for e in response.data["events"]], ["update"])

        response = self.client.get("/api/orders/changes/?after=abc")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_change_feed_admin_only(self):
        self.client.force_authenticate(self.customer)
        response = self.client.get("/api/orders/changes/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
