# payments/tests/test_api.py

from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from core.exceptions import ExternalGatewayError
from orders.models import Order
from orders.tests.builders import make_order, make_user
from payments.models import PaymentMethodConfig, PaymentRecord
from payments.services.router import PaymentRouter
from payments.tests.fakes import FakeGateway
from wallet.services.ledger import credit

FAKE_PAYMENTS = {
    "GATEWAY": {"BASE_URL": "", "SECRET_KEY": "", "TIMEOUT": 1, "MAX_RETRIES": 1},
    "GATEWAY_CLASS": "payments.tests.fakes.DefaultFakeGateway",
}


@override_settings(PAYMENTS=FAKE_PAYMENTS)
class PaymentSubmitApiTests(TestCase):
    def setUp(self):
        call_command("seed_payment_methods", stdout=StringIO())
        self.client = APIClient()
        self.customer = make_user("customer")
        self.order = make_order(customer=self.customer)
        self.client.force_authenticate(self.customer)

    def _submit(self, method, details=None):
        return self.client.post(
            "/api/payments/submit/",
            {"order_id": str(self.order.id), "method": method, "details": details or {}},
            format="json",
        )

    def test_methods_listing(self):
        PaymentMethodConfig.objects.filter(method_name="wallet").update(customer_access=False)

        response = self.client.get("/api/payments/methods/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        by_name = {row["method_name"]: row for row in response.data}
        self.assertNotIn("wallet", by_name)
        self.assertTrue(by_name["crypto"]["requires_confirmation"])
        self.assertFalse(by_name["card"]["requires_confirmation"])

    def test_card_payment(self):
        response = self._submit("card", {"card_token": "tok_visa", "last4": "4242"})

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["confirmed"])
        self.assertEqual(response.data["order_status"], Order.STATUS_CONFIRMED)
        self.assertEqual(response.data["order_status_label"], "Order confirmed")
        self.assertNotIn("card_token", response.data["payment"]["collected_data"])

    def test_manual_payment_awaits_confirmation(self):
        response = self._submit("bank_transfer", {"reference": "BT-7"})

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["awaiting_confirmation"])
        self.assertEqual(response.data["strategy"], "manual")

    def test_wallet_shortfall_is_conflict(self):
        response = self._submit("wallet")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {"detail": "Your wallet balance is too low for this payment."})

    def test_wallet_payment(self):
        credit(user=self.customer, amount="60.00")
        response = self._submit("wallet")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["confirmed"])

    def test_policy_rejection_is_forbidden(self):
        PaymentMethodConfig.objects.filter(method_name="card").update(customer_access=False)
        response = self._submit("card", {"card_token": "tok"})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertNotIn("error", response.data)

    def test_resubmit_while_capture_unresolved_is_conflict(self):
        with self.assertRaises(ExternalGatewayError):
            PaymentRouter(gateway=FakeGateway("error")).submit(
                order_id=self.order.id, payer=self.customer, method="card", payload={"card_token": "tok"}
            )

        response = self._submit("card", {"card_token": "tok_visa"})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(PaymentRecord.objects.filter(order=self.order).count(), 1)

    def test_invalid_details(self):
        response = self._submit("bank_transfer", {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(PAYMENTS=FAKE_PAYMENTS)
class PaymentAdminApiTests(TestCase):
    def setUp(self):
        call_command("seed_payment_methods", stdout=StringIO())
        self.client = APIClient()
        self.admin = make_user("admin")
        self.customer = make_user("customer")
        self.order = make_order(customer=self.customer)

        self.client.force_authenticate(self.customer)
        response = self.client.post(
            "/api/payments/submit/",
            {"order_id": str(self.order.id), "method": "crypto", "details": {"reference": "0xabc"}},
            format="json",
        )
        self.payment_id = response.data["payment"]["id"]

    def test_customer_cannot_verify(self):
        response = self.client.post(f"/api/payments/{self.payment_id}/verify/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.get("/api/payments/pending/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_queue_and_verify(self):
        self.client.force_authenticate(self.admin)

        response = self.client.get("/api/payments/pending/")
        self.assertEqual(response.data["count"], 1)

        response = self.client.post(f"/api/payments/{self.payment_id}/verify/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["changed"])
        self.assertEqual(response.data["order"]["status"], Order.STATUS_CONFIRMED)

        response = self.client.post(f"/api/payments/{self.payment_id}/verify/")
        self.assertFalse(response.data["changed"])

    def test_admin_reject(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(f"/api/payments/{self.payment_id}/reject/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            f"/api/payments/{self.payment_id}/reject/",
            {"reason": "Hash unknown"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["payment"]["status"], PaymentRecord.STATUS_REJECTED)
        self.assertEqual(response.data["order"]["status"], Order.STATUS_PENDING)

    def test_refresh_on_manual_payment_is_bad_request(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(f"/api/payments/{self.payment_id}/refresh/")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")
