# wallet/tests/test_api.py

from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from orders.tests.builders import make_user
from wallet.models import WalletFundingRequest, WalletTransaction
from wallet.services.ledger import credit, get_balance


class WalletApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin")
        self.customer = make_user("customer")
        credit(user=self.customer, amount="75.50")
        self.client.force_authenticate(self.customer)

    def test_balance_as_strings(self):
        response = self.client.get("/api/wallet/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["balance"], "75.50")
        self.assertEqual(response.data["pending_balance"], "0.00")
        self.assertEqual(response.data["currency"], "USD")
        self.assertEqual(response.data["totals"]["deposit"], "75.50")

    def test_anonymous_rejected(self):
        self.client.force_authenticate(None)
        response = self.client.get("/api/wallet/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_transactions_list_is_own_only(self):
        credit(user=self.admin, amount="5.00")

        response = self.client.get("/api/wallet/transactions/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["tx_type"], WalletTransaction.TYPE_DEPOSIT)

    def test_audit_own_wallet(self):
        response = self.client.get("/api/wallet/audit/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["consistent"])
        self.assertEqual(response.data["replayed"], "75.50")

    def test_customer_cannot_audit_someone_else(self):
        response = self.client.get(f"/api/wallet/audit/?user_id={self.admin.pk}")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_audits_any_wallet(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get(f"/api/wallet/audit/?user_id={self.customer.pk}")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["user_id"], str(self.customer.pk))
        self.assertEqual(response.data["recorded"], "75.50")


class FundingApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin")
        self.customer = make_user("customer")

    def _deposit(self):
        self.client.force_authenticate(self.customer)
        response = self.client.post(
            "/api/wallet/deposits/",
            {"amount": "120.00", "crypto_type": "ETH", "proof": "0xfeed"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data["id"]

    def test_deposit_then_admin_approval(self):
        request_id = self._deposit()

        response = self.client.post(f"/api/wallet/funding-requests/{request_id}/approve/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.post(f"/api/wallet/funding-requests/{request_id}/approve/", {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], WalletFundingRequest.STATUS_APPROVED)
        self.assertEqual(get_balance(user=self.customer).balance, Decimal("120.00"))

    def test_reject_requires_note(self):
        request_id = self._deposit()
        self.client.force_authenticate(self.admin)

        response = self.client.post(f"/api/wallet/funding-requests/{request_id}/reject/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            f"/api/wallet/funding-requests/{request_id}/reject/",
            {"note": "Proof does not match"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["review_note"], "Proof does not match")

    def test_withdrawal_over_balance_is_conflict(self):
        self.client.force_authenticate(self.customer)
        response = self.client.post(
            "/api/wallet/withdrawals/",
            {"amount": "10.00", "crypto_type": "USDT_TRX", "wallet_address": "TXYZ"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn("detail", response.data)

    def test_withdrawal_created(self):
        credit(user=self.customer, amount="30.00")
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            "/api/wallet/withdrawals/",
            {"amount": "10.00", "crypto_type": "USDT_TRX", "wallet_address": "TXYZ"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["kind"], WalletFundingRequest.KIND_WITHDRAWAL)
        self.assertEqual(get_balance(user=self.customer).balance, Decimal("20.00"))

    def test_requests_listed_per_user(self):
        self._deposit()
        other = make_user("customer")
        self.client.force_authenticate(other)

        response = self.client.get("/api/wallet/funding-requests/")
        self.assertEqual(response.data["count"], 0)

        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/wallet/funding-requests/")
        self.assertEqual(response.data["count"], 1)
