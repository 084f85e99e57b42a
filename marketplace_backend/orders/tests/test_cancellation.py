# orders/tests/test_cancellation.py

from decimal import Decimal
from unittest import mock

from django.test import TestCase

from core.exceptions import ConflictError, ValidationError
from notifications.models import Notification
from orders.models import Order
from orders.services import cancellation
from orders.services.cancellation import cancel_order
from orders.services.lifecycle_controller import assign_partner, confirm_payment
from orders.tests.builders import make_order, make_user
from wallet.models import WalletTransaction
from wallet.services.ledger import audit_balance, get_balance


class CancelOrderTests(TestCase):
    """
    GUARANTEES:
    - a paid order with a partner refunds the partner wallet in full
    - cancel + refund commit together or not at all
    - cancelling a cancelled order changes nothing
    """

    def setUp(self):
        self.admin = make_user("admin")
        self.customer = make_user("customer")
        self.partner = make_user("partner")
        self.order = make_order(customer=self.customer)

    def _paid_and_assigned(self):
        assign_partner(order_id=self.order.id, partner=self.partner, actor=self.admin)
        return confirm_payment(order=self.order)

    def test_cancel_paid_order_refunds_partner(self):
        self._paid_and_assigned()

        result = cancel_order(order_id=self.order.id, reason="Customer changed mind", actor=self.admin)

        self.assertTrue(result.success)
        self.assertTrue(result.refunded)
        self.assertEqual(result.order.status, Order.STATUS_CANCELLED)
        self.assertEqual(result.order.payment_status, Order.PAYMENT_REFUNDED)
        self.assertEqual(result.order.cancellation_reason, "Customer changed mind")
        self.assertIsNotNone(result.order.cancelled_at)

        self.assertEqual(get_balance(user=self.partner).balance, Decimal("60.00"))
        refund = WalletTransaction.objects.get(user=self.partner)
        self.assertEqual(refund.tx_type, WalletTransaction.TYPE_REFUND)
        self.assertEqual(refund.amount, Decimal("60.00"))
        self.assertEqual(refund.related_order_id, self.order.id)
        self.assertTrue(audit_balance(user=self.partner).consistent)

    def test_cancel_twice_is_conflict_without_second_refund(self):
        self._paid_and_assigned()
        cancel_order(order_id=self.order.id, reason="Out of stock", actor=self.admin)

        with self.assertRaises(ConflictError):
            cancel_order(order_id=self.order.id, reason="Again", actor=self.admin)

        self.assertEqual(get_balance(user=self.partner).balance, Decimal("60.00"))
        self.assertEqual(WalletTransaction.objects.filter(user=self.partner).count(), 1)

    def test_reason_required(self):
        with self.assertRaises(ValidationError):
            cancel_order(order_id=self.order.id, reason="   ", actor=self.admin)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)

    def test_unpaid_order_cancels_without_refund(self):
        assign_partner(order_id=self.order.id, partner=self.partner, actor=self.admin)

        result = cancel_order(order_id=self.order.id, reason="Abandoned", actor=self.admin)

        self.assertFalse(result.refunded)
        self.assertEqual(result.order.payment_status, Order.PAYMENT_PENDING)
        self.assertFalse(WalletTransaction.objects.exists())

    def test_paid_order_without_partner_keeps_paid_status(self):
        confirm_payment(order=self.order)

        result = cancel_order(order_id=self.order.id, reason="Fraud check", actor=self.admin)

        self.assertFalse(result.refunded)
        self.assertEqual(result.order.payment_status, Order.PAYMENT_PAID)

    def test_failed_refund_rolls_back_cancel(self):
        self._paid_and_assigned()

        with mock.patch.object(cancellation, "credit", side_effect=ConflictError("ledger busy")):
            with self.assertRaises(ConflictError):
                cancel_order(order_id=self.order.id, reason="Damaged", actor=self.admin)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CONFIRMED)
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)

    def test_notifies_customer_and_partner(self):
        self._paid_and_assigned()
        cancel_order(order_id=self.order.id, reason="Damaged", actor=self.admin)

        recipients = set(
            Notification.objects.filter(event_type=Notification.EVENT_ORDER_CANCELLED).values_list(
                "recipient_id", flat=True
            )
        )
        self.assertEqual(recipients, {self.customer.id, self.partner.id})
        self.assertTrue(
            Notification.objects.filter(recipient=self.partner, event_type=Notification.EVENT_ORDER_REFUNDED).exists()
        )
