# orders/tests/test_lifecycle.py

from decimal import Decimal

from django.test import TestCase, override_settings

from core.exceptions import ConflictError, NotFoundError, ValidationError
from notifications.models import Notification
from orders.models import LogisticsRecord, Order, OrderChangeEvent
from orders.services.lifecycle_controller import (
    assign_partner,
    complete_order,
    confirm_order,
    confirm_payment,
    mark_waiting_confirmation,
    return_to_pending,
    update_status,
)
from orders.services.order_lifecycle import (
    InvalidOrderTransitionError,
    OrderTerminalError,
    can_transition,
    is_terminal,
)
from orders.services.shipping import record_shipment
from orders.tests.builders import make_order, make_user
from wallet.models import WalletTransaction
from wallet.services.ledger import get_balance


class LifecycleRuleTests(TestCase):
    """
    GUARANTEES:
    - completed / cancelled are terminal
    - only the waiting_confirmation -> pending edge goes backwards
    """

    def test_terminal_states(self):
        self.assertTrue(is_terminal(Order.STATUS_COMPLETED))
        self.assertTrue(is_terminal(Order.STATUS_CANCELLED))
        self.assertFalse(is_terminal(Order.STATUS_SHIPPED))

    def test_no_edge_leaves_a_terminal_state(self):
        for target, _ in Order.STATUS_CHOICES:
            self.assertFalse(can_transition(from_status=Order.STATUS_CANCELLED, to_status=target))
            self.assertFalse(can_transition(from_status=Order.STATUS_COMPLETED, to_status=target))

    def test_single_backward_edge(self):
        self.assertTrue(
            can_transition(from_status=Order.STATUS_WAITING_CONFIRMATION, to_status=Order.STATUS_PENDING)
        )
        self.assertFalse(can_transition(from_status=Order.STATUS_SHIPPED, to_status=Order.STATUS_CONFIRMED))
        self.assertFalse(can_transition(from_status=Order.STATUS_CONFIRMED, to_status=Order.STATUS_PENDING))

    def test_every_live_state_can_cancel(self):
        for status in (
            Order.STATUS_PENDING,
            Order.STATUS_WAITING_CONFIRMATION,
            Order.STATUS_CONFIRMED,
            Order.STATUS_PROCESSING,
            Order.STATUS_SHIPPED,
            Order.STATUS_DELIVERED,
        ):
            self.assertTrue(can_transition(from_status=status, to_status=Order.STATUS_CANCELLED))


class PaymentHookTests(TestCase):
    def setUp(self):
        self.customer = make_user("customer")
        self.order = make_order(customer=self.customer)

    def test_manual_flow_waiting_then_confirmed(self):
        order = mark_waiting_confirmation(order=self.order, method="bank_transfer")
        self.assertEqual(order.status, Order.STATUS_WAITING_CONFIRMATION)
        self.assertEqual(order.payment_method, "bank_transfer")

        order = confirm_payment(order=order, method="bank_transfer")
        self.assertEqual(order.status, Order.STATUS_CONFIRMED)
        self.assertEqual(order.payment_status, Order.PAYMENT_PAID)
        self.assertIsNotNone(order.confirmed_at)
        self.assertEqual(order.version, 3)

    def test_every_transition_appends_one_update_event(self):
        mark_waiting_confirmation(order=self.order)
        confirm_payment(order=self.order)

        types = list(
            OrderChangeEvent.objects.filter(order_id=self.order.id).values_list("event_type", flat=True)
        )
        self.assertEqual(types, ["insert", "update", "update"])

    def test_return_to_pending_records_reason(self):
        mark_waiting_confirmation(order=self.order)
        order = return_to_pending(order=self.order, reason="Transfer not received")

        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.payment_status, Order.PAYMENT_FAILED)
        self.assertEqual(order.payment_rejection_reason, "Transfer not received")

    def test_confirm_payment_twice_conflicts(self):
        confirm_payment(order=self.order)
        with self.assertRaises(InvalidOrderTransitionError):
            confirm_payment(order=self.order)

    def test_confirm_payment_notifies_assigned_partner(self):
        partner = make_user("partner")
        admin = make_user("admin")
        assign_partner(order_id=self.order.id, partner=partner, actor=admin)

        confirm_payment(order=self.order)

        self.assertTrue(
            Notification.objects.filter(
                recipient=partner,
                event_type=Notification.EVENT_ORDER_CONFIRMED,
                order=self.order,
            ).exists()
        )


class AdminTransitionTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin")
        self.customer = make_user("customer")
        self.partner = make_user("partner")
        self.order = make_order(customer=self.customer)

    def _paid(self):
        return confirm_payment(order=self.order)

    def test_confirm_order_requires_waiting_confirmation(self):
        with self.assertRaises(InvalidOrderTransitionError):
            confirm_order(order_id=self.order.id, actor=self.admin)

        mark_waiting_confirmation(order=self.order)
        order = confirm_order(order_id=self.order.id, actor=self.admin)
        self.assertEqual(order.status, Order.STATUS_CONFIRMED)

    def test_unknown_order_is_not_found(self):
        with self.assertRaises(NotFoundError):
            confirm_order(order_id="00000000-0000-0000-0000-000000000000", actor=self.admin)

    def test_update_status_forward_only(self):
        self._paid()
        order = update_status(order_id=self.order.id, target_status=Order.STATUS_PROCESSING, actor=self.admin)
        self.assertEqual(order.status, Order.STATUS_PROCESSING)

        with self.assertRaises(InvalidOrderTransitionError):
            update_status(order_id=self.order.id, target_status=Order.STATUS_CONFIRMED, actor=self.admin)

    def test_update_status_cannot_skip_shipping(self):
        self._paid()
        with self.assertRaises(InvalidOrderTransitionError):
            update_status(order_id=self.order.id, target_status=Order.STATUS_DELIVERED, actor=self.admin)

    def test_update_status_routes_shipped_and_cancelled_elsewhere(self):
        self._paid()
        for target in (Order.STATUS_SHIPPED, Order.STATUS_CANCELLED):
            with self.assertRaises(InvalidOrderTransitionError):
                update_status(order_id=self.order.id, target_status=target, actor=self.admin)

    def test_update_status_unknown_target(self):
        with self.assertRaises(InvalidOrderTransitionError):
            update_status(order_id=self.order.id, target_status="teleported", actor=self.admin)

    def test_assign_partner_is_idempotent(self):
        first = assign_partner(order_id=self.order.id, partner=self.partner, actor=self.admin)
        second = assign_partner(order_id=self.order.id, partner=self.partner, actor=self.admin)

        self.assertEqual(first.version, second.version)
        self.assertEqual(
            Notification.objects.filter(recipient=self.partner, event_type=Notification.EVENT_ORDER_ASSIGNED).count(),
            1,
        )

    def test_assign_partner_overwrites(self):
        other = make_user("partner")
        assign_partner(order_id=self.order.id, partner=self.partner, actor=self.admin)
        order = assign_partner(order_id=self.order.id, partner=other, actor=self.admin)
        self.assertEqual(order.partner_id, other.id)

    def test_assign_rejects_non_partner_and_inactive(self):
        with self.assertRaises(ValidationError):
            assign_partner(order_id=self.order.id, partner=self.customer, actor=self.admin)

        inactive = make_user("partner", is_active=False)
        with self.assertRaises(ValidationError):
            assign_partner(order_id=self.order.id, partner=inactive, actor=self.admin)

    def test_complete_requires_shipment(self):
        self._paid()
        with self.assertRaises(InvalidOrderTransitionError):
            complete_order(order_id=self.order.id, actor=self.admin)

    @override_settings(PARTNER_COMMISSION_RATE=Decimal("10"))
    def test_complete_pays_partner_commission_once(self):
        assign_partner(order_id=self.order.id, partner=self.partner, actor=self.admin)
        self._paid()
        record_shipment(order_id=self.order.id, tracking_number="TRK-1", carrier="DHL", actor=self.admin)

        order = complete_order(order_id=self.order.id, actor=self.admin)

        self.assertEqual(order.status, Order.STATUS_COMPLETED)
        self.assertEqual(order.partner_payout_status, Order.PAYOUT_COMPLETED)
        self.assertIsNotNone(order.delivered_at)
        self.assertEqual(get_balance(user=self.partner).balance, Decimal("6.00"))

        earning = WalletTransaction.objects.get(user=self.partner)
        self.assertEqual(earning.tx_type, WalletTransaction.TYPE_EARNING)
        self.assertEqual(earning.idempotency_key, f"earning:{order.id}")

        logistics = LogisticsRecord.objects.get(order=order)
        self.assertEqual(logistics.current_status, LogisticsRecord.STATUS_DELIVERED)
        self.assertIsNotNone(logistics.actual_delivery)

        with self.assertRaises(OrderTerminalError):
            complete_order(order_id=order.id, actor=self.admin)
        self.assertEqual(WalletTransaction.objects.filter(user=self.partner).count(), 1)

    def test_partner_commission_override(self):
        partner = make_user("partner", commission_rate=Decimal("25"))
        assign_partner(order_id=self.order.id, partner=partner, actor=self.admin)
        self._paid()
        record_shipment(order_id=self.order.id, tracking_number="TRK-2", carrier="UPS", actor=self.admin)

        complete_order(order_id=self.order.id, actor=self.admin)
        self.assertEqual(get_balance(user=partner).balance, Decimal("15.00"))

    def test_unpaid_completion_pays_no_commission(self):
        assign_partner(order_id=self.order.id, partner=self.partner, actor=self.admin)
        update_status(order_id=self.order.id, target_status=Order.STATUS_CONFIRMED, actor=self.admin)
        record_shipment(order_id=self.order.id, tracking_number="TRK-3", carrier="UPS", actor=self.admin)

        order = complete_order(order_id=self.order.id, actor=self.admin)
        self.assertEqual(order.partner_payout_status, Order.PAYOUT_NONE)
        self.assertFalse(WalletTransaction.objects.filter(user=self.partner).exists())

    def test_update_status_to_completed_after_delivery(self):
        self._paid()
        record_shipment(order_id=self.order.id, tracking_number="TRK-4", carrier="UPS", actor=self.admin)
        update_status(order_id=self.order.id, target_status=Order.STATUS_DELIVERED, actor=self.admin)

        order = update_status(order_id=self.order.id, target_status=Order.STATUS_COMPLETED, actor=self.admin)
        self.assertEqual(order.status, Order.STATUS_COMPLETED)

    def test_terminal_order_rejects_every_edit(self):
        self._paid()
        record_shipment(order_id=self.order.id, tracking_number="TRK-5", carrier="UPS", actor=self.admin)
        complete_order(order_id=self.order.id, actor=self.admin)

        with self.assertRaises(ConflictError):
            update_status(order_id=self.order.id, target_status=Order.STATUS_PROCESSING, actor=self.admin)
        with self.assertRaises(ConflictError):
            assign_partner(order_id=self.order.id, partner=self.partner, actor=self.admin)
