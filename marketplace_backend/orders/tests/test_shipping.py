# orders/tests/test_shipping.py

from datetime import date

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.exceptions import NotFoundError, ValidationError
from notifications.models import Notification
from orders.models import LogisticsRecord, Order, TrackingUpdate
from orders.services.lifecycle_controller import confirm_payment
from orders.services.order_lifecycle import InvalidOrderTransitionError
from orders.services.shipping import add_tracking_update, public_tracking_lookup, record_shipment
from orders.tests.builders import make_order, make_user


class RecordShipmentTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin")
        self.customer = make_user("customer")
        self.order = make_order(customer=self.customer)

    def test_ship_confirmed_order(self):
        confirm_payment(order=self.order)

        order = record_shipment(
            order_id=self.order.id,
            tracking_number=" 1Z999 ",
            carrier="UPS",
            estimated_delivery=date(2030, 1, 5),
            actor=self.admin,
        )

        self.assertEqual(order.status, Order.STATUS_SHIPPED)
        self.assertIsNotNone(order.shipped_at)

        logistics = LogisticsRecord.objects.get(order=order)
        self.assertEqual(logistics.tracking_number, "1Z999")
        self.assertEqual(logistics.provider, "UPS")
        self.assertEqual(logistics.current_status, LogisticsRecord.STATUS_SHIPPED)
        self.assertEqual(logistics.updates.count(), 1)
        self.assertTrue(
            Notification.objects.filter(recipient=self.customer, event_type=Notification.EVENT_ORDER_SHIPPED).exists()
        )

    def test_tracking_number_and_carrier_required(self):
        confirm_payment(order=self.order)
        with self.assertRaises(ValidationError):
            record_shipment(order_id=self.order.id, tracking_number="", carrier="UPS", actor=self.admin)
        with self.assertRaises(ValidationError):
            record_shipment(order_id=self.order.id, tracking_number="1Z", carrier=" ", actor=self.admin)

    def test_cannot_ship_unpaid_order(self):
        with self.assertRaises(InvalidOrderTransitionError):
            record_shipment(order_id=self.order.id, tracking_number="1Z", carrier="UPS", actor=self.admin)


class TrackingUpdateTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin")
        self.order = make_order(customer=make_user("customer"))
        confirm_payment(order=self.order)

    def _ship(self):
        record_shipment(order_id=self.order.id, tracking_number="TRK-42", carrier="DHL", actor=self.admin)

    def test_exception_status_is_informational(self):
        self._ship()

        update = add_tracking_update(
            order_id=self.order.id,
            status=LogisticsRecord.STATUS_CUSTOMS_HOLD,
            location="Rotterdam",
            actor=self.admin,
        )

        self.assertEqual(update.status, LogisticsRecord.STATUS_CUSTOMS_HOLD)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_SHIPPED)
        self.assertTrue(LogisticsRecord.objects.get(order=self.order).is_exception)

    def test_requires_shipment(self):
        with self.assertRaises(InvalidOrderTransitionError):
            add_tracking_update(order_id=self.order.id, status=LogisticsRecord.STATUS_IN_TRANSIT, actor=self.admin)

    def test_rejects_non_flight_status(self):
        self._ship()
        with self.assertRaises(ValidationError):
            add_tracking_update(order_id=self.order.id, status=LogisticsRecord.STATUS_DELIVERED, actor=self.admin)

    def test_updates_are_append_only(self):
        self._ship()
        update = TrackingUpdate.objects.get(logistics__order=self.order)
        update.description = "edited"
        with self.assertRaises(RuntimeError):
            update.save()


class PublicTrackingTests(TestCase):
    """
    GUARANTEES:
    - lookup by tracking number needs no authentication
    - the response carries the timeline but no customer data or amounts
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin")
        self.order = make_order(customer=make_user("customer"))
        confirm_payment(order=self.order)
        record_shipment(order_id=self.order.id, tracking_number="PUB-7", carrier="FedEx", actor=self.admin)
        add_tracking_update(
            order_id=self.order.id,
            status=LogisticsRecord.STATUS_IN_TRANSIT,
            location="Memphis",
            actor=self.admin,
        )

    def test_service_lookup(self):
        data = public_tracking_lookup(tracking_number="PUB-7")

        self.assertEqual(data["carrier"], "FedEx")
        self.assertEqual(data["status"], LogisticsRecord.STATUS_IN_TRANSIT)
        self.assertEqual(data["order_status_label"], "On its way")
        self.assertEqual([row["status"] for row in data["timeline"]], ["shipped", "in_transit"])

    def test_unknown_tracking_number(self):
        with self.assertRaises(NotFoundError):
            public_tracking_lookup(tracking_number="NOPE")

    def test_anonymous_endpoint(self):
        response = self.client.get("/api/public/tracking/PUB-7/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["tracking_number"], "PUB-7")
        self.assertNotIn("customer", response.data)
        self.assertNotIn("total_amount", response.data)
        self.assertEqual(response.data["timeline"][-1]["location"], "Memphis")

    def test_anonymous_endpoint_unknown_number(self):
        response = self.client.get("/api/public/tracking/NOPE/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn("detail", response.data)
