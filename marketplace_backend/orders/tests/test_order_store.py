# orders/tests/test_order_store.py

import re
import uuid
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError
from django.test import TestCase, override_settings

from core.exceptions import ConflictError, NotFoundError, ValidationError
from orders.models import Order, OrderChangeEvent, OrderItem
from orders.services import order_store
from orders.services.order_store import (
    create_order,
    generate_order_number,
    get_order,
    get_order_by_number,
    list_for_customer,
    list_for_partner,
)
from orders.tests.builders import SHIPPING_ADDRESS, make_order, make_product, make_user


class OrderNumberTests(TestCase):
    def test_format_is_prefix_millis_suffix(self):
        number = generate_order_number()
        self.assertRegex(number, r"^ORD-\d{13}-[0-9A-Z]{9}$")

    @override_settings(ORDER_NUMBER_PREFIX="AP")
    def test_prefix_is_configurable(self):
        self.assertTrue(generate_order_number().startswith("AP-"))

    def test_numbers_do_not_repeat(self):
        numbers = {generate_order_number() for _ in range(200)}
        self.assertEqual(len(numbers), 200)


class CreateOrderTests(TestCase):
    """
    GUARANTEES:
    - total is computed server-side from quantity x unit_price
    - order + items + insert event are written together
    - invalid input writes nothing
    """

    def setUp(self):
        self.customer = make_user("customer")
        self.part_a = make_product(price="10.00", stock=5)
        self.part_b = make_product(price="20.00", stock=5)

    def test_two_lines_total_sixty(self):
        order = create_order(
            customer=self.customer,
            items=[
                {"product_id": self.part_a.id, "quantity": 2, "unit_price": "10.00"},
                {"product_id": self.part_b.id, "quantity": 2, "unit_price": "20.00"},
            ],
            shipping_address=SHIPPING_ADDRESS,
        )

        self.assertEqual(order.total_amount, Decimal("60.00"))
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.payment_status, Order.PAYMENT_PENDING)
        self.assertEqual(order.version, 1)
        self.assertEqual(OrderItem.objects.filter(order=order).count(), 2)

        subtotals = sorted(item.subtotal for item in order.items.all())
        self.assertEqual(subtotals, [Decimal("20.00"), Decimal("40.00")])

        event = OrderChangeEvent.objects.get(order_id=order.id)
        self.assertEqual(event.event_type, OrderChangeEvent.TYPE_INSERT)
        self.assertEqual(event.snapshot["total_amount"], "60.00")

    def test_unit_price_defaults_to_catalog_price(self):
        order = create_order(
            customer=self.customer,
            items=[{"product_id": self.part_b.id, "quantity": 3}],
            shipping_address=SHIPPING_ADDRESS,
        )
        self.assertEqual(order.total_amount, Decimal("60.00"))

    def test_item_snapshots_catalog_name_and_sku(self):
        order = make_order(customer=self.customer, lines=[(self.part_a, 1, None)])
        item = order.items.get()

        self.assertEqual(item.sku, self.part_a.sku)
        self.assertEqual(item.product_name, self.part_a.name)

    def test_empty_items_rejected(self):
        with self.assertRaises(ValidationError):
            create_order(customer=self.customer, items=[], shipping_address=SHIPPING_ADDRESS)
        self.assertEqual(Order.objects.count(), 0)

    def test_missing_shipping_address_rejected(self):
        with self.assertRaises(ValidationError):
            create_order(
                customer=self.customer,
                items=[{"product_id": self.part_a.id, "quantity": 1}],
                shipping_address={},
            )

    def test_zero_quantity_rejected(self):
        with self.assertRaises(ValidationError):
            create_order(
                customer=self.customer,
                items=[{"product_id": self.part_a.id, "quantity": 0}],
                shipping_address=SHIPPING_ADDRESS,
            )

    def test_fractional_quantity_rejected(self):
        with self.assertRaises(ValidationError):
            create_order(
                customer=self.customer,
                items=[{"product_id": self.part_a.id, "quantity": 1.5}],
                shipping_address=SHIPPING_ADDRESS,
            )

    def test_negative_price_rejected(self):
        with self.assertRaises(ValidationError):
            create_order(
                customer=self.customer,
                items=[{"product_id": self.part_a.id, "quantity": 1, "unit_price": "-5.00"}],
                shipping_address=SHIPPING_ADDRESS,
            )
        self.assertEqual(Order.objects.count(), 0)

    def test_quantity_above_stock_rejected(self):
        with self.assertRaises(ValidationError):
            create_order(
                customer=self.customer,
                items=[{"product_id": self.part_a.id, "quantity": 6}],
                shipping_address=SHIPPING_ADDRESS,
            )

    def test_unknown_product_is_not_found(self):
        with self.assertRaises(NotFoundError):
            create_order(
                customer=self.customer,
                items=[{"product_id": uuid.uuid4(), "quantity": 1}],
                shipping_address=SHIPPING_ADDRESS,
            )

    def test_inactive_product_rejected(self):
        hidden = make_product(is_active=False)
        with self.assertRaises(ValidationError):
            create_order(
                customer=self.customer,
                items=[{"product_id": hidden.id, "quantity": 1}],
                shipping_address=SHIPPING_ADDRESS,
            )

    def test_failed_item_insert_leaves_no_order(self):
        with mock.patch.object(OrderItem.objects, "create", side_effect=RuntimeError("disk full")):
            with self.assertRaises(RuntimeError):
                make_order(customer=self.customer, lines=[(self.part_a, 1, None)])

        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderChangeEvent.objects.count(), 0)

    def test_order_number_collision_is_conflict(self):
        existing = make_order(customer=self.customer, lines=[(self.part_a, 1, None)])

        with mock.patch.object(order_store, "generate_order_number", return_value=existing.order_number):
            with self.assertRaises(ConflictError):
                make_order(customer=self.customer, lines=[(self.part_a, 1, None)])

        self.assertEqual(Order.objects.count(), 1)

    def test_unrelated_integrity_error_propagates(self):
        with mock.patch.object(OrderItem.objects, "create", side_effect=IntegrityError("boom")):
            with self.assertRaises(IntegrityError):
                make_order(customer=self.customer, lines=[(self.part_a, 1, None)])


class OrderReadTests(TestCase):
    def setUp(self):
        self.customer = make_user("customer")
        self.partner = make_user("partner")
        self.order = make_order(customer=self.customer, partner=self.partner)

    def test_get_order(self):
        self.assertEqual(get_order(order_id=self.order.id).order_number, self.order.order_number)

    def test_get_order_unknown_and_malformed_ids(self):
        with self.assertRaises(NotFoundError):
            get_order(order_id=uuid.uuid4())
        with self.assertRaises(NotFoundError):
            get_order(order_id="nope")

    def test_get_order_by_number(self):
        found = get_order_by_number(order_number=f"  {self.order.order_number} ")
        self.assertEqual(found.id, self.order.id)

        with self.assertRaises(NotFoundError):
            get_order_by_number(order_number="ORD-0-MISSING")

    def test_lists_are_scoped(self):
        other = make_user("customer")
        make_order(customer=other)

        self.assertEqual([o.id for o in list_for_customer(customer=self.customer)], [self.order.id])
        self.assertEqual([o.id for o in list_for_partner(partner=self.partner)], [self.order.id])

    def test_order_number_shape_is_stable(self):
        self.assertTrue(re.match(r"^ORD-\d+-[0-9A-Z]{9}$", self.order.order_number))
