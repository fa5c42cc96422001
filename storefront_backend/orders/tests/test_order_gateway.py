from unittest import mock

from django.db import IntegrityError
from django.test import TestCase

from orders.models import Order, OrderItem
from orders.services import order_gateway
from orders.services.order_gateway import (
    OrderNotFoundError,
    RelatedDataError,
    _is_foreign_key_violation,
)
from orders.tests.helpers import make_order


class _PgError(Exception):
    pgcode = "23503"


class OrderGatewayTests(TestCase):
    def setUp(self):
        self.order = make_order("DT-001")

    # =====================================================
    # READ
    # =====================================================

    def test_list_orders_is_newest_first(self):
        newer = make_order("DT-002")

        orders = order_gateway.list_orders()

        self.assertEqual([o.pk for o in orders], [newer.pk, self.order.pk])
        self.assertEqual(len(orders[1].items.all()), 2)

    def test_get_order_by_public_id(self):
        found = order_gateway.get_order_by_public_id(" DT-001 ")
        self.assertEqual(found.pk, self.order.pk)

        with self.assertRaises(OrderNotFoundError):
            order_gateway.get_order_by_public_id("DT-404")

    def test_get_missing_order(self):
        with self.assertRaises(OrderNotFoundError):
            order_gateway.get_order(self.order.pk + 1000)

    # =====================================================
    # UPDATE
    # =====================================================

    def test_update_status_persists(self):
        updated = order_gateway.update_order_status(self.order.pk, Order.STATUS_COMPLETED)

        self.assertEqual(updated.order_status, Order.STATUS_COMPLETED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.order_status, Order.STATUS_COMPLETED)

    def test_update_status_of_missing_order(self):
        with self.assertRaises(OrderNotFoundError):
            order_gateway.update_order_status(self.order.pk + 1000, Order.STATUS_COMPLETED)

    # =====================================================
    # DELETE
    # =====================================================

    def test_delete_removes_order_and_items(self):
        removed = order_gateway.delete_order(self.order.pk)

        self.assertEqual(removed, 2)
        self.assertFalse(Order.objects.filter(pk=self.order.pk).exists())
        self.assertFalse(OrderItem.objects.filter(order_id=self.order.pk).exists())

    def test_delete_missing_order(self):
        with self.assertRaises(OrderNotFoundError):
            order_gateway.delete_order(self.order.pk + 1000)

    def test_foreign_key_failure_has_operator_message(self):
        with mock.patch.object(
            OrderItem.objects,
            "filter",
            side_effect=IntegrityError("FOREIGN KEY constraint failed"),
        ):
            with self.assertRaisesMessage(
                RelatedDataError,
                "Cannot delete order: remove related data first.",
            ):
                order_gateway.delete_order(self.order.pk)

        self.assertTrue(Order.objects.filter(pk=self.order.pk).exists())

    def test_foreign_key_detection_by_error_code(self):
        exc = IntegrityError("update or delete violates constraint")
        exc.__cause__ = _PgError()
        self.assertTrue(_is_foreign_key_violation(exc))
        self.assertFalse(_is_foreign_key_violation(IntegrityError("NOT NULL constraint failed")))
