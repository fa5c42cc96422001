from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings

from orders.models import Order
from orders.tests.helpers import make_order

NOT_CONFIGURED = {
    "RESEND": {"API_KEY": ""},
    "ADMIN_EMAIL": "",
    "FROM": "",
    "REPLY_TO": "",
    "CUSTOMER_CONFIRMATION_ENABLED": False,
}


class OrdersConsoleCommandTests(TestCase):
    def setUp(self):
        self.order = make_order(
            "DT-001",
            receiver_name="Bina Ali",
            receiver_phone="0311-7654321",
            receiver_address="9 Canal View",
        )
        make_order("DT-002", customer_name="Omar Farooq", order_status=Order.STATUS_COMPLETED)

    def run_console(self, *args) -> str:
        out = StringIO()
        call_command("orders_console", *args, stdout=out)
        return out.getvalue()

    def test_list_with_search(self):
        output = self.run_console("list", "--q", "bina")

        self.assertIn("DT-001", output)
        self.assertNotIn("DT-002", output)
        self.assertIn("1 of 2 orders", output)

    def test_show(self):
        output = self.run_console("show", str(self.order.pk))

        self.assertIn("Order DT-001", output)
        self.assertIn("Embroidered Kurta x2 @ 1,500 = 3,000", output)
        self.assertIn("Deliver:  Bina Ali", output)

    def test_show_unknown_order(self):
        with self.assertRaises(CommandError):
            self.run_console("show", str(self.order.pk + 1000))

    def test_status(self):
        output = self.run_console("status", str(self.order.pk), "cancelled")

        self.assertIn("Order status updated to: cancelled", output)
        self.order.refresh_from_db()
        self.assertEqual(self.order.order_status, Order.STATUS_CANCELLED)

    def test_delete_with_yes(self):
        output = self.run_console("delete", str(self.order.pk), "--yes")

        self.assertIn("Order DT-001 deleted successfully", output)
        self.assertFalse(Order.objects.filter(pk=self.order.pk).exists())

    @mock.patch("builtins.input", return_value="no")
    def test_delete_declined(self, _input):
        output = self.run_console("delete", str(self.order.pk))

        self.assertIn("Are you sure you want to delete order DT-001?", output)
        self.assertIn("Deletion cancelled", output)
        self.assertTrue(Order.objects.filter(pk=self.order.pk).exists())

    def test_receipt_none(self):
        self.assertIn("No receipt uploaded", self.run_console("receipt", str(self.order.pk)))

    def test_stats(self):
        output = self.run_console("stats")

        self.assertIn("total", output)
        self.assertIn("completed   1", output)


class SendTestEmailCommandTests(TestCase):
    @override_settings(ORDER_NOTIFICATIONS=NOT_CONFIGURED)
    def test_fails_without_provider(self):
        with self.assertRaisesMessage(CommandError, "Email service not configured"):
            call_command("send_test_email", stdout=StringIO())
