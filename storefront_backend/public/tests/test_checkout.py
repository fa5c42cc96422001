"""
PUBLIC CHECKOUT TESTS

Run with:
    python manage.py test public -v 2

Checkout touches:
Public -> Orders (assembly + gateway) -> Notifications

Email delivery is patched at the provider client; nothing leaves the process.
"""

from __future__ import annotations

import base64
import copy
import os
import shutil
import tempfile
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.tests.helpers import CART, CUSTOMER, make_order

CHECKOUT_URL = "/api/public/checkout/"

NOTIFICATIONS = {
    "RESEND": {"API_KEY": "re_test"},
    "ADMIN_EMAIL": "owner@darzi.example",
    "FROM": "Darzi Threads <orders@darzi.example>",
    "REPLY_TO": "",
    "CUSTOMER_CONFIRMATION_ENABLED": False,
}

NOT_CONFIGURED = {**NOTIFICATIONS, "RESEND": {"API_KEY": ""}}

PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake receipt").decode("ascii")


@override_settings(ORDER_NOTIFICATIONS=NOTIFICATIONS)
class PublicCheckoutTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.payload = {
            "customer": dict(CUSTOMER),
            "cart": copy.deepcopy(CART),
            "payment_option": "deposit",
        }

        patcher = mock.patch(
            "orders.notifications.dispatcher.ResendClient.send",
            return_value="email_1",
        )
        self.send = patcher.start()
        self.addCleanup(patcher.stop)

    def post(self, payload=None):
        return self.client.post(CHECKOUT_URL, payload or self.payload, format="json")

    # =====================================================
    # SUCCESS
    # =====================================================

    def test_checkout_creates_order_and_notifies_admin(self):
        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertTrue(res.data["success"])
        self.assertEqual(res.data["total_amount"], "3500.00")
        self.assertEqual(res.data["deposit_amount"], "350.00")
        self.assertEqual(res.data["remaining_balance"], "3150.00")
        self.assertIsNone(res.data["receipt_url"])

        order = Order.objects.get(pk=res.data["order_db_id"])
        self.assertEqual(order.order_id, res.data["order_id"])
        self.assertEqual(order.items.count(), 2)
        self.assertEqual(order.order_status, Order.STATUS_PROCESSING)

        notifications = res.data["notifications"]
        self.assertEqual(
            notifications["admin_email"],
            {"success": True, "message": "Admin notification email sent successfully"},
        )
        self.assertEqual(
            notifications["customer_email"]["message"],
            "Customer confirmation email skipped (disabled)",
        )
        self.assertEqual(self.send.call_args.kwargs["to"], ["owner@darzi.example"])
        self.assertIn(order.order_id, self.send.call_args.kwargs["subject"])

    def test_client_order_id_is_kept(self):
        self.payload["order_id"] = "DT-20261019-ABCD1234"

        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["order_id"], "DT-20261019-ABCD1234")

    def test_full_payment_has_no_deposit(self):
        self.payload["payment_option"] = "full"

        res = self.post()

        self.assertIsNone(res.data["deposit_amount"])
        self.assertIsNone(res.data["remaining_balance"])

    @override_settings(ORDER_NOTIFICATIONS=NOT_CONFIGURED)
    def test_unconfigured_email_does_not_fail_checkout(self):
        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(
            res.data["notifications"]["admin_email"],
            {
                "success": False,
                "message": "Email service not configured",
                "error": "RESEND_API_KEY not found",
            },
        )
        self.send.assert_not_called()

    def test_provider_crash_does_not_fail_checkout(self):
        self.send.side_effect = RuntimeError("socket closed")

        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["notifications"]["admin_email"]["message"], "Admin email failed")
        self.assertEqual(Order.objects.count(), 1)

    # =====================================================
    # VALIDATION
    # =====================================================

    def test_empty_cart(self):
        self.payload["cart"] = []

        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["detail"], "Cart is empty")
        self.assertEqual(Order.objects.count(), 0)
        self.send.assert_not_called()

    def test_missing_customer_email(self):
        del self.payload["customer"]["email"]

        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 0)

    def test_total_below_subtotal(self):
        self.payload["total"] = "10.00"

        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 0)

    def test_partial_receiver(self):
        self.payload["receiver"] = {"name": "Bina Ali"}

        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_over_long_fields_are_rejected(self):
        cases = [
            ("customer", "name", "n" * 121),
            ("customer", "phone", "1" * 41),
            ("customer", "zip_code", "5" * 21),
        ]
        for section, field, value in cases:
            with self.subTest(field=field):
                payload = copy.deepcopy(self.payload)
                payload[section][field] = value

                res = self.post(payload)

                self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertIn(section, res.data)

        for field, value in (("selected_color", "c" * 65), ("image_url", "https://cdn.example.com/" + "x" * 600)):
            with self.subTest(field=field):
                payload = copy.deepcopy(self.payload)
                payload["cart"][0][field] = value

                res = self.post(payload)

                self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertIn("cart", res.data)

        self.assertEqual(Order.objects.count(), 0)
        self.send.assert_not_called()

    def test_over_long_image_url_leaves_no_receipt_behind(self):
        media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, media_root, ignore_errors=True)
        self.payload.update(order_id="DT-301", receipt_file=PNG_DATA_URL, receipt_file_name="scan.png")
        self.payload["cart"][0]["image_url"] = "https://cdn.example.com/" + "x" * 600

        with override_settings(MEDIA_ROOT=media_root, MEDIA_URL="/media/"):
            res = self.post()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 0)
        self.assertFalse(os.path.exists(os.path.join(media_root, "receipts", "DT-301_receipt.png")))

    def test_model_validation_failure_is_a_client_error(self):
        media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, media_root, ignore_errors=True)
        self.payload.update(order_id="DT-302", receipt_file=PNG_DATA_URL, receipt_file_name="scan.png")

        with override_settings(MEDIA_ROOT=media_root, MEDIA_URL="/media/"), mock.patch(
            "orders.models.order_item.OrderItem.full_clean",
            side_effect=ValidationError({"selected_color": ["Ensure this value has at most 64 characters."]}),
        ):
            res = self.post()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Invalid order data", res.data["detail"])
        self.assertEqual(Order.objects.count(), 0)
        self.assertFalse(os.path.exists(os.path.join(media_root, "receipts", "DT-302_receipt.png")))

    def test_duplicate_order_id(self):
        make_order("DT-001")
        self.payload["order_id"] = "DT-001"

        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Order.objects.filter(order_id="DT-001").count(), 1)

    # =====================================================
    # RECEIPTS
    # =====================================================

    def test_receipt_upload(self):
        media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, media_root, ignore_errors=True)
        self.payload.update(
            order_id="DT-300",
            receipt_file=PNG_DATA_URL,
            receipt_file_name="scan.png",
        )

        with override_settings(MEDIA_ROOT=media_root, MEDIA_URL="/media/"):
            res = self.post()

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["receipt_url"], "http://testserver/media/receipts/DT-300_receipt.png")
        self.assertTrue(os.path.exists(os.path.join(media_root, "receipts", "DT-300_receipt.png")))

        order = Order.objects.get(order_id="DT-300")
        self.assertEqual(order.receipt_file_name, "scan.png")
        self.assertIn("View Receipt", self.send.call_args.kwargs["html"])

    @override_settings(DEBUG=False)
    def test_uploaded_receipt_is_served(self):
        media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, media_root, ignore_errors=True)
        self.payload.update(order_id="DT-304", receipt_file=PNG_DATA_URL, receipt_file_name="scan.png")

        with override_settings(MEDIA_ROOT=media_root, MEDIA_URL="/media/"):
            res = self.post()
            served = self.client.get(res.data["receipt_url"])
            missing = self.client.get("/media/receipts/DT-404_receipt.png")

        self.assertEqual(served.status_code, status.HTTP_200_OK)
        self.assertEqual(b"".join(served.streaming_content), b"\x89PNG fake receipt")
        self.assertEqual(served["Content-Type"], "image/png")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_receipt_requires_file_name(self):
        self.payload["receipt_file"] = PNG_DATA_URL

        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("receipt_file_name", res.data)

    def test_receipt_type_outside_allow_list(self):
        media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, media_root, ignore_errors=True)
        html = "data:text/html;base64," + base64.b64encode(b"<script>alert(1)</script>").decode("ascii")

        for data_url, file_name in ((html, "r.html"), (PNG_DATA_URL, "r.svg"), (html, "r.png")):
            with self.subTest(file_name=file_name, data_url=data_url[:20]):
                payload = copy.deepcopy(self.payload)
                payload.update(order_id="DT-303", receipt_file=data_url, receipt_file_name=file_name)

                with override_settings(MEDIA_ROOT=media_root, MEDIA_URL="/media/"):
                    res = self.post(payload)

                self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertIn("Unsupported receipt", res.data["detail"])

        self.assertEqual(Order.objects.count(), 0)
        self.assertFalse(os.path.exists(os.path.join(media_root, "receipts")))

    def test_invalid_receipt_payload(self):
        self.payload.update(receipt_file="data:image/png;base64,***", receipt_file_name="scan.png")

        res = self.post()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 0)


class PublicOrderLookupTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.order = make_order("DT-001")

    def test_lookup(self):
        res = self.client.get("/api/public/order/DT-001/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["order_id"], "DT-001")
        self.assertEqual(res.data["order_status"], "processing")
        self.assertEqual(len(res.data["items"]), 2)
        self.assertNotIn("customer_email", res.data)

    def test_lookup_missing(self):
        res = self.client.get("/api/public/order/DT-404/")

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["detail"], "Order not found.")
