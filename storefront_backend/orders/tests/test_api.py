"""
STAFF ORDER API TESTS

Run with:
    python manage.py test orders -v 2

Staff endpoints require an authenticated is_staff user; tests use
force_authenticate instead of minting JWTs.
"""

from __future__ import annotations

from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order, OrderItem
from orders.tests.helpers import make_order

User = get_user_model()

NOTIFICATIONS = {
    "RESEND": {"API_KEY": "re_test"},
    "ADMIN_EMAIL": "owner@darzi.example",
    "FROM": "Darzi Threads <orders@darzi.example>",
    "REPLY_TO": "",
    "CUSTOMER_CONFIRMATION_ENABLED": False,
}

NOT_CONFIGURED = {**NOTIFICATIONS, "RESEND": {"API_KEY": ""}}


class StaffOrderAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(username="staff", password="pass", is_staff=True)
        self.client.force_authenticate(user=self.staff)

        self.first = make_order(
            "DT-001",
            payment_option=Order.PAYMENT_DEPOSIT,
            receiver_name="Bina Ali",
            receiver_phone="0311-7654321",
            receiver_address="9 Canal View",
        )
        self.second = make_order(
            "DT-002",
            customer_name="Omar Farooq",
            customer_email="omar@example.com",
            order_status=Order.STATUS_COMPLETED,
            payment_status=Order.PAYMENT_PAID,
        )

    # =====================================================
    # ACCESS
    # =====================================================

    def test_requires_authentication(self):
        res = APIClient().get("/api/orders/")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_requires_staff(self):
        client = APIClient()
        client.force_authenticate(user=User.objects.create_user(username="shopper", password="pass"))

        res = client.get("/api/orders/")

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    # =====================================================
    # LIST + DETAIL
    # =====================================================

    def test_list_newest_first(self):
        res = self.client.get("/api/orders/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([row["order_id"] for row in res.data["results"]], ["DT-002", "DT-001"])
        self.assertEqual(res.data["results"][1]["payment_option_label"], "Cash on Delivery")
        self.assertEqual(res.data["results"][0]["payment_status_label"], "Paid in Full")
        self.assertEqual(res.data["results"][0]["item_count"], 2)

    def test_list_search_and_status_filter(self):
        res = self.client.get("/api/orders/", {"q": "bina"})
        self.assertEqual([row["order_id"] for row in res.data["results"]], ["DT-001"])

        res = self.client.get("/api/orders/", {"status": "completed"})
        self.assertEqual([row["order_id"] for row in res.data["results"]], ["DT-002"])

        res = self.client.get("/api/orders/", {"status": "all", "q": "dt-00"})
        self.assertEqual(res.data["count"], 2)

    def test_detail_includes_items_and_deposit(self):
        res = self.client.get(f"/api/orders/{self.first.pk}/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data["items"]), 2)
        self.assertEqual(res.data["deposit_amount"], "350.00")
        self.assertEqual(res.data["remaining_balance"], "3150.00")
        self.assertTrue(res.data["has_receiver"])

    def test_stats(self):
        res = self.client.get("/api/orders/stats/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], 2)
        self.assertEqual(res.data["processing"], 1)
        self.assertEqual(res.data["completed"], 1)
        self.assertEqual(res.data["paid"], 1)

    # =====================================================
    # STATUS
    # =====================================================

    def test_update_status(self):
        res = self.client.patch(
            f"/api/orders/{self.first.pk}/status/",
            {"order_status": "completed"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["order_status"], "completed")
        self.first.refresh_from_db()
        self.assertEqual(self.first.order_status, Order.STATUS_COMPLETED)

    def test_update_status_rejects_unknown_value(self):
        res = self.client.patch(
            f"/api/orders/{self.first.pk}/status/",
            {"order_status": "shipped"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(ORDER_STATUS_STRICT_TRANSITIONS=True)
    def test_strict_transition_conflict(self):
        res = self.client.patch(
            f"/api/orders/{self.second.pk}/status/",
            {"order_status": "processing"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    # =====================================================
    # DELETE
    # =====================================================

    def test_delete_requires_confirm(self):
        res = self.client.delete(f"/api/orders/{self.first.pk}/")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("?confirm=DT-001", res.data["detail"])
        self.assertTrue(Order.objects.filter(pk=self.first.pk).exists())

    def test_delete_with_confirm(self):
        res = self.client.delete(f"/api/orders/{self.first.pk}/?confirm=DT-001")

        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Order.objects.filter(pk=self.first.pk).exists())
        self.assertFalse(OrderItem.objects.filter(order_id=self.first.pk).exists())

    # =====================================================
    # RECEIPT + EMAILS
    # =====================================================

    def test_receipt_diagnostic(self):
        self.first.receipt_file_name = "scan.png"
        self.first.save()

        res = self.client.get(f"/api/orders/{self.first.pk}/receipt/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["kind"], "diagnostic")
        self.assertEqual(res.data["title"], "Receipt uploaded but not accessible")
        self.assertEqual(res.data["details"][0], "File: scan.png")

    @override_settings(STORE_NAME="Darzi Threads")
    def test_customer_email_copy(self):
        res = self.client.post(f"/api/orders/{self.first.pk}/customer-email/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["to"], "ayesha@example.com")
        self.assertEqual(res.data["subject"], "Order Confirmation - DT-001 | Darzi Threads")
        self.assertIn(f"Reference: #{self.first.pk}", res.data["html"])

    @override_settings(ORDER_NOTIFICATIONS=NOTIFICATIONS)
    @mock.patch("orders.notifications.dispatcher.ResendClient.send", return_value="email_1")
    def test_notify(self, send):
        res = self.client.post(f"/api/orders/{self.first.pk}/notify/", {}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["admin_email"]["message"], "Admin notification email sent successfully")
        self.assertEqual(res.data["customer_email"]["message"], "Customer confirmation email skipped (disabled)")
        self.assertEqual(send.call_args.kwargs["to"], ["owner@darzi.example"])

    @override_settings(ORDER_NOTIFICATIONS=NOT_CONFIGURED)
    def test_email_test_without_provider(self):
        res = self.client.post("/api/orders/email-test/")

        self.assertEqual(res.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(res.data["message"], "Email service not configured")
