"""
======================================================
PATH: orders/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Order + OrderItem

Purpose:
- Storefront orders table (customer, receiver, payment, receipt fields).
- Order items table with cascade delete from the owning order.
"""

from __future__ import annotations

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "order_id",
                    models.CharField(
                        help_text="Public order number shown to customers and staff",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("customer_name", models.CharField(max_length=120)),
                ("customer_email", models.EmailField(max_length=254)),
                ("customer_phone", models.CharField(max_length=40)),
                ("customer_address", models.TextField()),
                ("customer_city", models.CharField(max_length=120)),
                ("customer_state", models.CharField(max_length=120)),
                ("customer_zip_code", models.CharField(max_length=20)),
                ("receiver_name", models.CharField(blank=True, max_length=120, null=True)),
                ("receiver_phone", models.CharField(blank=True, max_length=40, null=True)),
                ("receiver_address", models.TextField(blank=True, null=True)),
                ("receiver_city", models.CharField(blank=True, max_length=120, null=True)),
                ("receiver_state", models.CharField(blank=True, max_length=120, null=True)),
                ("receiver_zip_code", models.CharField(blank=True, max_length=20, null=True)),
                (
                    "total_amount",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=12
                    ),
                ),
                (
                    "payment_option",
                    models.CharField(
                        choices=[("full", "Full Payment"), ("deposit", "10% Deposit")],
                        default="full",
                        max_length=16,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("paid", "Paid"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "order_status",
                    models.CharField(
                        choices=[
                            ("processing", "Processing"),
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="processing",
                        max_length=16,
                    ),
                ),
                ("receipt_url", models.URLField(blank=True, max_length=500, null=True)),
                ("receipt_file_name", models.CharField(blank=True, max_length=255, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["created_at"], name="orders_created_at_idx"),
                    models.Index(fields=["order_status"], name="orders_status_idx"),
                    models.Index(fields=["customer_email"], name="orders_customer_email_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("product_id", models.PositiveIntegerField()),
                ("product_name", models.CharField(max_length=255)),
                ("product_image", models.CharField(blank=True, default="", max_length=500)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("selected_color", models.CharField(blank=True, max_length=64, null=True)),
                ("selected_features", models.JSONField(blank=True, null=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["order"], name="order_items_order_idx"),
                ],
            },
        ),
    ]
