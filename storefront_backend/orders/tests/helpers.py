# orders/tests/helpers.py

"""
Shared builders for order tests.

Orders are written straight through the ORM so each test controls
status, receipt and receiver fields without going through checkout.
"""

from __future__ import annotations

from decimal import Decimal

from orders.models import Order, OrderItem

CUSTOMER = {
    "name": "Ayesha Khan",
    "email": "ayesha@example.com",
    "phone": "0300-1234567",
    "address": "12 Mall Road",
    "city": "Lahore",
    "state": "Punjab",
    "zip_code": "54000",
}

CART = [
    {
        "product_id": 1,
        "name": "Embroidered Kurta",
        "price": "1500",
        "quantity": 2,
        "image_url": "https://cdn.example.com/kurta.jpg",
        "selected_color": "Black",
        "selected_features": ["Hand embroidery"],
    },
    {
        "product_id": 2,
        "name": "Silk Dupatta",
        "price": "500",
        "quantity": 1,
    },
]


def make_order(order_id="DT-001", *, items=None, **overrides) -> Order:
    fields = {
        "order_id": order_id,
        "customer_name": CUSTOMER["name"],
        "customer_email": CUSTOMER["email"],
        "customer_phone": CUSTOMER["phone"],
        "customer_address": CUSTOMER["address"],
        "customer_city": CUSTOMER["city"],
        "customer_state": CUSTOMER["state"],
        "customer_zip_code": CUSTOMER["zip_code"],
        "total_amount": Decimal("3500.00"),
        "payment_option": Order.PAYMENT_FULL,
        "payment_status": Order.PAYMENT_PENDING,
        "order_status": Order.STATUS_PROCESSING,
    }
    fields.update(overrides)
    order = Order.objects.create(**fields)

    if items is None:
        items = [
            {"product_id": 1, "product_name": "Embroidered Kurta", "price": "1500.00", "quantity": 2},
            {"product_id": 2, "product_name": "Silk Dupatta", "price": "500.00", "quantity": 1},
        ]
    for row in items:
        OrderItem.objects.create(order=order, **row)
    return order
