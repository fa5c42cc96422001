# orders/apps.py

"""
ORDERS APP CONFIG

Storefront order lifecycle:
- Order + OrderItem persistence
- Checkout assembly (validation, totals, deposit)
- Admin alert / customer confirmation emails
- Staff order console (list, filter, status, delete, receipts)
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Storefront Orders"
