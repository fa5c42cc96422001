# orders/models/__init__.py

"""
ORDERS MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for orders app models.
"""

from .order import Order
from .order_item import OrderItem

__all__ = [
    "Order",
    "OrderItem",
]
