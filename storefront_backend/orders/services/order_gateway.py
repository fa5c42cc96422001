# orders/services/order_gateway.py

"""
ORDER PERSISTENCE GATEWAY

The only module that issues ORM writes/reads against the orders tables.
Callers never see raw database errors: everything surfaces as an
OrderPersistenceError subclass carrying a message fit for an operator.

Tables:
- orders_order
- orders_orderitem (cascade from order)
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import DataError, DatabaseError, IntegrityError, transaction
from django.db.models import Count, Max, ProtectedError

from orders.models import Order, OrderItem

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"


class OrderPersistenceError(Exception):
    """Base exception for all gateway failures."""


class OrderNotFoundError(OrderPersistenceError):
    pass


class RelatedDataError(OrderPersistenceError):
    """Raised when a write is blocked by dependent rows."""


class DuplicateOrderError(OrderPersistenceError):
    pass


class InvalidOrderDataError(OrderPersistenceError):
    """Raised when a row is rejected by model validation or column limits."""


def _db_error_code(exc: Exception) -> str:
    cause = getattr(exc, "__cause__", None)
    return str(getattr(cause, "pgcode", "") or getattr(cause, "sqlstate", "") or "")


def _is_foreign_key_violation(exc: Exception) -> bool:
    if _db_error_code(exc) == FOREIGN_KEY_VIOLATION:
        return True
    return "foreign key" in str(exc).lower()


def _is_unique_violation(exc: Exception) -> bool:
    if _db_error_code(exc) == UNIQUE_VIOLATION:
        return True
    return "unique" in str(exc).lower()


def _orders_with_items():
    return Order.objects.prefetch_related("items").order_by("-created_at", "-id")


# ============================================================
# CREATE
# ============================================================


@transaction.atomic
def insert_order(*, order_fields: dict, item_rows: list[dict]) -> Order:
    """
    Insert one order and its items in a single transaction.

    Either every row is written or none is (no orphan orders on item failure).
    """
    try:
        order = Order.objects.create(**order_fields)
        for row in item_rows:
            OrderItem.objects.create(order=order, **row)
    except IntegrityError as exc:
        if _is_unique_violation(exc):
            logger.warning(
                "Duplicate order id rejected",
                extra={"order_id": order_fields.get("order_id")},
            )
            raise DuplicateOrderError(
                f"Order {order_fields.get('order_id')} already exists."
            ) from exc
        logger.exception("Order insert failed")
        raise OrderPersistenceError(f"Failed to create order: {exc}") from exc
    except (ValidationError, DataError) as exc:
        logger.warning(
            "Order insert rejected",
            extra={"order_id": order_fields.get("order_id"), "error": str(exc)},
        )
        raise InvalidOrderDataError(f"Invalid order data: {exc}") from exc
    except DatabaseError as exc:
        logger.exception("Order insert failed")
        raise OrderPersistenceError(f"Failed to create order: {exc}") from exc

    logger.info(
        "Order inserted",
        extra={"order_id": order.order_id, "db_id": order.pk, "items": len(item_rows)},
    )
    return order


# ============================================================
# READ
# ============================================================


def list_orders() -> list[Order]:
    """Whole-table fetch (newest first) with items prefetched."""
    try:
        return list(_orders_with_items())
    except DatabaseError as exc:
        logger.exception("Order list fetch failed")
        raise OrderPersistenceError(f"Failed to fetch orders: {exc}") from exc


def get_order(pk) -> Order:
    try:
        return _orders_with_items().get(pk=pk)
    except Order.DoesNotExist as exc:
        raise OrderNotFoundError("Order not found") from exc
    except (DatabaseError, ValueError) as exc:
        raise OrderPersistenceError(f"Failed to fetch order: {exc}") from exc


def get_order_by_public_id(order_id: str) -> Order:
    try:
        return _orders_with_items().get(order_id=str(order_id or "").strip())
    except Order.DoesNotExist as exc:
        raise OrderNotFoundError("Order not found") from exc
    except DatabaseError as exc:
        raise OrderPersistenceError(f"Failed to fetch order: {exc}") from exc


def order_item_count(pk) -> int:
    return OrderItem.objects.filter(order_id=pk).count()


def change_marker() -> tuple:
    """
    Fingerprint of both tables. It differs whenever a row is inserted,
    updated through save() or deleted, whichever process made the write.
    """
    try:
        orders = Order.objects.aggregate(count=Count("id"), last_id=Max("id"), touched=Max("updated_at"))
        items = OrderItem.objects.aggregate(count=Count("id"), last_id=Max("id"))
    except DatabaseError as exc:
        raise OrderPersistenceError(f"Failed to check orders: {exc}") from exc
    return (
        orders["count"],
        orders["last_id"],
        orders["touched"],
        items["count"],
        items["last_id"],
    )


# ============================================================
# UPDATE
# ============================================================


def update_order_status(pk, order_status: str) -> Order:
    """
    Single-field update (plus updated_at); returns the refreshed row.

    Saved through the model so post_save listeners (console watchers) fire.
    """
    order = get_order(pk)
    order.order_status = order_status
    try:
        order.save(update_fields=["order_status", "updated_at"])
    except DatabaseError as exc:
        logger.exception("Order status update failed", extra={"db_id": pk})
        raise OrderPersistenceError(f"Failed to update order status: {exc}") from exc

    logger.info(
        "Order status updated",
        extra={"db_id": pk, "order_status": order_status},
    )
    return order


# ============================================================
# DELETE
# ============================================================


@transaction.atomic
def delete_order(pk) -> int:
    """
    Delete items first, then the order. Returns the number of items removed.
    """
    try:
        if not Order.objects.filter(pk=pk).exists():
            raise OrderNotFoundError("Order not found")

        items_deleted, _ = OrderItem.objects.filter(order_id=pk).delete()
        Order.objects.filter(pk=pk).delete()
    except ProtectedError as exc:
        logger.warning("Order delete blocked by related rows", extra={"db_id": pk})
        raise RelatedDataError(
            "Cannot delete order: remove related data first."
        ) from exc
    except IntegrityError as exc:
        if _is_foreign_key_violation(exc):
            logger.warning("Order delete blocked by foreign key", extra={"db_id": pk})
            raise RelatedDataError(
                "Cannot delete order: remove related data first."
            ) from exc
        logger.exception("Order delete failed", extra={"db_id": pk})
        raise OrderPersistenceError(f"Failed to delete order: {exc}") from exc
    except DatabaseError as exc:
        logger.exception("Order delete failed", extra={"db_id": pk})
        raise OrderPersistenceError(f"Failed to delete order: {exc}") from exc

    logger.info("Order deleted", extra={"db_id": pk, "items_deleted": items_deleted})
    return items_deleted
