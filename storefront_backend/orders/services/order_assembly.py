# orders/services/order_assembly.py

"""
ORDER ASSEMBLY (APPLICATION SERVICE)

Purpose:
- Turn a storefront cart + checkout form into one persisted Order with items.

Hard rules:
- Everything is validated before the first write.
- Line totals are derived server-side (price * quantity).
- A client-supplied total may add charges but never undercut the cart subtotal.
- Order + items are written in one transaction (gateway.insert_order).

Notes:
- Receipt upload happens before assembly; only its file name / URL are recorded.
- Notifications are NOT sent here. Callers dispatch after commit.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from orders.models import Order, OrderItem
from orders.services import order_gateway
from orders.services.pricing import cart_subtotal, line_total, money, payment_breakdown

logger = logging.getLogger(__name__)

REQUIRED_CUSTOMER_FIELDS = (
    "name",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "zip_code",
)

RECEIVER_FIELDS = ("name", "phone", "address", "city", "state", "zip_code")
REQUIRED_RECEIVER_FIELDS = ("name", "phone", "address")

PAYMENT_OPTIONS = {Order.PAYMENT_FULL, Order.PAYMENT_DEPOSIT}


class OrderAssemblyError(Exception):
    pass


class EmptyCartError(OrderAssemblyError):
    pass


class OrderValidationError(OrderAssemblyError):
    pass


@dataclass(frozen=True)
class PlacedOrder:
    order: Order
    db_id: int
    order_id: str
    deposit_amount: Decimal | None
    remaining_balance: Decimal | None


def generate_order_id(now=None) -> str:
    prefix = getattr(settings, "ORDER_ID_PREFIX", "ORD") or "ORD"
    now = now or timezone.now()
    return f"{prefix}-{now:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


def _clean(value) -> str:
    return str(value or "").strip()


def _check_lengths(model, values: dict, *, where: str = "") -> None:
    """Reject text longer than the column it is stored in."""
    for key, value in values.items():
        if not isinstance(value, str):
            continue
        limit = model._meta.get_field(key).max_length
        if limit and len(value) > limit:
            raise OrderValidationError(
                f"{key}{where} must be at most {limit} characters (got {len(value)})"
            )


def _to_int_qty(value) -> int:
    if isinstance(value, bool):
        raise ValueError("quantity must be a whole integer unit")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError("quantity must be a whole integer unit")


def _normalize_customer(customer: dict) -> dict:
    out = {f: _clean(customer.get(f)) for f in REQUIRED_CUSTOMER_FIELDS}
    missing = [f for f in REQUIRED_CUSTOMER_FIELDS if not out[f]]
    if missing:
        raise OrderValidationError(
            f"Missing required customer fields: {', '.join(missing)}"
        )
    return out


def _normalize_receiver(receiver: dict | None) -> dict:
    receiver = receiver or {}
    out = {f: _clean(receiver.get(f)) or None for f in RECEIVER_FIELDS}
    if not any(out.values()):
        return out

    missing = [f for f in REQUIRED_RECEIVER_FIELDS if not out[f]]
    if missing:
        raise OrderValidationError(
            f"Missing required receiver fields: {', '.join(missing)}"
        )
    return out


def _normalize_features(value, idx: int):
    if value in (None, ""):
        return None
    if not isinstance(value, (list, tuple)):
        raise OrderValidationError(f"Invalid selected_features at index {idx}")
    features = [_clean(f) for f in value if _clean(f)]
    return features or None


def _normalize_lines(cart_items) -> list[dict]:
    if not cart_items:
        raise EmptyCartError("Cart is empty")

    rows = []
    for idx, raw in enumerate(cart_items):
        try:
            quantity = _to_int_qty(raw.get("quantity"))
            price = money(raw.get("price"))
        except ValueError as exc:
            raise OrderValidationError(f"Invalid cart line at index {idx}: {exc}") from exc

        if quantity <= 0:
            raise OrderValidationError(f"Invalid quantity at index {idx}: {quantity}")
        if price <= Decimal("0.00"):
            raise OrderValidationError(f"Invalid price at index {idx}: {price}")

        product_id = raw.get("product_id", raw.get("id"))
        try:
            product_id = int(product_id)
        except (TypeError, ValueError) as exc:
            raise OrderValidationError(f"Invalid product_id at index {idx}") from exc

        name = _clean(raw.get("name", raw.get("product_name")))
        if not name:
            raise OrderValidationError(f"Missing product name at index {idx}")

        row = {
            "product_id": product_id,
            "product_name": name,
            "product_image": _clean(raw.get("image_url", raw.get("product_image"))),
            "price": price,
            "quantity": quantity,
            "selected_color": _clean(raw.get("selected_color")) or None,
            "selected_features": _normalize_features(raw.get("selected_features"), idx),
        }
        _check_lengths(OrderItem, row, where=f" at index {idx}")
        rows.append(row)
    return rows


def place_order(
    *,
    cart_items,
    customer: dict,
    payment_option: str,
    receiver: dict | None = None,
    total=None,
    order_id: str | None = None,
    receipt_url: str | None = None,
    receipt_file_name: str | None = None,
) -> PlacedOrder:
    """
    Validate checkout input and persist the order atomically.

    Raises EmptyCartError / OrderValidationError before any write, and
    OrderPersistenceError (from the gateway) when the write fails.
    """
    item_rows = _normalize_lines(cart_items)
    customer_fields = _normalize_customer(customer or {})
    receiver_fields = _normalize_receiver(receiver)

    payment_option = _clean(payment_option).lower()
    if payment_option not in PAYMENT_OPTIONS:
        raise OrderValidationError(f"Invalid payment option: {payment_option or '(blank)'}")

    subtotal = cart_subtotal((r["price"], r["quantity"]) for r in item_rows)

    if total is None or total == "":
        total_amount = subtotal
    else:
        try:
            total_amount = money(total)
        except ValueError as exc:
            raise OrderValidationError(str(exc)) from exc
        if total_amount < subtotal:
            raise OrderValidationError(
                f"Order total {total_amount} is lower than the cart subtotal {subtotal}"
            )

    breakdown = payment_breakdown(total=total_amount, payment_option=payment_option)
    public_id = _clean(order_id) or generate_order_id()

    order_fields = {
        "order_id": public_id,
        **{f"customer_{k}": v for k, v in customer_fields.items()},
        **{f"receiver_{k}": v for k, v in receiver_fields.items()},
        "total_amount": total_amount,
        "payment_option": payment_option,
        "payment_status": Order.PAYMENT_PENDING,
        "order_status": Order.STATUS_PROCESSING,
        "receipt_url": _clean(receipt_url) or None,
        "receipt_file_name": _clean(receipt_file_name) or None,
    }
    _check_lengths(Order, order_fields)

    order = order_gateway.insert_order(order_fields=order_fields, item_rows=item_rows)

    logger.info(
        "Order placed",
        extra={
            "order_id": order.order_id,
            "db_id": order.pk,
            "total_amount": str(total_amount),
            "payment_option": payment_option,
            "line_totals": [str(line_total(r["price"], r["quantity"])) for r in item_rows],
        },
    )

    return PlacedOrder(
        order=order,
        db_id=order.pk,
        order_id=order.order_id,
        deposit_amount=breakdown.deposit,
        remaining_balance=breakdown.remaining_balance,
    )
