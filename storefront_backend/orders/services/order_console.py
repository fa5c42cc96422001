# orders/services/order_console.py

"""
ADMIN ORDER CONSOLE

In-memory operator view over the orders table.

The console exclusively owns its order list and open detail; the database
is the source of truth. Every mutation is persisted through the gateway
first and only then reflected locally, so a failed write leaves the view
untouched.

Lifecycle:
- start(): first load after STARTUP_DELAY
- watch(): order/item change events -> one debounced reload per burst
- poll(): table fingerprint check for writes made by other processes
- close(): late timers and signal callbacks become no-ops
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import Counter
from dataclasses import dataclass
from typing import Callable

from django.conf import settings
from django.db import connection
from django.db.models.signals import post_delete, post_save

from orders.models import Order, OrderItem
from orders.services import order_gateway
from orders.services.coalescing import CoalescingTrigger
from orders.services.order_gateway import OrderPersistenceError
from orders.services.order_lifecycle import OrderLifecycleError, validate_transition
from orders.services.receipts import probe_receipt_url

logger = logging.getLogger(__name__)

STATUS_FILTER_ALL = "all"
STATUS_FILTERS = {STATUS_FILTER_ALL} | {value for value, _label in Order.STATUS_CHOICES}

RECEIPT_IMAGE = "image"
RECEIPT_DIAGNOSTIC = "diagnostic"
RECEIPT_NONE = "none"

RECEIPT_NOT_ACCESSIBLE = "Receipt uploaded but not accessible"
RECEIPT_URL_MISSING = "The receipt file was uploaded but the URL is not available"
RECEIPT_URL_UNREACHABLE = "The receipt URL could not be loaded"


@dataclass(frozen=True)
class ConsoleResult:
    ok: bool
    message: str
    error: str | None = None


@dataclass(frozen=True)
class ReceiptDisplay:
    kind: str
    url: str | None = None
    file_name: str | None = None
    title: str = ""
    details: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "url": self.url,
            "file_name": self.file_name,
            "title": self.title,
            "details": list(self.details),
        }


def delete_prompt(order_id: str) -> str:
    return (
        f"Are you sure you want to delete order {order_id}?\n\n"
        "This action cannot be undone and will permanently remove:\n"
        "• The order\n"
        "• All order items\n"
        "• Order history"
    )


def matches_search(order: Order, search_text: str) -> bool:
    needle = (search_text or "").strip().lower()
    if not needle:
        return True

    haystack = (
        order.order_id,
        order.customer_name,
        order.customer_email,
        order.customer_phone,
        order.receiver_name,
        order.receiver_phone,
    )
    return any(needle in value.lower() for value in haystack if value)


def filter_orders(orders, search_text: str = "", status_filter: str = STATUS_FILTER_ALL) -> list[Order]:
    status_filter = (status_filter or STATUS_FILTER_ALL).strip().lower()
    return [
        o
        for o in orders
        if matches_search(o, search_text)
        and (status_filter == STATUS_FILTER_ALL or o.order_status == status_filter)
    ]


def order_stats(orders) -> dict[str, int]:
    orders = list(orders)
    by_status = Counter(o.order_status for o in orders)
    return {
        "total": len(orders),
        "processing": by_status[Order.STATUS_PROCESSING],
        "completed": by_status[Order.STATUS_COMPLETED],
        "pending": by_status[Order.STATUS_PENDING],
        "cancelled": by_status[Order.STATUS_CANCELLED],
        "paid": sum(1 for o in orders if o.payment_status == Order.PAYMENT_PAID),
    }


def build_receipt_display(order: Order, probe: Callable[[str], bool] | None = None) -> ReceiptDisplay:
    if not order.has_receipt:
        return ReceiptDisplay(kind=RECEIPT_NONE)

    probe = probe or probe_receipt_url
    file_name = order.receipt_file_name or None

    if order.receipt_url and probe(order.receipt_url):
        return ReceiptDisplay(kind=RECEIPT_IMAGE, url=order.receipt_url, file_name=file_name)

    details = [f"File: {file_name}"] if file_name else []
    details.append(RECEIPT_URL_UNREACHABLE if order.receipt_url else RECEIPT_URL_MISSING)
    return ReceiptDisplay(
        kind=RECEIPT_DIAGNOSTIC,
        url=order.receipt_url or None,
        file_name=file_name,
        title=RECEIPT_NOT_ACCESSIBLE,
        details=tuple(details),
    )


class OrderConsole:
    def __init__(
        self,
        *,
        gateway=order_gateway,
        startup_delay: float = 1.0,
        refresh_debounce: float = 0.5,
        poll_interval: float = 0.0,
        probe: Callable[[str], bool] | None = None,
        on_load: Callable[[ConsoleResult], None] | None = None,
    ):
        self.gateway = gateway
        self.on_load = on_load
        self.startup_delay = max(0.0, float(startup_delay))
        self.poll_interval = max(0.0, float(poll_interval))
        self.probe = probe or probe_receipt_url

        self.error: str | None = None
        self.loading = False
        self.selected: Order | None = None

        self._orders: list[Order] = []
        self._alive = True
        self._lock = threading.RLock()
        self._startup_timer: threading.Timer | None = None
        self._refresh = CoalescingTrigger(refresh_debounce, self.load)
        self._dispatch_uid = f"order-console-{uuid.uuid4().hex}"
        self._watching = False
        self._marker = None
        self._poll_stop = threading.Event()
        self._poll_thread: threading.Thread | None = None

    @classmethod
    def from_settings(cls, **overrides) -> "OrderConsole":
        cfg = getattr(settings, "ORDER_CONSOLE", {}) or {}
        kwargs = {
            "startup_delay": cfg.get("STARTUP_DELAY", 1.0),
            "refresh_debounce": cfg.get("REFRESH_DEBOUNCE", 0.5),
            "poll_interval": cfg.get("POLL_INTERVAL", 2.0),
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def orders(self) -> list[Order]:
        with self._lock:
            return list(self._orders)

    @property
    def polling(self) -> bool:
        return self._poll_thread is not None and self._poll_thread.is_alive()

    @property
    def refresh_trigger(self) -> CoalescingTrigger:
        return self._refresh

    def _find(self, pk) -> Order | None:
        for order in self._orders:
            if str(order.pk) == str(pk):
                return order
        return None

    # ============================================================
    # LOAD
    # ============================================================

    def load(self) -> ConsoleResult:
        if not self._alive:
            return ConsoleResult(ok=False, message="Console closed")

        with self._lock:
            self.loading = True
        try:
            fetched = self.gateway.list_orders()
        except OrderPersistenceError as exc:
            logger.error("Order console load failed", extra={"error": str(exc)})
            with self._lock:
                if self._alive:
                    self._orders = []
                    self.error = "Failed to load orders."
                self.loading = False
            return ConsoleResult(ok=False, message="Failed to load orders.", error=str(exc))

        for order in fetched:
            order.payment_option = order.payment_option or Order.PAYMENT_FULL
            order.payment_status = order.payment_status or Order.PAYMENT_PENDING

        with self._lock:
            self.loading = False
            if not self._alive:
                return ConsoleResult(ok=False, message="Console closed")
            self._orders = fetched
            self.error = None
            if self.selected is not None:
                self.selected = self._find(self.selected.pk)

        logger.debug("Order console loaded", extra={"count": len(fetched)})
        result = ConsoleResult(ok=True, message=f"Loaded {len(fetched)} orders")
        if self.on_load is not None:
            self.on_load(result)
        return result

    # ============================================================
    # QUERY
    # ============================================================

    def list_orders(self, search_text: str = "", status_filter: str = STATUS_FILTER_ALL) -> list[Order]:
        return filter_orders(self.orders, search_text, status_filter)

    def stats(self) -> dict[str, int]:
        return order_stats(self.orders)

    def select(self, pk) -> Order | None:
        with self._lock:
            self.selected = self._find(pk)
            return self.selected

    def close_detail(self) -> None:
        with self._lock:
            self.selected = None

    def receipt_display(self, order: Order, probe: Callable[[str], bool] | None = None) -> ReceiptDisplay:
        return build_receipt_display(order, probe or self.probe)

    # ============================================================
    # MUTATIONS
    # ============================================================

    def update_status(self, pk, new_status: str) -> ConsoleResult:
        new_status = (new_status or "").strip().lower()

        try:
            # The local copy may be stale; the transition is checked against the stored row.
            validate_transition(order=self.gateway.get_order(pk), target_status=new_status)
            updated = self.gateway.update_order_status(pk, new_status)
        except (OrderLifecycleError, OrderPersistenceError) as exc:
            logger.warning(
                "Order status update rejected",
                extra={"db_id": pk, "order_status": new_status, "error": str(exc)},
            )
            return ConsoleResult(
                ok=False,
                message=f"Failed to update order status: {exc}",
                error=str(exc),
            )

        with self._lock:
            local = self._find(pk)
            if local is not None:
                local.order_status = updated.order_status
                local.updated_at = updated.updated_at
            if self.selected is not None and str(self.selected.pk) == str(pk):
                self.selected.order_status = updated.order_status
                self.selected.updated_at = updated.updated_at

        return ConsoleResult(ok=True, message=f"Order status updated to: {new_status}")

    def delete_order(self, pk, confirm: Callable[[str], bool]) -> ConsoleResult:
        current = self._find(pk)
        label = current.order_id if current is not None else str(pk)

        if not confirm(delete_prompt(label)):
            return ConsoleResult(ok=False, message="Deletion cancelled")

        try:
            self.gateway.delete_order(pk)
        except OrderPersistenceError as exc:
            logger.warning("Order delete failed", extra={"db_id": pk, "error": str(exc)})
            return ConsoleResult(
                ok=False,
                message=f"Failed to delete order: {exc}",
                error=str(exc),
            )

        with self._lock:
            self._orders = [o for o in self._orders if str(o.pk) != str(pk)]
            if self.selected is not None and str(self.selected.pk) == str(pk):
                self.selected = None

        return ConsoleResult(ok=True, message=f"Order {label} deleted successfully")

    # ============================================================
    # LIFECYCLE
    # ============================================================

    def start(self) -> None:
        if self.startup_delay <= 0:
            self.load()
            return
        timer = threading.Timer(self.startup_delay, self.load)
        timer.daemon = True
        self._startup_timer = timer
        timer.start()

    def _on_change(self, sender, **kwargs) -> None:
        if self._alive:
            self._refresh.trigger()

    def _uid(self, signal_name: str, model) -> str:
        return f"{self._dispatch_uid}-{signal_name}-{model.__name__}"

    def poll(self) -> bool:
        """
        Schedule a reload when the stored orders changed since the last check.

        Signals only cover writes made in this process; this catches the rest
        (checkouts handled by the web workers, other consoles).
        """
        if not self._alive:
            return False
        try:
            marker = self.gateway.change_marker()
        except OrderPersistenceError as exc:
            logger.warning("Order console poll failed", extra={"error": str(exc)})
            return False

        with self._lock:
            changed = self._marker is not None and marker != self._marker
            self._marker = marker
        if changed:
            self._refresh.trigger()
        return changed

    def _poll_loop(self) -> None:
        try:
            while not self._poll_stop.wait(self.poll_interval):
                self.poll()
        finally:
            connection.close()

    def watch(self) -> None:
        if self._watching:
            return
        for model in (Order, OrderItem):
            post_save.connect(
                self._on_change,
                sender=model,
                weak=False,
                dispatch_uid=self._uid("save", model),
            )
            post_delete.connect(
                self._on_change,
                sender=model,
                weak=False,
                dispatch_uid=self._uid("delete", model),
            )
        self._watching = True

        self.poll()
        if self.poll_interval > 0:
            self._poll_stop.clear()
            self._poll_thread = threading.Thread(
                target=self._poll_loop, name="order-console-poll", daemon=True
            )
            self._poll_thread.start()

    def close(self) -> None:
        self._alive = False
        if self._startup_timer is not None:
            self._startup_timer.cancel()
            self._startup_timer = None
        self._refresh.cancel()
        self._poll_stop.set()
        if self._poll_thread is not None:
            self._poll_thread.join(timeout=1.0)
            self._poll_thread = None
        if self._watching:
            for model in (Order, OrderItem):
                post_save.disconnect(sender=model, dispatch_uid=self._uid("save", model))
                post_delete.disconnect(sender=model, dispatch_uid=self._uid("delete", model))
            self._watching = False
