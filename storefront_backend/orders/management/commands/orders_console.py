# orders/management/commands/orders_console.py

"""
Operator console for storefront orders.

Usage:
    python manage.py orders_console list [--q TEXT] [--status STATUS]
    python manage.py orders_console show <id>
    python manage.py orders_console status <id> <new_status>
    python manage.py orders_console delete <id> [--yes]
    python manage.py orders_console receipt <id>
    python manage.py orders_console stats
    python manage.py orders_console watch [--seconds N] [--poll N]
"""

from __future__ import annotations

import time

from django.core.management.base import BaseCommand, CommandError

from orders.models import Order
from orders.services.labels import payment_option_label, payment_status_label
from orders.services.order_console import STATUS_FILTERS, OrderConsole
from orders.services.pricing import format_amount, payment_breakdown


class Command(BaseCommand):
    help = "List, inspect, update and delete storefront orders."

    def add_arguments(self, parser):
        sub = parser.add_subparsers(dest="action", required=True)

        p_list = sub.add_parser("list", help="List orders (newest first)")
        p_list.add_argument("--q", default="", help="Search order id, customer or receiver contact")
        p_list.add_argument("--status", default="all", choices=sorted(STATUS_FILTERS))

        p_show = sub.add_parser("show", help="Show one order with items")
        p_show.add_argument("id", type=int)

        p_status = sub.add_parser("status", help="Set order_status")
        p_status.add_argument("id", type=int)
        p_status.add_argument("new_status", choices=[v for v, _ in Order.STATUS_CHOICES])

        p_delete = sub.add_parser("delete", help="Delete an order and its items")
        p_delete.add_argument("id", type=int)
        p_delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

        p_receipt = sub.add_parser("receipt", help="Show receipt availability")
        p_receipt.add_argument("id", type=int)

        sub.add_parser("stats", help="Order counts per status")

        p_watch = sub.add_parser("watch", help="Reload on order changes until interrupted")
        p_watch.add_argument("--seconds", type=float, default=0, help="Stop after N seconds (0 = forever)")
        p_watch.add_argument(
            "--poll",
            type=float,
            default=None,
            help="Seconds between database checks for writes from other processes",
        )

    def handle(self, *args, **options):
        action = options["action"]
        overrides = {"startup_delay": 0}
        if action == "watch" and options.get("poll") is not None:
            overrides["poll_interval"] = options["poll"]
        console = OrderConsole.from_settings(**overrides)

        try:
            if action == "watch":
                return self._watch(console, options["seconds"])

            loaded = console.load()
            if not loaded.ok:
                raise CommandError(f"{loaded.message} {loaded.error or ''}".strip())

            handler = getattr(self, f"_{action}")
            handler(console, options)
        finally:
            console.close()

    # ------------------------------------------------------------

    def _order_line(self, order: Order) -> str:
        return (
            f"#{order.pk:<5} {order.order_id:<24} {order.order_status:<11} "
            f"{payment_option_label(order.payment_option):<17} "
            f"{format_amount(order.total_amount):>12}  {order.customer_name}"
        )

    def _require(self, console: OrderConsole, pk) -> Order:
        order = console.select(pk)
        if order is None:
            raise CommandError(f"Order {pk} not found")
        return order

    def _list(self, console: OrderConsole, options):
        orders = console.list_orders(options["q"], options["status"])
        for order in orders:
            self.stdout.write(self._order_line(order))
        self.stdout.write(f"{len(orders)} of {len(console.orders)} orders")

    def _show(self, console: OrderConsole, options):
        order = self._require(console, options["id"])
        breakdown = payment_breakdown(total=order.total_amount, payment_option=order.payment_option)

        self.stdout.write(self.style.MIGRATE_HEADING(f"Order {order.order_id} (#{order.pk})"))
        self.stdout.write(f"Placed:   {order.created_at:%Y-%m-%d %H:%M}")
        self.stdout.write(f"Status:   {order.order_status}")
        self.stdout.write(
            f"Payment:  {payment_option_label(order.payment_option)} / "
            f"{payment_status_label(order.payment_status, order.payment_option)}"
        )
        self.stdout.write(f"Customer: {order.customer_name} <{order.customer_email}> {order.customer_phone}")
        self.stdout.write(
            f"Address:  {order.customer_address}, {order.customer_city}, "
            f"{order.customer_state} {order.customer_zip_code}"
        )
        if order.has_receiver:
            self.stdout.write(
                f"Deliver:  {order.receiver_name} {order.receiver_phone} {order.receiver_address}"
            )

        for item in order.items.all():
            options_text = ""
            if item.selected_color:
                options_text += f" color={item.selected_color}"
            if item.selected_features:
                options_text += f" features={', '.join(item.selected_features)}"
            self.stdout.write(
                f"  - {item.product_name} x{item.quantity} @ {format_amount(item.price)}"
                f" = {format_amount(item.line_total)}{options_text}"
            )

        self.stdout.write(f"Total:    {format_amount(order.total_amount)}")
        if breakdown.is_deposit:
            self.stdout.write(f"Deposit:  {format_amount(breakdown.deposit)}")
            self.stdout.write(f"Balance:  {format_amount(breakdown.remaining_balance)}")

    def _status(self, console: OrderConsole, options):
        result = console.update_status(options["id"], options["new_status"])
        if not result.ok:
            raise CommandError(result.message)
        self.stdout.write(self.style.SUCCESS(result.message))

    def _delete(self, console: OrderConsole, options):
        def confirm(prompt: str) -> bool:
            if options["yes"]:
                return True
            self.stdout.write(prompt)
            return input("Type 'yes' to continue: ").strip().lower() == "yes"

        result = console.delete_order(options["id"], confirm)
        if not result.ok:
            if result.error:
                raise CommandError(result.message)
            self.stdout.write(self.style.WARNING(result.message))
            return
        self.stdout.write(self.style.SUCCESS(result.message))

    def _receipt(self, console: OrderConsole, options):
        order = self._require(console, options["id"])
        display = console.receipt_display(order)

        if display.kind == "none":
            self.stdout.write("No receipt uploaded")
            return
        if display.kind == "image":
            self.stdout.write(self.style.SUCCESS(f"Receipt: {display.url}"))
            return

        self.stdout.write(self.style.WARNING(display.title))
        for line in display.details:
            self.stdout.write(f"  {line}")

    def _stats(self, console: OrderConsole, options):
        for key, value in console.stats().items():
            self.stdout.write(f"{key:<11} {value}")

    def _watch(self, console: OrderConsole, seconds: float):
        console.on_load = lambda result: self.stdout.write(
            f"[orders] {result.message} | {console.stats()}"
        )
        console.watch()
        console.start()

        started = time.monotonic()
        try:
            while seconds <= 0 or time.monotonic() - started < seconds:
                time.sleep(0.2)
        except KeyboardInterrupt:
            self.stdout.write("Stopped")
