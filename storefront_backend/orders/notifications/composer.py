# orders/notifications/composer.py

"""
ORDER EMAIL COMPOSER

Pure rendering: OrderEmailData in, HTML/subject strings out.

- No database access, no clock reads (dates come from data.placed_at)
- Django template engine with autoescaping, so customer-entered text is
  always escaped
- Optional sections (receiver, receipt, item options, deposit figures) are
  omitted when their data is absent
"""

from __future__ import annotations

from django.template.loader import render_to_string

from orders.notifications.payload import Branding, OrderEmailData

CUSTOMER_CONFIRMATION = "customer_confirmation"
ADMIN_ALERT = "admin_alert"
CUSTOMER_COPY = "customer_copy"

TEMPLATES = {
    CUSTOMER_CONFIRMATION: "orders/emails/customer_confirmation.html",
    ADMIN_ALERT: "orders/emails/admin_alert.html",
    CUSTOMER_COPY: "orders/emails/customer_copy.html",
}

TEST_EMAIL_HTML = (
    "<h1>Test Email</h1>"
    "<p>This is a test email to verify the email service is working correctly.</p>"
)


class UnknownEmailKindError(ValueError):
    pass


def _context(data: OrderEmailData, *, db_id=None) -> dict:
    return {
        "data": data,
        "db_id": db_id,
        "brand": data.branding,
        "customer": data.customer,
        "receiver": data.receiver,
        "items": data.items,
        "breakdown": data.breakdown,
        "placed_on": data.placed_on,
    }


def _render(kind: str, data: OrderEmailData, *, db_id=None) -> str:
    return render_to_string(TEMPLATES[kind], _context(data, db_id=db_id))


def render_customer_confirmation(data: OrderEmailData) -> str:
    return _render(CUSTOMER_CONFIRMATION, data)


def render_admin_alert(data: OrderEmailData, db_id) -> str:
    return _render(ADMIN_ALERT, data, db_id=db_id)


def render_customer_copy(data: OrderEmailData, db_id) -> str:
    """Variant the admin forwards to the customer by hand."""
    return _render(CUSTOMER_COPY, data, db_id=db_id)


def subject_for(kind: str, data: OrderEmailData | None = None) -> str:
    if kind == "test":
        store = (data.branding if data else Branding.from_settings()).store_name
        return f"Test Email - {store} Email Service"

    if data is None:
        raise UnknownEmailKindError(f"Email kind '{kind}' needs order data")

    store = data.branding.store_name
    if kind in (CUSTOMER_CONFIRMATION, CUSTOMER_COPY):
        return f"Order Confirmation - {data.order_id} | {store}"
    if kind == ADMIN_ALERT:
        return f"\U0001f6a8 New Order Alert: {data.order_id} | {store}"

    raise UnknownEmailKindError(f"Unknown email kind '{kind}'")
