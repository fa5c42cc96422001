# orders/services/labels.py

"""
Display labels for payment fields.

Unknown values are shown verbatim instead of failing.
"""

from __future__ import annotations

PAYMENT_OPTION_CONSOLE_LABELS = {
    "full": "Full Payment",
    # Staff know deposit orders as cash on delivery.
    "deposit": "Cash on Delivery",
}

PAYMENT_OPTION_EMAIL_LABELS = {
    "full": "Full Payment",
    "deposit": "10% Deposit",
}


def payment_option_label(payment_option: str | None) -> str:
    value = payment_option or ""
    return PAYMENT_OPTION_CONSOLE_LABELS.get(value, value)


def email_payment_option_label(payment_option: str | None) -> str:
    value = payment_option or ""
    return PAYMENT_OPTION_EMAIL_LABELS.get(value, value)


def payment_status_label(payment_status: str | None, payment_option: str | None) -> str:
    if not payment_status or not payment_option:
        return payment_status or "Unknown"

    if payment_status == "paid":
        return "Paid in Full" if payment_option == "full" else "10% Deposit Paid"
    return payment_status
