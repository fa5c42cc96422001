# orders/services/pricing.py

"""
ORDER PRICING RULES

Single source of truth for money arithmetic used by checkout, emails and
the staff console.

Hard rules:
- Line totals are derived from price * quantity, never read back from storage.
- Deposit = max(1, round_half_up(total * 10%)).
- Remaining balance = total - deposit.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWOPLACES = Decimal("0.01")
DEPOSIT_RATE = Decimal("0.10")
MIN_DEPOSIT = Decimal("1")


def money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError(f"Invalid money value: {v!r}") from exc


def line_total(price, quantity) -> Decimal:
    return money(money(price) * Decimal(int(quantity)))


def cart_subtotal(lines) -> Decimal:
    """Sum of derived line totals; `lines` yields (price, quantity) pairs."""
    return money(sum((line_total(p, q) for p, q in lines), Decimal("0.00")))


def deposit_amount(total) -> Decimal:
    rounded = (money(total) * DEPOSIT_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return money(max(MIN_DEPOSIT, rounded))


@dataclass(frozen=True)
class PaymentBreakdown:
    payment_option: str
    total: Decimal
    deposit: Decimal | None
    remaining_balance: Decimal | None

    @property
    def is_deposit(self) -> bool:
        return self.deposit is not None


def payment_breakdown(*, total, payment_option: str) -> PaymentBreakdown:
    total = money(total)
    if payment_option == "deposit":
        deposit = deposit_amount(total)
        return PaymentBreakdown(
            payment_option=payment_option,
            total=total,
            deposit=deposit,
            remaining_balance=money(total - deposit),
        )
    return PaymentBreakdown(
        payment_option=payment_option,
        total=total,
        deposit=None,
        remaining_balance=None,
    )


def format_amount(value) -> str:
    """
    Thousands-separated amount: 1000 -> "1,000", 1250.5 -> "1,250.50".
    Whole amounts drop the decimals.
    """
    amount = money(value)
    if amount == amount.to_integral_value():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"
