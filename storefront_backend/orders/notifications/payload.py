# orders/notifications/payload.py

"""
Input shapes for order emails.

Plain frozen dataclasses so rendering never touches the database: build
them once (from persisted rows or from checkout input) and pass them around.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from orders.services.labels import email_payment_option_label
from orders.services.pricing import PaymentBreakdown, line_total, money, payment_breakdown


@dataclass(frozen=True)
class Branding:
    store_name: str
    currency: str
    support_email: str

    @classmethod
    def from_settings(cls) -> "Branding":
        return cls(
            store_name=getattr(settings, "STORE_NAME", "") or "Storefront",
            currency=getattr(settings, "CURRENCY_LABEL", "") or "Rs",
            support_email=getattr(settings, "SUPPORT_EMAIL", "") or "",
        )


@dataclass(frozen=True)
class ContactInfo:
    full_name: str
    email: str
    phone: str
    address: str
    city: str = ""
    state: str = ""
    zip_code: str = ""


@dataclass(frozen=True)
class ReceiverInfo:
    full_name: str
    phone: str
    address: str
    city: str = ""
    state: str = ""
    zip_code: str = ""


@dataclass(frozen=True)
class EmailLineItem:
    name: str
    price: Decimal
    quantity: int
    image_url: str = ""
    selected_color: str | None = None
    selected_features: tuple[str, ...] = ()

    @property
    def line_total(self) -> Decimal:
        return line_total(self.price, self.quantity)

    @property
    def has_options(self) -> bool:
        return bool(self.selected_color or self.selected_features)


@dataclass(frozen=True)
class OrderEmailData:
    order_id: str
    customer: ContactInfo
    items: tuple[EmailLineItem, ...]
    total: Decimal
    payment_option: str
    placed_at: datetime
    receiver: ReceiverInfo | None = None
    receipt_url: str | None = None
    branding: Branding = field(default_factory=Branding.from_settings)

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def breakdown(self) -> PaymentBreakdown:
        return payment_breakdown(total=self.total, payment_option=self.payment_option)

    @property
    def payment_label(self) -> str:
        return email_payment_option_label(self.payment_option)

    @property
    def placed_on(self) -> str:
        """e.g. "October 19, 2026 at 02:30 PM" in the project time zone."""
        local = timezone.localtime(self.placed_at) if timezone.is_aware(self.placed_at) else self.placed_at
        return f"{local:%B} {local.day}, {local.year} at {local:%I:%M %p}"

    # --------------------------------------------------------
    # builders
    # --------------------------------------------------------

    @classmethod
    def from_order(cls, order, *, branding: Branding | None = None) -> "OrderEmailData":
        receiver = None
        if order.has_receiver:
            receiver = ReceiverInfo(
                full_name=order.receiver_name or "",
                phone=order.receiver_phone or "",
                address=order.receiver_address or "",
                city=order.receiver_city or "",
                state=order.receiver_state or "",
                zip_code=order.receiver_zip_code or "",
            )

        items = tuple(
            EmailLineItem(
                name=item.product_name,
                price=money(item.price),
                quantity=int(item.quantity),
                image_url=item.product_image or "",
                selected_color=item.selected_color or None,
                selected_features=tuple(item.selected_features or ()),
            )
            for item in order.items.all()
        )

        return cls(
            order_id=order.order_id,
            customer=ContactInfo(
                full_name=order.customer_name,
                email=order.customer_email,
                phone=order.customer_phone,
                address=order.customer_address,
                city=order.customer_city,
                state=order.customer_state,
                zip_code=order.customer_zip_code,
            ),
            items=items,
            total=money(order.total_amount),
            payment_option=order.payment_option or "full",
            placed_at=order.created_at,
            receiver=receiver,
            receipt_url=order.receipt_url or None,
            branding=branding or Branding.from_settings(),
        )

    @classmethod
    def from_checkout(
        cls,
        *,
        order_id: str,
        customer: dict,
        cart_items,
        total,
        payment_option: str,
        placed_at: datetime,
        receiver: dict | None = None,
        receipt_url: str | None = None,
        branding: Branding | None = None,
    ) -> "OrderEmailData":
        """Same dict shapes that `place_order` accepts."""
        receiver = receiver or {}
        receiver_info = None
        if any(receiver.get(k) for k in ("name", "phone", "address")):
            receiver_info = ReceiverInfo(
                full_name=receiver.get("name") or "",
                phone=receiver.get("phone") or "",
                address=receiver.get("address") or "",
                city=receiver.get("city") or "",
                state=receiver.get("state") or "",
                zip_code=receiver.get("zip_code") or "",
            )

        items = tuple(
            EmailLineItem(
                name=str(raw.get("name") or ""),
                price=money(raw.get("price")),
                quantity=int(raw.get("quantity") or 0),
                image_url=str(raw.get("image_url") or ""),
                selected_color=raw.get("selected_color") or None,
                selected_features=tuple(raw.get("selected_features") or ()),
            )
            for raw in cart_items
        )

        return cls(
            order_id=order_id,
            customer=ContactInfo(
                full_name=customer.get("name") or "",
                email=customer.get("email") or "",
                phone=customer.get("phone") or "",
                address=customer.get("address") or "",
                city=customer.get("city") or "",
                state=customer.get("state") or "",
                zip_code=customer.get("zip_code") or "",
            ),
            items=items,
            total=money(total),
            payment_option=payment_option,
            placed_at=placed_at,
            receiver=receiver_info,
            receipt_url=receipt_url or None,
            branding=branding or Branding.from_settings(),
        )
