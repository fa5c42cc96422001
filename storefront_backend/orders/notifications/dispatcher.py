# orders/notifications/dispatcher.py

"""
ORDER NOTIFICATION DISPATCHER

Sends the composed order emails through the configured provider.

Rules:
- Never raises into callers: every outcome is an EmailResult
- Missing provider key => "Email service not configured"
- Customer confirmations are gated by CUSTOMER_CONFIRMATION_ENABLED
- No deduplication; callers may retry
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable

from django.conf import settings

from orders.notifications import composer
from orders.notifications.payload import OrderEmailData
from orders.notifications.resend import EmailProviderError, ResendClient

logger = logging.getLogger("orders.notifications")

SendCallable = Callable[..., str]


@dataclass(frozen=True)
class EmailResult:
    success: bool
    message: str
    error: str | None = None

    def to_dict(self) -> dict:
        out = asdict(self)
        if out["error"] is None:
            out.pop("error")
        return out


NOT_CONFIGURED = EmailResult(
    success=False,
    message="Email service not configured",
    error="RESEND_API_KEY not found",
)

CUSTOMER_SKIPPED = EmailResult(
    success=True,
    message="Customer confirmation email skipped (disabled)",
)


class OrderNotifier:
    def __init__(
        self,
        *,
        api_key: str = "",
        admin_email: str = "",
        sender: str = "",
        reply_to: str = "",
        customer_confirmation_enabled: bool = False,
        send: SendCallable | None = None,
    ):
        self.api_key = (api_key or "").strip()
        self.admin_email = (admin_email or "").strip()
        self.sender = (sender or "").strip() or "Storefront <onboarding@resend.dev>"
        self.reply_to = (reply_to or "").strip() or None
        self.customer_confirmation_enabled = bool(customer_confirmation_enabled)
        self._send = send

    @classmethod
    def from_settings(cls, *, send: SendCallable | None = None) -> "OrderNotifier":
        cfg = getattr(settings, "ORDER_NOTIFICATIONS", {}) or {}
        resend_cfg = cfg.get("RESEND") or {}
        return cls(
            api_key=resend_cfg.get("API_KEY", ""),
            admin_email=cfg.get("ADMIN_EMAIL", ""),
            sender=cfg.get("FROM", ""),
            reply_to=cfg.get("REPLY_TO", ""),
            customer_confirmation_enabled=cfg.get("CUSTOMER_CONFIRMATION_ENABLED", False),
            send=send,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _deliver(self, *, to: str, subject: str, html: str) -> str:
        send = self._send or ResendClient(self.api_key).send
        return send(
            sender=self.sender,
            to=[to],
            subject=subject,
            html=html,
            reply_to=self.reply_to,
        )

    # ============================================================
    # SINGLE SENDS
    # ============================================================

    def send_customer_confirmation(self, data: OrderEmailData, db_id=None) -> EmailResult:
        if not self.customer_confirmation_enabled:
            logger.info(
                "Customer confirmation skipped",
                extra={"order_id": data.order_id, "db_id": db_id},
            )
            return CUSTOMER_SKIPPED

        if not self.configured:
            logger.warning("Email provider not configured", extra={"order_id": data.order_id})
            return NOT_CONFIGURED

        try:
            message_id = self._deliver(
                to=data.customer.email,
                subject=composer.subject_for(composer.CUSTOMER_CONFIRMATION, data),
                html=composer.render_customer_confirmation(data),
            )
        except EmailProviderError as exc:
            logger.error(
                "Customer confirmation failed",
                extra={"order_id": data.order_id, "db_id": db_id, "error": str(exc)},
            )
            return EmailResult(
                success=False,
                message="Failed to send customer confirmation email",
                error=str(exc),
            )

        logger.info(
            "Customer confirmation sent",
            extra={"order_id": data.order_id, "db_id": db_id, "message_id": message_id},
        )
        return EmailResult(success=True, message="Customer confirmation email sent successfully")

    def resolve_admin_recipient(self, data: OrderEmailData, admin_email: str | None = None) -> str:
        recipient = (admin_email or "").strip() or self.admin_email
        if recipient:
            return recipient

        # Test-only fallback: without ADMIN_EMAIL the alert goes to the customer.
        logger.warning(
            "ADMIN_EMAIL not set; admin alert falls back to the customer address",
            extra={"order_id": data.order_id},
        )
        return data.customer.email

    def send_admin_notification(
        self,
        data: OrderEmailData,
        db_id,
        admin_email: str | None = None,
    ) -> EmailResult:
        if not self.configured:
            logger.warning("Email provider not configured", extra={"order_id": data.order_id})
            return NOT_CONFIGURED

        recipient = self.resolve_admin_recipient(data, admin_email)

        try:
            message_id = self._deliver(
                to=recipient,
                subject=composer.subject_for(composer.ADMIN_ALERT, data),
                html=composer.render_admin_alert(data, db_id),
            )
        except EmailProviderError as exc:
            logger.error(
                "Admin notification failed",
                extra={"order_id": data.order_id, "db_id": db_id, "error": str(exc)},
            )
            return EmailResult(
                success=False,
                message="Failed to send admin notification email",
                error=str(exc),
            )

        logger.info(
            "Admin notification sent",
            extra={"order_id": data.order_id, "db_id": db_id, "message_id": message_id},
        )
        return EmailResult(success=True, message="Admin notification email sent successfully")

    # ============================================================
    # COMBINED
    # ============================================================

    def send_order_emails(
        self,
        data: OrderEmailData,
        db_id,
        admin_email: str | None = None,
    ) -> dict[str, EmailResult]:
        """
        Attempt both sends independently; a failure in one never prevents
        the other. Both keys are always present.
        """
        try:
            customer_result = self.send_customer_confirmation(data, db_id)
        except Exception as exc:
            logger.exception("Customer confirmation raised", extra={"order_id": data.order_id})
            customer_result = EmailResult(
                success=False,
                message="Customer email failed",
                error=str(exc) or exc.__class__.__name__,
            )

        try:
            admin_result = self.send_admin_notification(data, db_id, admin_email)
        except Exception as exc:
            logger.exception("Admin notification raised", extra={"order_id": data.order_id})
            admin_result = EmailResult(
                success=False,
                message="Admin email failed",
                error=str(exc) or exc.__class__.__name__,
            )

        logger.info(
            "Order emails processed",
            extra={
                "order_id": data.order_id,
                "customer_success": customer_result.success,
                "admin_success": admin_result.success,
            },
        )
        return {"customer_email": customer_result, "admin_email": admin_result}

    # ============================================================
    # DIAGNOSTICS
    # ============================================================

    def test_email_service(self) -> EmailResult:
        if not self.configured:
            return NOT_CONFIGURED

        recipient = self.admin_email or getattr(settings, "SUPPORT_EMAIL", "")
        if not recipient:
            return EmailResult(
                success=False,
                message="Email service test failed",
                error="ADMIN_EMAIL not configured",
            )

        try:
            self._deliver(
                to=recipient,
                subject=composer.subject_for("test"),
                html=composer.TEST_EMAIL_HTML,
            )
        except EmailProviderError as exc:
            return EmailResult(success=False, message="Email service test failed", error=str(exc))

        return EmailResult(success=True, message="Email service test successful")
