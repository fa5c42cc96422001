# orders/notifications/resend.py
from __future__ import annotations

import json
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

RESEND_BASE = "https://api.resend.com"


class EmailProviderError(Exception):
    """Raised when the email provider rejects or cannot accept a message."""

    def __init__(self, message: str, *, status: int | None = None, payload: Any = None):
        super().__init__(message)
        self.status = status
        self.payload = payload


def _safe_preview(text: str, limit: int = 800) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _parse_json_or_text(raw: str) -> dict[str, Any]:
    raw = raw or ""
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {"kind": "text", "raw": raw}
    if isinstance(parsed, dict):
        return {"kind": "json", "json": parsed, "raw": raw}
    return {"kind": "json_non_object", "json": parsed, "raw": raw}


def _error_message(parsed: dict[str, Any], fallback: str) -> str:
    body = parsed.get("json") if parsed.get("kind") == "json" else None
    if isinstance(body, dict):
        msg = body.get("message") or body.get("error") or body.get("name")
        if msg:
            return str(msg)
    return _safe_preview(parsed.get("raw", "")) or fallback


def _request_json(
    method: str,
    url: str,
    *,
    api_key: str,
    body: dict | None = None,
    timeout: int = 15,
) -> dict[str, Any]:
    data = None
    if body is not None:
        data = json.dumps(body, ensure_ascii=False).encode("utf-8")

    req = Request(
        url,
        data=data,
        headers={
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "StorefrontOrders/1.0 Python-urllib",
        },
        method=method,
    )

    try:
        with urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        raw = ""
        try:
            raw = e.read().decode("utf-8", errors="replace")
        except OSError:
            pass
        parsed = _parse_json_or_text(raw)
        raise EmailProviderError(
            _error_message(parsed, f"Resend HTTP {e.code}"),
            status=e.code,
            payload=parsed,
        ) from e
    except URLError as e:
        raise EmailProviderError(f"Resend unreachable: {e.reason}") from e
    except (TimeoutError, OSError) as e:
        raise EmailProviderError(f"Resend request failed: {e}") from e

    parsed = _parse_json_or_text(raw)
    if parsed["kind"] != "json":
        raise EmailProviderError(
            f"Resend returned non-JSON response: {_safe_preview(raw)}",
            payload=parsed,
        )
    return parsed["json"]


class ResendClient:
    """
    Minimal client for Resend's transactional email endpoint.

    POST /emails with {from, to[], subject, html, reply_to}; returns the
    provider message id.
    """

    def __init__(self, api_key: str, *, timeout: int = 15, base_url: str = RESEND_BASE):
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    def send(
        self,
        *,
        sender: str,
        to: list[str],
        subject: str,
        html: str,
        reply_to: str | None = None,
    ) -> str:
        body = {
            "from": sender,
            "to": list(to),
            "subject": subject,
            "html": html,
        }
        if reply_to:
            body["reply_to"] = reply_to

        payload = _request_json(
            "POST",
            f"{self.base_url}/emails",
            api_key=self.api_key,
            body=body,
            timeout=self.timeout,
        )

        message_id = payload.get("id")
        if not message_id:
            raise EmailProviderError(
                _error_message({"kind": "json", "json": payload, "raw": ""}, "Resend response missing id"),
                payload=payload,
            )
        return str(message_id)
