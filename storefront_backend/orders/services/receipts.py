# orders/services/receipts.py

"""
PAYMENT RECEIPT STORAGE

Receipts arrive from checkout as base64 data URLs and are written through
Django's default storage under `receipts/<order_id>_receipt.<ext>`.

Upload and URL resolution are separate steps: a stored file whose URL
cannot be produced is returned with url=None and the order still records
the file name.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)

RECEIPT_FOLDER = "receipts"
DEFAULT_EXTENSION = "jpg"

CONTENT_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "pdf": "application/pdf",
}


class ReceiptDecodeError(ValueError):
    pass


@dataclass(frozen=True)
class StoredReceipt:
    file_name: str
    url: str | None
    storage_name: str | None = None


def receipt_extension(file_name: str) -> str:
    name = (file_name or "").strip()
    if "." not in name:
        return DEFAULT_EXTENSION
    return name.rsplit(".", 1)[-1].lower() or DEFAULT_EXTENSION


def content_type_for(file_name: str) -> str:
    return CONTENT_TYPES.get(receipt_extension(file_name), "image/jpeg")


def decode_data_url(data: str) -> bytes:
    """Accepts `data:<mime>;base64,<payload>` or a bare base64 payload."""
    payload = (data or "").strip()
    if payload.startswith("data:"):
        if "," not in payload:
            raise ReceiptDecodeError("Malformed data URL")
        header, payload = payload.split(",", 1)
        mime = header[len("data:"):].split(";", 1)[0].strip().lower()
        if mime and mime not in CONTENT_TYPES.values():
            raise ReceiptDecodeError(f"Unsupported receipt content type: {mime}")

    if not payload:
        raise ReceiptDecodeError("Receipt payload is empty")

    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ReceiptDecodeError("Receipt payload is not valid base64") from exc


def store_receipt(*, order_id: str, data_url: str, file_name: str) -> StoredReceipt:
    """
    Persist the receipt and resolve its public URL.

    Raises ReceiptDecodeError for an undecodable payload or a file type
    outside CONTENT_TYPES. A storage write failure is logged and returned
    as a receipt without URL.
    """
    file_name = (file_name or "").strip() or f"receipt.{DEFAULT_EXTENSION}"
    extension = receipt_extension(file_name)
    if extension not in CONTENT_TYPES:
        raise ReceiptDecodeError(f"Unsupported receipt file type: .{extension}")

    content = decode_data_url(data_url)
    target = f"{RECEIPT_FOLDER}/{order_id}_receipt.{extension}"

    try:
        storage_name = default_storage.save(target, ContentFile(content))
    except OSError:
        logger.exception(
            "Receipt upload failed",
            extra={"order_id": order_id, "receipt_file_name": file_name},
        )
        return StoredReceipt(file_name=file_name, url=None)

    try:
        url = default_storage.url(storage_name)
    except (NotImplementedError, ValueError, OSError):
        logger.warning(
            "Receipt stored but URL could not be resolved",
            extra={"order_id": order_id, "storage_name": storage_name},
        )
        url = None

    logger.info(
        "Receipt stored",
        extra={
            "order_id": order_id,
            "storage_name": storage_name,
            "content_type": content_type_for(file_name),
            "has_url": bool(url),
        },
    )
    return StoredReceipt(file_name=file_name, url=url or None, storage_name=storage_name)


def _storage_name_from_url(url: str) -> str | None:
    media_url = getattr(settings, "MEDIA_URL", "") or ""
    path = urlparse(url).path
    if media_url and path.startswith(media_url):
        return path[len(media_url):]
    return None


def probe_receipt_url(url: str | None, *, timeout: float | None = None) -> bool:
    """
    True when the receipt URL answers a HEAD request with 2xx/3xx.

    URLs under MEDIA_URL are checked against default storage first.
    """
    if not url:
        return False

    name = _storage_name_from_url(url)
    if name:
        try:
            if default_storage.exists(name):
                return True
        except (NotImplementedError, OSError):
            logger.debug("Storage lookup unavailable for receipt", extra={"url": url})

    if urlparse(url).scheme not in {"http", "https"}:
        return False

    if timeout is None:
        console_cfg = getattr(settings, "ORDER_CONSOLE", {}) or {}
        timeout = console_cfg.get("RECEIPT_PROBE_TIMEOUT", 5)

    req = Request(url, method="HEAD", headers={"User-Agent": "StorefrontOrders/1.0"})
    try:
        with urlopen(req, timeout=timeout) as resp:
            return 200 <= resp.status < 400
    except HTTPError as exc:
        logger.warning("Receipt URL not reachable", extra={"url": url, "status": exc.code})
        return False
    except (URLError, TimeoutError, OSError, ValueError):
        logger.warning("Receipt URL probe failed", extra={"url": url})
        return False
