# public/views/checkout.py
"""
PUBLIC CHECKOUT (ONLINE STORE)

POST /api/public/checkout/

Flow:
1) Validate request shape
2) Store the payment receipt (optional, base64 data URL)
3) place_order(): Order + items in one transaction
4) Order emails (best effort; outcomes are returned, never fail the checkout)

Orders start as order_status="processing", payment_status="pending".
Payment is verified manually by staff from the uploaded receipt.

Security hardening:
- Throttle (public_write) because it's a write endpoint (abuse target)
"""

from __future__ import annotations

import logging

from django.core.files.storage import default_storage
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.notifications.dispatcher import OrderNotifier
from orders.notifications.payload import OrderEmailData
from orders.services.order_assembly import (
    OrderAssemblyError,
    generate_order_id,
    place_order,
)
from orders.services.order_gateway import (
    DuplicateOrderError,
    InvalidOrderDataError,
    OrderPersistenceError,
)
from orders.services.receipts import ReceiptDecodeError, store_receipt
from public.serializers import PublicCheckoutResponseSerializer, PublicCheckoutSerializer
from public.throttles import PublicWriteThrottle

logger = logging.getLogger(__name__)


def _discard_receipt(stored) -> None:
    if stored is None or not stored.storage_name:
        return
    try:
        default_storage.delete(stored.storage_name)
    except OSError:
        logger.warning("Could not remove orphan receipt", extra={"storage_name": stored.storage_name})


class PublicCheckoutView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [JSONParser]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        request=PublicCheckoutSerializer,
        responses={
            201: PublicCheckoutResponseSerializer,
            400: OpenApiResponse(description="Invalid checkout input"),
            409: OpenApiResponse(description="Duplicate order id"),
            500: OpenApiResponse(description="Order could not be saved"),
        },
    )
    def post(self, request):
        ser = PublicCheckoutSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        order_id = (data.get("order_id") or "").strip() or generate_order_id()

        stored = None
        if data.get("receipt_file"):
            try:
                stored = store_receipt(
                    order_id=order_id,
                    data_url=data["receipt_file"],
                    file_name=data["receipt_file_name"],
                )
            except ReceiptDecodeError as exc:
                return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        receipt_url = stored.url if stored else None
        if receipt_url and receipt_url.startswith("/"):
            receipt_url = request.build_absolute_uri(receipt_url)

        receiver = dict(data["receiver"]) if data.get("receiver") else None

        try:
            placed = place_order(
                cart_items=[dict(line) for line in data["cart"]],
                customer=dict(data["customer"]),
                receiver=receiver,
                payment_option=data["payment_option"],
                total=data.get("total"),
                order_id=order_id,
                receipt_url=receipt_url,
                receipt_file_name=stored.file_name if stored else None,
            )
        except (OrderAssemblyError, InvalidOrderDataError) as exc:
            _discard_receipt(stored)
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except DuplicateOrderError as exc:
            _discard_receipt(stored)
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except OrderPersistenceError:
            _discard_receipt(stored)
            return Response(
                {"detail": "Failed to create order"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        email_data = OrderEmailData.from_order(placed.order)
        results = OrderNotifier.from_settings().send_order_emails(email_data, placed.db_id)

        return Response(
            {
                "success": True,
                "order_id": placed.order_id,
                "order_db_id": placed.db_id,
                "total_amount": str(placed.order.total_amount),
                "deposit_amount": None if placed.deposit_amount is None else str(placed.deposit_amount),
                "remaining_balance": None if placed.remaining_balance is None else str(placed.remaining_balance),
                "receipt_url": placed.order.receipt_url,
                "notifications": {
                    "customer_email": results["customer_email"].to_dict(),
                    "admin_email": results["admin_email"].to_dict(),
                },
            },
            status=status.HTTP_201_CREATED,
        )
