# orders/api/viewsets/order.py

"""
======================================================
PATH: orders/api/viewsets/order.py
======================================================
ORDER VIEWSET (STAFF)

Purpose:
- Order console API for staff UI.
- List (search + status filter, paginated) and retrieve orders.
- Update order status, delete orders (explicit confirmation).
- Receipt display, customer-copy email, notification re-send.

Security:
- Requires IsAuthenticated + IsAdminUser (is_staff)

Delete rules:
- DELETE /api/orders/<pk>/?confirm=<order_id>
  The confirm value must echo the order's public order_id.
======================================================
"""

from __future__ import annotations

import logging

from django.db.models import Count, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from orders.api.filters import OrderFilter
from orders.models import Order
from orders.notifications.composer import CUSTOMER_COPY, render_customer_copy, subject_for
from orders.notifications.dispatcher import OrderNotifier
from orders.notifications.payload import OrderEmailData
from orders.serializers import (
    EmailResultSerializer,
    NotifyInputSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatsSerializer,
    OrderStatusUpdateSerializer,
)
from orders.services import order_gateway
from orders.services.order_console import build_receipt_display
from orders.services.order_gateway import (
    OrderNotFoundError,
    OrderPersistenceError,
    RelatedDataError,
)
from orders.services.order_lifecycle import (
    InvalidOrderTransitionError,
    OrderLifecycleError,
    validate_transition,
)

logger = logging.getLogger(__name__)


class OrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, IsAdminUser]
    filterset_class = OrderFilter

    def get_queryset(self):
        return Order.objects.all().prefetch_related("items").order_by("-created_at", "-id")

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        return OrderSerializer

    # ======================================================
    # STATUS
    # PATCH /api/orders/:id/status/
    # ======================================================

    @extend_schema(
        request=OrderStatusUpdateSerializer,
        responses={200: OrderSerializer},
    )
    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):
        order: Order = self.get_object()

        ser = OrderStatusUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        target = ser.validated_data["order_status"]

        try:
            validate_transition(order=order, target_status=target)
            updated = order_gateway.update_order_status(order.pk, target)
        except InvalidOrderTransitionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except OrderLifecycleError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except OrderNotFoundError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except OrderPersistenceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        logger.info(
            "Order status changed by staff",
            extra={"db_id": order.pk, "order_status": target, "user": request.user.pk},
        )
        return Response(OrderSerializer(updated).data, status=status.HTTP_200_OK)

    # ======================================================
    # DELETE
    # DELETE /api/orders/:id/?confirm=<order_id>
    # ======================================================

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="confirm",
                description="Must equal the order's public order_id.",
                required=True,
                type=str,
            )
        ],
        responses={204: None},
    )
    def destroy(self, request, pk=None):
        order: Order = self.get_object()

        confirm = (request.query_params.get("confirm") or "").strip()
        if confirm != order.order_id:
            return Response(
                {"detail": f"Confirmation required: pass ?confirm={order.order_id} to delete this order."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            items_deleted = order_gateway.delete_order(order.pk)
        except RelatedDataError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except OrderNotFoundError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except OrderPersistenceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        logger.info(
            "Order deleted by staff",
            extra={"order_id": order.order_id, "items_deleted": items_deleted, "user": request.user.pk},
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ======================================================
    # STATS
    # GET /api/orders/stats/
    # ======================================================

    @extend_schema(responses={200: OrderStatsSerializer})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        data = Order.objects.aggregate(
            total=Count("id"),
            processing=Count("id", filter=Q(order_status=Order.STATUS_PROCESSING)),
            completed=Count("id", filter=Q(order_status=Order.STATUS_COMPLETED)),
            pending=Count("id", filter=Q(order_status=Order.STATUS_PENDING)),
            cancelled=Count("id", filter=Q(order_status=Order.STATUS_CANCELLED)),
            paid=Count("id", filter=Q(payment_status=Order.PAYMENT_PAID)),
        )
        return Response(OrderStatsSerializer(data).data, status=status.HTTP_200_OK)

    # ======================================================
    # RECEIPT
    # GET /api/orders/:id/receipt/
    # ======================================================

    @extend_schema(responses={200: serializers.DictField()})
    @action(detail=True, methods=["get"], url_path="receipt")
    def receipt(self, request, pk=None):
        order: Order = self.get_object()
        return Response(build_receipt_display(order).to_dict(), status=status.HTTP_200_OK)

    # ======================================================
    # CUSTOMER COPY EMAIL (manual forwarding)
    # POST /api/orders/:id/customer-email/
    # ======================================================

    @extend_schema(request=None, responses={200: serializers.DictField()})
    @action(detail=True, methods=["post"], url_path="customer-email")
    def customer_email(self, request, pk=None):
        order: Order = self.get_object()
        data = OrderEmailData.from_order(order)
        return Response(
            {
                "order_id": order.order_id,
                "to": order.customer_email,
                "subject": subject_for(CUSTOMER_COPY, data),
                "html": render_customer_copy(data, order.pk),
            },
            status=status.HTTP_200_OK,
        )

    # ======================================================
    # NOTIFY (re-send order emails)
    # POST /api/orders/:id/notify/
    # ======================================================

    @extend_schema(
        request=NotifyInputSerializer,
        responses={200: serializers.DictField()},
    )
    @action(detail=True, methods=["post"], url_path="notify")
    def notify(self, request, pk=None):
        order: Order = self.get_object()

        ser = NotifyInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        results = OrderNotifier.from_settings().send_order_emails(
            OrderEmailData.from_order(order),
            order.pk,
            admin_email=ser.validated_data.get("admin_email") or None,
        )
        return Response(
            {
                "order_id": order.order_id,
                "customer_email": results["customer_email"].to_dict(),
                "admin_email": results["admin_email"].to_dict(),
            },
            status=status.HTTP_200_OK,
        )

    # ======================================================
    # EMAIL SERVICE TEST
    # POST /api/orders/email-test/
    # ======================================================

    @extend_schema(request=None, responses={200: EmailResultSerializer, 502: EmailResultSerializer})
    @action(detail=False, methods=["post"], url_path="email-test")
    def email_test(self, request):
        result = OrderNotifier.from_settings().test_email_service()
        http_status = status.HTTP_200_OK if result.success else status.HTTP_502_BAD_GATEWAY
        return Response(result.to_dict(), status=http_status)
