# public/views/order.py
from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.services import order_gateway
from orders.services.order_gateway import OrderNotFoundError
from public.serializers import PublicOrderStatusResponseSerializer
from public.throttles import PublicPollThrottle


class PublicOrderStatusView(APIView):
    """
    GET /api/public/order/<order_id>/

    Lookup by the public order id shown on the confirmation page.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        responses={
            200: PublicOrderStatusResponseSerializer,
            404: OpenApiResponse(description="Order not found"),
        },
    )
    def get(self, request, order_id: str):
        try:
            order = order_gateway.get_order_by_public_id(order_id)
        except OrderNotFoundError:
            return Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)

        return Response(PublicOrderStatusResponseSerializer(order).data, status=status.HTTP_200_OK)
