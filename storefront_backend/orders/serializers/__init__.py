from .order import (
    EmailResultSerializer,
    NotifyInputSerializer,
    OrderItemSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatsSerializer,
    OrderStatusUpdateSerializer,
)

__all__ = [
    "EmailResultSerializer",
    "NotifyInputSerializer",
    "OrderItemSerializer",
    "OrderListSerializer",
    "OrderSerializer",
    "OrderStatsSerializer",
    "OrderStatusUpdateSerializer",
]
