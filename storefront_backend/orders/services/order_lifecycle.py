"""
ORDER LIFECYCLE DOMAIN RULES

Allowed order_status transitions for Order entities.

Two policies:
- permissive (default): any known status may be set from any status
- strict (ORDER_STATUS_STRICT_TRANSITIONS=True): the directed graph below

DESIGN PRINCIPLES:
- No database writes
- No side effects
"""

from django.conf import settings

from orders.models import Order

# ============================================================
# DOMAIN ERRORS
# ============================================================


class OrderLifecycleError(Exception):
    pass


class UnknownOrderStatusError(OrderLifecycleError):
    pass


class InvalidOrderTransitionError(OrderLifecycleError):
    pass


# ============================================================
# STATE DEFINITIONS
# ============================================================

KNOWN_STATUSES = {value for value, _label in Order.STATUS_CHOICES}

TERMINAL_STATES = {
    Order.STATUS_COMPLETED,
    Order.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {
        Order.STATUS_PROCESSING,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_PROCESSING: {
        Order.STATUS_COMPLETED,
        Order.STATUS_CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def strict_transitions_enabled() -> bool:
    return bool(getattr(settings, "ORDER_STATUS_STRICT_TRANSITIONS", False))


def can_transition(*, from_status: str, to_status: str, strict: bool | None = None) -> bool:
    if to_status not in KNOWN_STATUSES:
        return False

    if strict is None:
        strict = strict_transitions_enabled()

    if not strict:
        return True

    if from_status == to_status:
        return True

    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: Order, target_status: str, strict: bool | None = None):
    if target_status not in KNOWN_STATUSES:
        raise UnknownOrderStatusError(f"Unknown order status '{target_status}'")

    if not can_transition(
        from_status=order.order_status,
        to_status=target_status,
        strict=strict,
    ):
        raise InvalidOrderTransitionError(
            f"Order {order.order_id} cannot transition from "
            f"'{order.order_status}' to '{target_status}'"
        )
