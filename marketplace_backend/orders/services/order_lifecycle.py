"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Order entities.

DESIGN PRINCIPLES:
- No database writes
- No wallet mutation
- No side effects
- Single source of truth

Main line:
    pending -> waiting_confirmation -> confirmed -> processing
            -> shipped -> delivered -> completed

cancelled is reachable from any non-terminal state.
The one backward edge is a rejected manual payment
(waiting_confirmation -> pending).
"""

from core.exceptions import ConflictError
from orders.models import Order

# ============================================================
# DOMAIN ERRORS
# ============================================================


class InvalidOrderTransitionError(ConflictError):
    code = "INVALID_ORDER_TRANSITION"


class OrderTerminalError(InvalidOrderTransitionError):
    code = "ORDER_TERMINAL"


# ============================================================
# STATE DEFINITIONS
# ============================================================

LIFECYCLE = [
    Order.STATUS_PENDING,
    Order.STATUS_WAITING_CONFIRMATION,
    Order.STATUS_CONFIRMED,
    Order.STATUS_PROCESSING,
    Order.STATUS_SHIPPED,
    Order.STATUS_DELIVERED,
    Order.STATUS_COMPLETED,
]

LIFECYCLE_RANK = {status: rank for rank, status in enumerate(LIFECYCLE)}

TERMINAL_STATES = {
    Order.STATUS_COMPLETED,
    Order.STATUS_CANCELLED,
}

# Edges with their own trigger + guard in the controller.
ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {
        Order.STATUS_WAITING_CONFIRMATION,
        Order.STATUS_CONFIRMED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_WAITING_CONFIRMATION: {
        Order.STATUS_CONFIRMED,
        Order.STATUS_PENDING,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_CONFIRMED: {
        Order.STATUS_PROCESSING,
        Order.STATUS_SHIPPED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_PROCESSING: {
        Order.STATUS_SHIPPED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_SHIPPED: {
        Order.STATUS_DELIVERED,
        Order.STATUS_COMPLETED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_DELIVERED: {
        Order.STATUS_COMPLETED,
        Order.STATUS_CANCELLED,
    },
}

# Targets that have a dedicated operation (extra input + side effects).
DEDICATED_TARGETS = {
    Order.STATUS_SHIPPED: "record_shipment (tracking number and carrier required)",
    Order.STATUS_CANCELLED: "cancel (reason required)",
}

SHIPPED_RANK = LIFECYCLE_RANK[Order.STATUS_SHIPPED]


# ============================================================
# DOMAIN RULES
# ============================================================


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATES


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def ensure_not_terminal(*, order: Order):
    if order.status in TERMINAL_STATES:
        raise OrderTerminalError(
            f"Order {order.order_number} is {order.status} and cannot be changed",
            entity_id=order.id,
        )


def validate_transition(*, order: Order, target_status: str):
    ensure_not_terminal(order=order)

    if not can_transition(from_status=order.status, to_status=target_status):
        raise InvalidOrderTransitionError(
            f"Order {order.order_number} cannot transition from "
            f"'{order.status}' to '{target_status}'",
            entity_id=order.id,
        )


def validate_admin_status_edit(*, order: Order, target_status: str):
    """
    Free-form administrative edit.

    - non-terminal orders only
    - forward only along the lifecycle
    - shipped / cancelled need their dedicated operations
    - nothing past `shipped` unless the order has actually shipped
    """
    ensure_not_terminal(order=order)

    if target_status in DEDICATED_TARGETS:
        raise InvalidOrderTransitionError(
            f"Use {DEDICATED_TARGETS[target_status]} to move an order to '{target_status}'",
            entity_id=order.id,
        )

    if target_status not in LIFECYCLE_RANK:
        raise InvalidOrderTransitionError(f"Unknown order status '{target_status}'", entity_id=order.id)

    current_rank = LIFECYCLE_RANK[order.status]
    target_rank = LIFECYCLE_RANK[target_status]

    if target_rank <= current_rank:
        raise InvalidOrderTransitionError(
            f"Order {order.order_number} cannot move back from '{order.status}' to '{target_status}'",
            entity_id=order.id,
        )

    if target_rank > SHIPPED_RANK and current_rank < SHIPPED_RANK:
        raise InvalidOrderTransitionError(
            f"Order {order.order_number} has not shipped yet",
            entity_id=order.id,
        )
