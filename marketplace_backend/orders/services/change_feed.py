# orders/services/change_feed.py

"""
AUTHORITATIVE ORDER CHANGE FEED

Every controller write appends one OrderChangeEvent inside the same
transaction, so a dashboard that resyncs with ?after=<sequence> sees
exactly the committed history, in commit order per order id.
"""

from __future__ import annotations

from orders.models import Order, OrderChangeEvent

DEFAULT_PAGE_SIZE = 200
MAX_PAGE_SIZE = 1000


def order_snapshot(order: Order) -> dict:
    """
    JSON-safe projection of an order used by the feed and deletion audit.
    """
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "customer_id": str(order.customer_id),
        "partner_id": str(order.partner_id) if order.partner_id else None,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "total_amount": str(order.total_amount),
        "currency": order.currency,
        "cancellation_reason": order.cancellation_reason,
        "version": order.version,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
    }


def record_change(*, order: Order, event_type: str) -> OrderChangeEvent:
    snapshot = {} if event_type == OrderChangeEvent.TYPE_DELETE else order_snapshot(order)

    return OrderChangeEvent.objects.create(
        order_id=order.id,
        order_number=order.order_number,
        event_type=event_type,
        snapshot=snapshot,
    )


def changes_since(*, after_sequence: int = 0, limit: int = DEFAULT_PAGE_SIZE):
    limit = max(1, min(int(limit or DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE))
    return list(
        OrderChangeEvent.objects.filter(sequence__gt=int(after_sequence or 0)).order_by("sequence")[:limit]
    )


def latest_sequence() -> int:
    last = OrderChangeEvent.objects.order_by("-sequence").values_list("sequence", flat=True).first()
    return int(last or 0)
