# orders/services/deletion.py

"""
ADMIN ORDER DELETE (IRREVERSIBLE)

Cascade:
- removed: OrderItem, LogisticsRecord + TrackingUpdate, Notification
- kept:    PaymentRecord and WalletTransaction (FK set to NULL; their
           order_number snapshot keeps them traceable)

Audit:
- one immutable OrderDeletionAudit with the acting admin, the order
  snapshot and the cascade counts
- a `delete` change event so open dashboards drop the order

Access is a capability gate only (orders.delete). There is no per-order
ownership scope: every admin may delete every order.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from django.db import transaction

from core.exceptions import PermissionDeniedError
from orders.models import OrderChangeEvent, OrderDeletionAudit, OrderItem, TrackingUpdate
from orders.services.change_feed import order_snapshot, record_change
from orders.services.lifecycle_controller import lock_order
from permissions.roles import CAP_ORDERS_DELETE, user_has_capability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletionSummary:
    order_id: str
    order_number: str
    items_deleted: int
    logistics_deleted: int
    tracking_updates_deleted: int
    notifications_deleted: int
    payments_detached: int
    wallet_transactions_detached: int
    audit_id: str

    def as_dict(self) -> dict:
        return asdict(self)


@transaction.atomic
def delete_order(*, order_id, actor) -> DeletionSummary:
    if not user_has_capability(actor, CAP_ORDERS_DELETE):
        raise PermissionDeniedError("Only administrators can delete orders", entity_id=order_id)

    order = lock_order(order_id)

    counts = {
        "items_deleted": OrderItem.objects.filter(order=order).count(),
        "logistics_deleted": 1 if hasattr(order, "logistics") else 0,
        "tracking_updates_deleted": TrackingUpdate.objects.filter(logistics__order=order).count(),
        "notifications_deleted": order.notifications.count(),
        "payments_detached": order.payment_records.count(),
        "wallet_transactions_detached": order.wallet_transactions.count(),
    }

    snapshot = order_snapshot(order)
    snapshot["items"] = [
        {
            "product_id": str(item.product_id),
            "sku": item.sku,
            "quantity": item.quantity,
            "unit_price": str(item.unit_price),
            "subtotal": str(item.subtotal),
        }
        for item in OrderItem.objects.filter(order=order)
    ]

    audit = OrderDeletionAudit.objects.create(
        order_id=order.id,
        order_number=order.order_number,
        deleted_by=actor,
        order_snapshot=snapshot,
        cascade_summary=counts,
    )

    order_pk = order.pk
    order_number = order.order_number

    record_change(order=order, event_type=OrderChangeEvent.TYPE_DELETE)
    order.delete()

    logger.warning(
        "Order deleted",
        extra={
            "order_id": str(order_pk),
            "order_number": order_number,
            "actor_id": str(actor.pk),
            "audit_id": str(audit.id),
            **counts,
        },
    )

    return DeletionSummary(
        order_id=str(order_pk),
        order_number=order_number,
        audit_id=str(audit.id),
        **counts,
    )
