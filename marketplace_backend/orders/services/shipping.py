# orders/services/shipping.py

"""
SHIPMENT RECORDING + TRACKING

- record_shipment: confirmed / processing -> shipped (tracking number required)
- add_tracking_update: timeline entries while the parcel is moving,
  including the exception branch (delayed, customs_hold, lost, ...).
  Never changes Order.status.
- public_tracking_lookup: read-only timeline by tracking number (no auth).
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from notifications.models import Notification
from notifications.services.dispatcher import notify
from orders.models import LogisticsRecord, Order, TrackingUpdate
from orders.services.lifecycle_controller import commit_order, lock_order
from orders.services.order_lifecycle import InvalidOrderTransitionError, validate_transition

logger = logging.getLogger(__name__)


@transaction.atomic
def record_shipment(
    *,
    order_id,
    tracking_number: str,
    carrier: str,
    actor,
    shipping_method: str = "standard",
    estimated_delivery=None,
) -> Order:
    tracking_number = (tracking_number or "").strip()
    carrier = (carrier or "").strip()

    if not tracking_number:
        raise ValidationError("A tracking number is required to ship an order")
    if not carrier:
        raise ValidationError("A carrier is required to ship an order")

    order = lock_order(order_id)
    validate_transition(order=order, target_status=Order.STATUS_SHIPPED)

    now = timezone.now()

    logistics, _ = LogisticsRecord.objects.update_or_create(
        order=order,
        defaults={
            "provider": carrier,
            "tracking_number": tracking_number,
            "shipping_method": (shipping_method or "standard").strip(),
            "current_status": LogisticsRecord.STATUS_SHIPPED,
            "estimated_delivery": estimated_delivery,
            "shipped_at": now,
        },
    )
    TrackingUpdate.objects.create(
        logistics=logistics,
        status=LogisticsRecord.STATUS_SHIPPED,
        description=f"Handed to {carrier}",
        created_by=actor,
    )

    previous = order.status
    order.status = Order.STATUS_SHIPPED
    order.shipped_at = now
    commit_order(order, fields=["status", "shipped_at"])

    notify(
        event_type=Notification.EVENT_ORDER_SHIPPED,
        recipients=[order.customer],
        order=order,
        title=f"Order {order.order_number} is on its way",
        payload={"order_number": order.order_number, "tracking_number": tracking_number, "carrier": carrier},
    )

    logger.info(
        "Order shipped",
        extra={
            "order_id": str(order.id),
            "from_status": previous,
            "tracking_number": tracking_number,
            "carrier": carrier,
            "actor_id": str(actor.pk),
        },
    )
    return order


@transaction.atomic
def add_tracking_update(*, order_id, status: str, actor, location: str = "", description: str = "") -> TrackingUpdate:
    status = (status or "").strip()
    if status not in LogisticsRecord.IN_FLIGHT_STATUSES:
        raise ValidationError(f"'{status}' is not a tracking status that can be posted")

    order = lock_order(order_id)
    logistics = LogisticsRecord.objects.select_for_update().filter(order=order).first()
    if logistics is None:
        raise InvalidOrderTransitionError(
            f"Order {order.order_number} has no shipment to track",
            entity_id=order.id,
        )
    if order.status != Order.STATUS_SHIPPED:
        raise InvalidOrderTransitionError(
            f"Order {order.order_number} is '{order.status}'; tracking updates need a shipped order",
            entity_id=order.id,
        )

    logistics.current_status = status
    logistics.save(update_fields=["current_status", "updated_at"])

    update = TrackingUpdate.objects.create(
        logistics=logistics,
        status=status,
        location=(location or "").strip(),
        description=(description or "").strip(),
        created_by=actor,
    )

    log = logger.warning if status in LogisticsRecord.EXCEPTION_STATUSES else logger.info
    log(
        "Tracking update recorded",
        extra={"order_id": str(order.id), "tracking_status": status, "location": update.location},
    )
    return update


def public_tracking_lookup(*, tracking_number: str) -> dict:
    tracking_number = (tracking_number or "").strip()
    if not tracking_number:
        raise ValidationError("A tracking number is required")

    logistics = (
        LogisticsRecord.objects.select_related("order")
        .prefetch_related("updates")
        .filter(tracking_number=tracking_number)
        .order_by("-created_at")
        .first()
    )
    if logistics is None:
        raise NotFoundError(f"Tracking number {tracking_number} not found", entity_id=tracking_number)

    labels = dict(LogisticsRecord.STATUS_CHOICES)

    return {
        "tracking_number": logistics.tracking_number,
        "carrier": logistics.provider,
        "status": logistics.current_status,
        "status_label": labels.get(logistics.current_status, logistics.current_status),
        "order_status_label": logistics.order.status_label,
        "estimated_delivery": logistics.estimated_delivery,
        "shipped_at": logistics.shipped_at,
        "delivered_at": logistics.actual_delivery,
        "timeline": [
            {
                "status": update.status,
                "status_label": labels.get(update.status, update.status),
                "location": update.location,
                "description": update.description,
                "timestamp": update.created_at,
            }
            for update in logistics.updates.all()
        ],
    }
