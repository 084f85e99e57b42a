# orders/services/lifecycle_controller.py

"""
ORDER LIFECYCLE CONTROLLER (SOLE WRITER OF Order.status)

Applies the rules in order_lifecycle.py and owns the side effects
(notifications, logistics upserts, partner payouts).

GUARANTEES (every transition):
- Order row locked with select_for_update for the whole transition;
  two transitions on the same order never interleave.
- version += 1 and one OrderChangeEvent in the same transaction.
- Terminal orders reject every status-changing call with a ConflictError.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from core.money import ZERO, money
from notifications.models import Notification
from notifications.services.dispatcher import notify
from orders.models import LogisticsRecord, Order, OrderChangeEvent, TrackingUpdate
from orders.services.change_feed import record_change
from orders.services.order_lifecycle import (
    InvalidOrderTransitionError,
    ensure_not_terminal,
    validate_admin_status_edit,
    validate_transition,
)
from wallet.models import WalletTransaction
from wallet.services.ledger import credit

logger = logging.getLogger(__name__)


# ============================================================
# LOCK + COMMIT PRIMITIVES
# ============================================================


def lock_order(order_id) -> Order:
    """
    Must be called inside transaction.atomic.
    """
    try:
        return Order.objects.select_for_update().get(id=order_id)
    except (Order.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise NotFoundError(f"Order {order_id} not found", entity_id=order_id) from exc


def commit_order(order: Order, *, fields) -> Order:
    """
    Persist `fields`, bump version, append the change event.
    """
    Order.objects.filter(pk=order.pk).update(version=F("version") + 1)
    order.save(update_fields=[*fields, "updated_at"])
    order.refresh_from_db(fields=["version", "updated_at"])
    record_change(order=order, event_type=OrderChangeEvent.TYPE_UPDATE)
    return order


def _log_transition(order: Order, *, from_status: str, actor=None, **context):
    logger.info(
        "Order status changed",
        extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "from_status": from_status,
            "to_status": order.status,
            "actor_id": str(actor.pk) if actor is not None else None,
            **context,
        },
    )


# ============================================================
# PAYMENT HOOKS (called by the payment router / verification)
# ============================================================


@transaction.atomic
def mark_waiting_confirmation(*, order: Order, method: str = "") -> Order:
    locked = lock_order(order.id)
    validate_transition(order=locked, target_status=Order.STATUS_WAITING_CONFIRMATION)

    previous = locked.status
    locked.status = Order.STATUS_WAITING_CONFIRMATION
    fields = ["status"]
    if method:
        locked.payment_method = method
        fields.append("payment_method")

    commit_order(locked, fields=fields)
    _log_transition(locked, from_status=previous, method=method)
    return locked


@transaction.atomic
def confirm_payment(*, order: Order, method: str = "") -> Order:
    """
    pending / waiting_confirmation -> confirmed, payment_status = paid.
    """
    locked = lock_order(order.id)

    if locked.status not in (Order.STATUS_PENDING, Order.STATUS_WAITING_CONFIRMATION):
        ensure_not_terminal(order=locked)
        raise InvalidOrderTransitionError(
            f"Order {locked.order_number} is '{locked.status}' and is not awaiting payment",
            entity_id=locked.id,
        )
    validate_transition(order=locked, target_status=Order.STATUS_CONFIRMED)

    previous = locked.status
    locked.status = Order.STATUS_CONFIRMED
    locked.payment_status = Order.PAYMENT_PAID
    locked.payment_rejection_reason = ""
    locked.confirmed_at = timezone.now()
    fields = ["status", "payment_status", "payment_rejection_reason", "confirmed_at"]
    if method:
        locked.payment_method = method
        fields.append("payment_method")

    commit_order(locked, fields=fields)
    _log_transition(locked, from_status=previous, method=method)

    if locked.partner_id:
        notify(
            event_type=Notification.EVENT_ORDER_CONFIRMED,
            recipients=[locked.partner],
            order=locked,
            title=f"Order {locked.order_number} confirmed",
            payload={"order_number": locked.order_number},
        )
    return locked


@transaction.atomic
def return_to_pending(*, order: Order, reason: str) -> Order:
    """
    waiting_confirmation -> pending after a rejected payment.
    A still-pending order only records the failed payment.
    """
    locked = lock_order(order.id)

    if locked.status not in (Order.STATUS_PENDING, Order.STATUS_WAITING_CONFIRMATION):
        ensure_not_terminal(order=locked)
        raise InvalidOrderTransitionError(
            f"Order {locked.order_number} is '{locked.status}' and is no longer awaiting payment",
            entity_id=locked.id,
        )

    previous = locked.status
    locked.status = Order.STATUS_PENDING
    locked.payment_status = Order.PAYMENT_FAILED
    locked.payment_rejection_reason = reason or ""

    commit_order(locked, fields=["status", "payment_status", "payment_rejection_reason"])
    _log_transition(locked, from_status=previous, reason=reason)
    return locked


@transaction.atomic
def record_payment_outcome(*, order: Order, paid: bool, reason: str = "", method: str = "") -> Order:
    """
    Settle payment_status on an order that already moved past payment
    (admin confirmed it first). Status is left as it is.
    """
    locked = lock_order(order.id)

    if locked.status == Order.STATUS_CANCELLED:
        ensure_not_terminal(order=locked)

    locked.payment_status = Order.PAYMENT_PAID if paid else Order.PAYMENT_FAILED
    locked.payment_rejection_reason = "" if paid else (reason or "")
    fields = ["payment_status", "payment_rejection_reason"]
    if method:
        locked.payment_method = method
        fields.append("payment_method")

    commit_order(locked, fields=fields)
    logger.info(
        "Order payment settled after confirmation",
        extra={
            "order_id": str(locked.id),
            "order_number": locked.order_number,
            "status": locked.status,
            "payment_status": locked.payment_status,
        },
    )
    return locked


# ============================================================
# ADMIN OPERATIONS
# ============================================================


@transaction.atomic
def confirm_order(*, order_id, actor) -> Order:
    order = lock_order(order_id)
    ensure_not_terminal(order=order)

    if order.status != Order.STATUS_WAITING_CONFIRMATION:
        raise InvalidOrderTransitionError(
            f"Only orders waiting for confirmation can be confirmed (order is '{order.status}')",
            entity_id=order.id,
        )

    previous = order.status
    order.status = Order.STATUS_CONFIRMED
    order.confirmed_at = timezone.now()
    commit_order(order, fields=["status", "confirmed_at"])
    _log_transition(order, from_status=previous, actor=actor)

    if order.partner_id:
        notify(
            event_type=Notification.EVENT_ORDER_CONFIRMED,
            recipients=[order.partner],
            order=order,
            title=f"Order {order.order_number} confirmed",
            payload={"order_number": order.order_number},
        )
    return order


@transaction.atomic
def assign_partner(*, order_id, partner, actor) -> Order:
    order = lock_order(order_id)
    ensure_not_terminal(order=order)

    if partner is None or not getattr(partner, "is_partner", False):
        raise ValidationError("Orders can only be assigned to partner accounts")
    if not partner.is_active:
        raise ValidationError("Partner account is inactive", entity_id=partner.pk)

    if order.partner_id == partner.pk:
        return order

    previous_partner_id = order.partner_id
    order.partner = partner
    commit_order(order, fields=["partner"])

    notify(
        event_type=Notification.EVENT_ORDER_ASSIGNED,
        recipients=[partner],
        order=order,
        title=f"Order {order.order_number} assigned to you",
        payload={"order_number": order.order_number, "total_amount": order.total_amount},
    )

    logger.info(
        "Order partner assigned",
        extra={
            "order_id": str(order.id),
            "partner_id": str(partner.pk),
            "previous_partner_id": str(previous_partner_id) if previous_partner_id else None,
            "actor_id": str(actor.pk),
        },
    )
    return order


def _commission_rate(partner) -> Decimal:
    rate = getattr(partner, "commission_rate", None)
    if rate is None:
        rate = getattr(settings, "PARTNER_COMMISSION_RATE", Decimal("10"))
    return Decimal(str(rate))


def _pay_commission(order: Order):
    amount = money(order.total_amount * _commission_rate(order.partner) / Decimal("100"))
    if amount <= ZERO:
        return None

    entry = credit(
        user=order.partner,
        amount=amount,
        tx_type=WalletTransaction.TYPE_EARNING,
        description=f"Commission for order {order.order_number}",
        related_order=order,
        idempotency_key=f"earning:{order.id}",
    )

    notify(
        event_type=Notification.EVENT_COMMISSION_PAID,
        recipients=[order.partner],
        order=order,
        title=f"Commission paid for order {order.order_number}",
        payload={"order_number": order.order_number, "amount": amount},
    )
    return entry


def _complete_locked(order: Order, *, actor) -> Order:
    validate_transition(order=order, target_status=Order.STATUS_COMPLETED)

    now = timezone.now()
    previous = order.status

    logistics = LogisticsRecord.objects.filter(order=order).first()
    if logistics is not None:
        logistics.current_status = LogisticsRecord.STATUS_DELIVERED
        logistics.actual_delivery = now
        logistics.save(update_fields=["current_status", "actual_delivery", "updated_at"])
        TrackingUpdate.objects.create(
            logistics=logistics,
            status=LogisticsRecord.STATUS_DELIVERED,
            description="Delivered",
            created_by=actor,
        )

    order.status = Order.STATUS_COMPLETED
    order.delivered_at = order.delivered_at or now
    fields = ["status", "delivered_at"]

    if order.partner_id and order.payment_status == Order.PAYMENT_PAID:
        _pay_commission(order)
        order.partner_payout_status = Order.PAYOUT_COMPLETED
        fields.append("partner_payout_status")

    commit_order(order, fields=fields)
    _log_transition(order, from_status=previous, actor=actor)

    notify(
        event_type=Notification.EVENT_ORDER_COMPLETED,
        recipients=[order.customer],
        order=order,
        title=f"Order {order.order_number} delivered",
        payload={"order_number": order.order_number},
    )
    return order


@transaction.atomic
def complete_order(*, order_id, actor) -> Order:
    """
    shipped / delivered -> completed (admin marks delivered).
    """
    return _complete_locked(lock_order(order_id), actor=actor)


@transaction.atomic
def update_status(*, order_id, target_status: str, actor) -> Order:
    """
    Administrative free-form edit: forward-only, non-terminal orders only.
    """
    order = lock_order(order_id)
    target_status = (target_status or "").strip()

    validate_admin_status_edit(order=order, target_status=target_status)

    if target_status == Order.STATUS_COMPLETED:
        return _complete_locked(order, actor=actor)

    now = timezone.now()
    previous = order.status
    order.status = target_status
    fields = ["status"]

    if target_status == Order.STATUS_CONFIRMED and order.confirmed_at is None:
        order.confirmed_at = now
        fields.append("confirmed_at")

    if target_status == Order.STATUS_DELIVERED:
        order.delivered_at = now
        fields.append("delivered_at")
        logistics = LogisticsRecord.objects.filter(order=order).first()
        if logistics is not None:
            logistics.current_status = LogisticsRecord.STATUS_DELIVERED
            logistics.actual_delivery = now
            logistics.save(update_fields=["current_status", "actual_delivery", "updated_at"])

    commit_order(order, fields=fields)
    _log_transition(order, from_status=previous, actor=actor)
    return order
