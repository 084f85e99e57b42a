# payments/services/verification.py

"""
ADMIN PAYMENT VERIFICATION

GUARANTEES:
- PaymentRecord row locked (select_for_update) for every decision.
- verify on a verified record returns it unchanged (no second confirm,
  no second archive row).
- reject on a rejected record is a no-op; reject on a verified record is
  a ConflictError.
- an order an admin already confirmed only has its payment_status
  settled (paid or failed); its status is left alone.
- refresh_capture_status is the only gateway call here and the only one
  retried (bounded, idempotent status query).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.retry import retry_idempotent
from notifications.models import Notification
from notifications.services.dispatcher import notify
from orders.models import Order
from orders.services.lifecycle_controller import confirm_payment, record_payment_outcome, return_to_pending
from payments.models import PaymentRecord
from payments.services.archive import archive_paid_order
from payments.services.gateway import STATUS_DECLINED, get_gateway
from payments.services.policy import STRATEGY_CAPTURE

logger = logging.getLogger(__name__)

AWAITING_PAYMENT = (Order.STATUS_PENDING, Order.STATUS_WAITING_CONFIRMATION)


@dataclass(frozen=True)
class PaymentDecision:
    payment: PaymentRecord
    order: Order | None
    changed: bool


def _lock_payment(payment_id) -> PaymentRecord:
    try:
        return PaymentRecord.objects.select_for_update().select_related("order", "payer").get(id=payment_id)
    except (PaymentRecord.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise NotFoundError(f"Payment {payment_id} not found", entity_id=payment_id) from exc


def _require_order(payment: PaymentRecord) -> Order:
    if payment.order_id is None:
        raise ConflictError(
            f"Order {payment.order_number} no longer exists",
            entity_id=payment.id,
        )
    return payment.order


def _mark_verified(payment: PaymentRecord, *, actor):
    payment.status = PaymentRecord.STATUS_VERIFIED
    payment.verifier = actor
    payment.verified_at = timezone.now()
    payment.save(update_fields=["status", "verifier", "verified_at", "updated_at"])


# ============================================================
# VERIFY
# ============================================================


@transaction.atomic
def verify_payment(*, payment_id, actor) -> PaymentDecision:
    payment = _lock_payment(payment_id)

    if payment.status == PaymentRecord.STATUS_VERIFIED:
        logger.info("Payment already verified; no-op", extra={"payment_id": str(payment.id)})
        return PaymentDecision(payment=payment, order=payment.order, changed=False)

    if payment.status in (PaymentRecord.STATUS_REJECTED, PaymentRecord.STATUS_FAILED):
        raise ConflictError(
            f"Payment {payment.id} is {payment.status} and cannot be verified",
            entity_id=payment.id,
        )

    order = _require_order(payment)
    if order.status in AWAITING_PAYMENT:
        order = confirm_payment(order=order, method=payment.method)
    else:
        order = record_payment_outcome(order=order, paid=True, method=payment.method)
    _mark_verified(payment, actor=actor)
    archive_paid_order(payment=payment, order=order)

    notify(
        event_type=Notification.EVENT_PAYMENT_VERIFIED,
        recipients=[order.customer],
        order=order,
        title=f"Payment received for order {order.order_number}",
        payload={"order_number": order.order_number, "amount": payment.amount},
    )

    logger.info(
        "Payment verified",
        extra={
            "payment_id": str(payment.id),
            "order_id": str(order.id),
            "actor_id": str(actor.pk),
            "amount": str(payment.amount),
        },
    )
    return PaymentDecision(payment=payment, order=order, changed=True)


# ============================================================
# REJECT
# ============================================================


@transaction.atomic
def reject_payment(*, payment_id, actor, reason: str) -> PaymentDecision:
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A rejection reason is required")

    payment = _lock_payment(payment_id)

    if payment.status == PaymentRecord.STATUS_REJECTED:
        return PaymentDecision(payment=payment, order=payment.order, changed=False)

    if payment.status != PaymentRecord.STATUS_PENDING:
        raise ConflictError(
            f"Payment {payment.id} is {payment.status} and cannot be rejected",
            entity_id=payment.id,
        )

    order = _require_order(payment)
    if order.status in AWAITING_PAYMENT:
        order = return_to_pending(order=order, reason=reason)
    else:
        order = record_payment_outcome(order=order, paid=False, reason=reason)

    payment.status = PaymentRecord.STATUS_REJECTED
    payment.rejection_reason = reason
    payment.verifier = actor
    payment.verified_at = timezone.now()
    payment.save(update_fields=["status", "rejection_reason", "verifier", "verified_at", "updated_at"])

    notify(
        event_type=Notification.EVENT_PAYMENT_REJECTED,
        recipients=[order.customer],
        order=order,
        title=f"Payment for order {order.order_number} was not accepted",
        message=reason,
        payload={"order_number": order.order_number, "reason": reason},
    )

    logger.info(
        "Payment rejected",
        extra={"payment_id": str(payment.id), "order_id": str(order.id), "actor_id": str(actor.pk)},
    )
    return PaymentDecision(payment=payment, order=order, changed=True)


# ============================================================
# GATEWAY STATUS REFRESH
# ============================================================


def refresh_capture_status(*, payment_id, gateway=None) -> PaymentDecision:
    """
    Resolve a capture left pending by a gateway timeout, or confirm an
    order whose capture succeeded but whose confirmation failed.
    """
    try:
        payment = PaymentRecord.objects.select_related("order").get(id=payment_id)
    except (PaymentRecord.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise NotFoundError(f"Payment {payment_id} not found", entity_id=payment_id) from exc

    if payment.kind != STRATEGY_CAPTURE:
        raise ValidationError(f"Payment {payment.id} is not a gateway capture", entity_id=payment.id)

    if payment.status == PaymentRecord.STATUS_VERIFIED:
        return _confirm_if_needed(payment_id=payment.id)

    if payment.status != PaymentRecord.STATUS_PENDING:
        return PaymentDecision(payment=payment, order=payment.order, changed=False)

    gateway = gateway or get_gateway()
    result = retry_idempotent(gateway.fetch_status, reference=payment.external_reference)

    with transaction.atomic():
        payment = _lock_payment(payment_id)
        if payment.status != PaymentRecord.STATUS_PENDING:
            return PaymentDecision(payment=payment, order=payment.order, changed=False)

        if result.approved:
            _mark_verified(payment, actor=None)
            order = payment.order
            if order is not None and order.status in AWAITING_PAYMENT:
                order = confirm_payment(order=order, method=payment.method)
                archive_paid_order(payment=payment, order=order)
            elif order is not None and order.status == Order.STATUS_CANCELLED:
                logger.warning(
                    "Pending capture resolved as captured on a cancelled order",
                    extra={"payment_id": str(payment.id), "order_id": str(order.id)},
                )
            elif order is not None and order.payment_status != Order.PAYMENT_PAID:
                order = record_payment_outcome(order=order, paid=True, method=payment.method)
            logger.info("Pending capture resolved as captured", extra={"payment_id": str(payment.id)})
            return PaymentDecision(payment=payment, order=order, changed=True)

        if result.status == STATUS_DECLINED:
            payment.status = PaymentRecord.STATUS_FAILED
            payment.rejection_reason = result.decline_reason or "Declined by gateway"
            payment.save(update_fields=["status", "rejection_reason", "updated_at"])
            order = payment.order
            if order is not None and order.status in AWAITING_PAYMENT:
                order = return_to_pending(order=order, reason=payment.rejection_reason)
            logger.info("Pending capture resolved as declined", extra={"payment_id": str(payment.id)})
            return PaymentDecision(payment=payment, order=order, changed=True)

    return PaymentDecision(payment=payment, order=payment.order, changed=False)


@transaction.atomic
def _confirm_if_needed(*, payment_id) -> PaymentDecision:
    payment = _lock_payment(payment_id)
    order = payment.order
    if order is None or order.status not in AWAITING_PAYMENT:
        return PaymentDecision(payment=payment, order=order, changed=False)

    order = confirm_payment(order=order, method=payment.method)
    archive_paid_order(payment=payment, order=order)
    logger.info(
        "Captured payment reconciled; order confirmed",
        extra={"payment_id": str(payment.id), "order_id": str(order.id)},
    )
    return PaymentDecision(payment=payment, order=order, changed=True)


def list_pending_payments():
    return PaymentRecord.objects.filter(status=PaymentRecord.STATUS_PENDING).select_related("order", "payer").order_by(
        "created_at"
    )
