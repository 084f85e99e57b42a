# orders/services/cancellation.py

"""
ORDER CANCELLATION + PARTNER REFUND

GUARANTEES:
- Status change and partner refund commit together or not at all
  (one transaction.atomic; a failed refund rolls the cancel back and the
  error reaches the caller).
- Cancelling a cancelled (or completed) order is a ConflictError with no
  wallet mutation.
- The refund carries idempotency_key refund:<order_id>, so a caller that
  timed out can re-issue the cancel without a double credit.

FLOW:
1) Validate reason
2) Lock order, reject terminal
3) Refund partner wallet when paid + partner assigned
4) Void pending manual payments (gateway captures stay pending for refresh)
5) Transition -> cancelled, stamp reason / cancelled_at
6) Notify customer and partner
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from core.exceptions import ValidationError
from notifications.models import Notification
from notifications.services.dispatcher import notify
from orders.models import Order
from orders.services.lifecycle_controller import commit_order, lock_order
from orders.services.order_lifecycle import validate_transition
from payments.models import PaymentRecord
from payments.services.policy import STRATEGY_MANUAL
from wallet.models import WalletTransaction
from wallet.services.ledger import credit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CancellationResult:
    success: bool
    order: Order
    refund: WalletTransaction | None = None

    @property
    def refunded(self) -> bool:
        return self.refund is not None


@transaction.atomic
def cancel_order(*, order_id, reason: str, actor, refund_partner: bool = True) -> CancellationResult:
    # --------------------------------------------------
    # 1. INPUT
    # --------------------------------------------------
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A cancellation reason is required")

    # --------------------------------------------------
    # 2. LOCK + GUARD
    # --------------------------------------------------
    order = lock_order(order_id)
    validate_transition(order=order, target_status=Order.STATUS_CANCELLED)

    # --------------------------------------------------
    # 3. PARTNER REFUND
    # --------------------------------------------------
    refund = None
    if refund_partner and order.payment_status == Order.PAYMENT_PAID and order.partner_id:
        refund = credit(
            user=order.partner,
            amount=order.total_amount,
            tx_type=WalletTransaction.TYPE_REFUND,
            description=f"Refund for cancelled order {order.order_number}",
            related_order=order,
            idempotency_key=f"refund:{order.id}",
        )

    # --------------------------------------------------
    # 4. VOID PENDING MANUAL PAYMENTS
    # --------------------------------------------------
    now = timezone.now()
    voided = order.payment_records.filter(
        status=PaymentRecord.STATUS_PENDING,
        kind=STRATEGY_MANUAL,
    ).update(
        status=PaymentRecord.STATUS_REJECTED,
        rejection_reason=f"Order cancelled: {reason}",
        verifier=actor,
        verified_at=now,
        updated_at=now,
    )

    # --------------------------------------------------
    # 5. TRANSITION
    # --------------------------------------------------
    previous = order.status
    order.status = Order.STATUS_CANCELLED
    order.cancellation_reason = reason
    order.cancelled_at = now
    fields = ["status", "cancellation_reason", "cancelled_at"]

    if refund is not None:
        order.payment_status = Order.PAYMENT_REFUNDED
        fields.append("payment_status")

    commit_order(order, fields=fields)

    # --------------------------------------------------
    # 6. NOTIFY
    # --------------------------------------------------
    notify(
        event_type=Notification.EVENT_ORDER_CANCELLED,
        recipients=[order.customer, order.partner],
        order=order,
        title=f"Order {order.order_number} cancelled",
        message=reason,
        payload={"order_number": order.order_number, "reason": reason},
    )
    if refund is not None:
        notify(
            event_type=Notification.EVENT_ORDER_REFUNDED,
            recipients=[order.partner],
            order=order,
            title=f"Refund for order {order.order_number}",
            payload={"order_number": order.order_number, "amount": refund.amount},
        )

    logger.info(
        "Order cancelled",
        extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "from_status": previous,
            "actor_id": str(actor.pk),
            "refund_transaction_id": str(refund.id) if refund is not None else None,
            "refund_amount": str(refund.amount) if refund is not None else None,
            "payments_voided": voided,
        },
    )
    return CancellationResult(success=True, order=order, refund=refund)
