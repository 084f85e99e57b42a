# payments/services/router.py

"""
PAYMENT ROUTER

Classifies a payment attempt into exactly one strategy and runs it:

- capture: synchronous gateway capture
    decline        -> PaymentRecord failed, security log, order stays pending
    success        -> PaymentRecord verified, order confirmed
    captured but order not confirmable -> PartialFailureError (money moved)
    transport error -> ExternalGatewayError, record left pending, never retried
    gateway pending -> record left pending, resolved by refresh_capture_status
    unresolved capture on the order -> ConflictError, nothing re-issued
- wallet: debit payer + verified record + confirm order, one transaction
- manual: PaymentRecord pending, order -> waiting_confirmation, admins notified

A role the method policy does not allow (or a collect-data-only method)
yields a rejected PaymentRecord + security log + PolicyRejectedError.

The router is constructed with its gateway (dependency injection):
    PaymentRouter(gateway=FakeGateway()).submit(...)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from core.exceptions import ConflictError, MarketplaceError, NotFoundError, PartialFailureError, PolicyRejectedError
from notifications.models import Notification
from notifications.services.dispatcher import notify_admins
from orders.models import Order
from orders.services.lifecycle_controller import (
    confirm_payment,
    lock_order,
    mark_waiting_confirmation,
    return_to_pending,
)
from orders.services.order_store import get_order
from payments.models import PaymentRecord, PaymentSecurityLog
from payments.services.archive import archive_paid_order
from payments.services.gateway import STATUS_PENDING, get_gateway
from payments.services.payloads import parse_payload
from payments.services.policy import (
    STRATEGY_CAPTURE,
    STRATEGY_MANUAL,
    STRATEGY_WALLET,
    MethodPolicy,
    get_method_policy,
)
from payments.services.security import log_security_event
from permissions.roles import CAP_PAYMENTS_VERIFY, get_user_role, user_has_capability
from wallet.models import WalletTransaction
from wallet.services.ledger import debit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentOutcome:
    payment: PaymentRecord
    order: Order
    strategy: str

    @property
    def confirmed(self) -> bool:
        return self.order.status == Order.STATUS_CONFIRMED and self.payment.status == PaymentRecord.STATUS_VERIFIED

    @property
    def awaiting_confirmation(self) -> bool:
        return self.payment.status == PaymentRecord.STATUS_PENDING


def new_reference() -> str:
    return f"PAY-{uuid.uuid4().hex[:20].upper()}"


class PaymentRouter:
    def __init__(self, *, gateway=None):
        self._gateway = gateway

    @property
    def gateway(self):
        if self._gateway is None:
            self._gateway = get_gateway()
        return self._gateway

    # --------------------------------------------------
    # ENTRY POINT
    # --------------------------------------------------

    def submit(
        self,
        *,
        order_id,
        payer,
        method: str,
        payload=None,
        ip_address: str | None = None,
        user_agent: str = "",
    ) -> PaymentOutcome:
        order = get_order(order_id=order_id)

        if order.customer_id != payer.pk and not user_has_capability(payer, CAP_PAYMENTS_VERIFY):
            raise NotFoundError(f"Order {order_id} not found", entity_id=order_id)

        if order.status != Order.STATUS_PENDING or order.payment_status == Order.PAYMENT_PAID:
            raise ConflictError(
                f"Order {order.order_number} is '{order.status}' and is not awaiting payment",
                entity_id=order.id,
            )

        ensure_no_unresolved_capture(order)

        policy = get_method_policy(method)
        self._enforce_policy(
            policy=policy,
            order=order,
            payer=payer,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        parsed = parse_payload(policy.strategy, payload)

        handler = {
            STRATEGY_CAPTURE: self._capture,
            STRATEGY_WALLET: self._wallet,
            STRATEGY_MANUAL: self._manual,
        }[policy.strategy]

        outcome = handler(
            order=order,
            payer=payer,
            policy=policy,
            payload=parsed,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        logger.info(
            "Payment submitted",
            extra={
                "order_id": str(order.id),
                "payment_id": str(outcome.payment.id),
                "method": policy.method_name,
                "strategy": policy.strategy,
                "payment_status": outcome.payment.status,
                "order_status": outcome.order.status,
            },
        )
        return outcome

    # --------------------------------------------------
    # POLICY
    # --------------------------------------------------

    def _enforce_policy(self, *, policy: MethodPolicy, order: Order, payer, ip_address, user_agent):
        role = get_user_role(payer)

        if policy.allows_role(role) and not policy.collect_data_only:
            return

        if policy.collect_data_only:
            event, reason = PaymentSecurityLog.EVENT_COLLECT_ONLY, "Method collects data only"
        else:
            event, reason = PaymentSecurityLog.EVENT_POLICY_REJECTED, f"Method not allowed for role '{role}'"

        record = PaymentRecord.objects.create(
            order=order,
            order_number=order.order_number,
            payer=payer,
            method=policy.method_name,
            kind=policy.strategy,
            amount=order.total_amount,
            currency=order.currency,
            status=PaymentRecord.STATUS_REJECTED,
            rejection_reason=reason,
        )
        log_security_event(
            event_type=event,
            user=payer,
            order_number=order.order_number,
            method=policy.method_name,
            payload={"payment_id": record.id, "role": role},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        raise PolicyRejectedError(reason, entity_id=record.id)

    # --------------------------------------------------
    # STRATEGIES
    # --------------------------------------------------

    def _capture(self, *, order, payer, policy, payload, ip_address, user_agent) -> PaymentOutcome:
        with transaction.atomic():
            locked = lock_order(order.id)
            if locked.status != Order.STATUS_PENDING or locked.payment_status == Order.PAYMENT_PAID:
                raise ConflictError(
                    f"Order {locked.order_number} is '{locked.status}' and is not awaiting payment",
                    entity_id=locked.id,
                )
            ensure_no_unresolved_capture(locked)
            record = PaymentRecord.objects.create(
                order=order,
                order_number=order.order_number,
                payer=payer,
                method=policy.method_name,
                kind=STRATEGY_CAPTURE,
                amount=order.total_amount,
                currency=order.currency,
                external_reference=new_reference(),
                collected_data=payload.public_data(),
            )

        # transport errors propagate; the record stays pending for refresh_capture_status
        result = self.gateway.capture(
            amount=record.amount,
            currency=record.currency,
            reference=record.external_reference,
            card_token=payload.card_token,
            metadata={"order_number": order.order_number, "payment_id": str(record.id)},
        )

        if not result.approved and result.status == STATUS_PENDING:
            logger.warning(
                "Gateway left capture pending",
                extra={"payment_id": str(record.id), "external_reference": record.external_reference},
            )
            return PaymentOutcome(payment=record, order=order, strategy=STRATEGY_CAPTURE)

        if not result.approved:
            record.status = PaymentRecord.STATUS_FAILED
            record.rejection_reason = result.decline_reason or "Declined by gateway"
            record.save(update_fields=["status", "rejection_reason", "updated_at"])

            log_security_event(
                event_type=PaymentSecurityLog.EVENT_DECLINED,
                user=payer,
                order_number=order.order_number,
                method=policy.method_name,
                payload={"payment_id": record.id, "reason": record.rejection_reason},
                ip_address=ip_address,
                user_agent=user_agent,
            )
            order = return_to_pending(order=order, reason=record.rejection_reason)
            return PaymentOutcome(payment=record, order=order, strategy=STRATEGY_CAPTURE)

        record.status = PaymentRecord.STATUS_VERIFIED
        record.external_reference = result.reference or record.external_reference
        record.verified_at = timezone.now()
        record.save(update_fields=["status", "external_reference", "verified_at", "updated_at"])

        return PaymentOutcome(
            payment=record,
            order=confirm_captured_payment(payment=record, order=order),
            strategy=STRATEGY_CAPTURE,
        )

    @transaction.atomic
    def _wallet(self, *, order, payer, policy, payload, ip_address, user_agent) -> PaymentOutcome:
        debit(
            user=payer,
            amount=order.total_amount,
            tx_type=WalletTransaction.TYPE_PAYMENT,
            description=f"Payment for order {order.order_number}",
            related_order=order,
            idempotency_key=f"payment:{order.id}",
        )

        record = PaymentRecord.objects.create(
            order=order,
            order_number=order.order_number,
            payer=payer,
            method=policy.method_name,
            kind=STRATEGY_WALLET,
            amount=order.total_amount,
            currency=order.currency,
            status=PaymentRecord.STATUS_VERIFIED,
            external_reference=f"wallet:{order.id}",
            collected_data=payload.public_data(),
            verified_at=timezone.now(),
        )

        order = confirm_payment(order=order, method=policy.method_name)
        archive_paid_order(payment=record, order=order)
        return PaymentOutcome(payment=record, order=order, strategy=STRATEGY_WALLET)

    @transaction.atomic
    def _manual(self, *, order, payer, policy, payload, ip_address, user_agent) -> PaymentOutcome:
        record = PaymentRecord.objects.create(
            order=order,
            order_number=order.order_number,
            payer=payer,
            method=policy.method_name,
            kind=STRATEGY_MANUAL,
            amount=order.total_amount,
            currency=order.currency,
            external_reference=payload.reference,
            collected_data=payload.public_data(),
        )

        order = mark_waiting_confirmation(order=order, method=policy.method_name)

        notify_admins(
            event_type=Notification.EVENT_PAYMENT_PENDING,
            order=order,
            title=f"Payment for {order.order_number} awaits confirmation",
            payload={
                "order_number": order.order_number,
                "payment_id": record.id,
                "method": policy.method_name,
                "amount": record.amount,
            },
        )
        return PaymentOutcome(payment=record, order=order, strategy=STRATEGY_MANUAL)


def ensure_no_unresolved_capture(order: Order):
    unresolved = (
        PaymentRecord.objects.filter(order=order, kind=STRATEGY_CAPTURE, status=PaymentRecord.STATUS_PENDING)
        .order_by("created_at")
        .first()
    )
    if unresolved is not None:
        raise ConflictError(
            f"Payment {unresolved.id} for order {order.order_number} is still unresolved at the gateway; "
            f"refresh it via /api/payments/{unresolved.id}/refresh/ before paying again",
            entity_id=unresolved.id,
            code="PAYMENT_UNRESOLVED",
        )


def confirm_captured_payment(*, payment: PaymentRecord, order: Order) -> Order:
    """
    Second step after a successful capture. The money has moved; if the
    order cannot be confirmed the caller gets a PartialFailureError that
    names both halves.
    """
    try:
        with transaction.atomic():
            confirmed = confirm_payment(order=order, method=payment.method)
            archive_paid_order(payment=payment, order=confirmed)
    except MarketplaceError as exc:
        log_security_event(
            event_type=PaymentSecurityLog.EVENT_PARTIAL_FAILURE,
            user=payment.payer,
            order_number=payment.order_number,
            method=payment.method,
            payload={"payment_id": payment.id, "error": exc.message},
        )
        logger.error(
            "Captured payment could not confirm order",
            extra={
                "payment_id": str(payment.id),
                "order_id": str(order.id),
                "external_reference": payment.external_reference,
                "error_code": exc.code,
            },
        )
        raise PartialFailureError(
            f"Payment {payment.external_reference} captured but order {order.order_number} "
            f"was not confirmed: {exc.message}",
            completed_steps=("capture",),
            failed_step="confirm_order",
            primary_succeeded=True,
            entity_id=payment.id,
        ) from exc
    return confirmed


def submit_payment(*, order_id, payer, method: str, payload=None, gateway=None, **context) -> PaymentOutcome:
    return PaymentRouter(gateway=gateway).submit(
        order_id=order_id,
        payer=payer,
        method=method,
        payload=payload,
        **context,
    )
