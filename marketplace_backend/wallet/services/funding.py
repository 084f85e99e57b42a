# wallet/services/funding.py

"""
CRYPTO FUNDING REQUESTS

Deposit:
- request  -> pending request, amount parked in pending_balance
- approve  -> pending released, balance credited (deposit)
- reject   -> pending released, nothing credited

Withdrawal:
- request  -> balance debited immediately (withdrawal), pending request
- approve  -> nothing moves (funds already left the wallet)
- reject   -> amount credited back (refund)

Review is idempotent: approving an approved request (or rejecting a
rejected one) returns it unchanged; flipping a decision is a conflict.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.money import positive_money
from notifications.models import Notification
from notifications.services.dispatcher import notify, notify_admins
from wallet.models import WalletFundingRequest, WalletTransaction
from wallet.services.ledger import credit, debit, get_balance, hold_pending, release_pending

logger = logging.getLogger(__name__)

VALID_CRYPTO_TYPES = {value for value, _ in WalletFundingRequest.CRYPTO_CHOICES}


def required_confirmations_for(crypto_type: str) -> int:
    table = getattr(settings, "CRYPTO_REQUIRED_CONFIRMATIONS", {}) or {}
    return int(table.get(crypto_type, table.get("default", 12)))


def _validate_crypto(crypto_type: str) -> str:
    value = (crypto_type or "").strip().upper()
    if value not in VALID_CRYPTO_TYPES:
        raise ValidationError(f"Unsupported crypto type '{crypto_type}'")
    return value


def _lock_request(request_id) -> WalletFundingRequest:
    try:
        return WalletFundingRequest.objects.select_for_update().select_related("user").get(id=request_id)
    except WalletFundingRequest.DoesNotExist as exc:
        raise NotFoundError(f"Funding request {request_id} not found", entity_id=request_id) from exc


# ============================================================
# REQUESTS
# ============================================================


@transaction.atomic
def request_deposit(*, user, amount, crypto_type, proof, wallet_address="", crypto_amount=None) -> WalletFundingRequest:
    amt = positive_money(amount)
    crypto = _validate_crypto(crypto_type)

    proof = (proof or "").strip()
    if not proof:
        raise ValidationError("A transaction hash or payment proof is required")

    get_balance(user=user)
    hold_pending(user=user, amount=amt)

    req = WalletFundingRequest.objects.create(
        user=user,
        kind=WalletFundingRequest.KIND_DEPOSIT,
        crypto_type=crypto,
        amount=amt,
        crypto_amount=crypto_amount,
        wallet_address=(wallet_address or "").strip(),
        proof=proof,
        required_confirmations=required_confirmations_for(crypto),
    )

    notify_admins(
        event_type=Notification.EVENT_FUNDING_REQUESTED,
        title="Wallet deposit awaiting review",
        payload={"request_id": str(req.id), "kind": req.kind, "amount": str(amt), "crypto_type": crypto},
    )

    logger.info(
        "Wallet deposit requested",
        extra={"user_id": str(user.pk), "request_id": str(req.id), "amount": str(amt), "crypto_type": crypto},
    )
    return req


@transaction.atomic
def request_withdrawal(
    *,
    user,
    amount,
    crypto_type,
    wallet_address,
    destination_tag="",
    crypto_amount=None,
) -> WalletFundingRequest:
    amt = positive_money(amount)
    crypto = _validate_crypto(crypto_type)

    wallet_address = (wallet_address or "").strip()
    if not wallet_address:
        raise ValidationError("A destination wallet address is required")

    req = WalletFundingRequest.objects.create(
        user=user,
        kind=WalletFundingRequest.KIND_WITHDRAWAL,
        crypto_type=crypto,
        amount=amt,
        crypto_amount=crypto_amount,
        wallet_address=wallet_address,
        destination_tag=(destination_tag or "").strip(),
        required_confirmations=required_confirmations_for(crypto),
    )

    # InsufficientBalanceError rolls the request back with it
    debit(
        user=user,
        amount=amt,
        tx_type=WalletTransaction.TYPE_WITHDRAWAL,
        description=f"Withdrawal request {req.id} ({crypto})",
        idempotency_key=f"withdrawal:{req.id}",
    )

    notify_admins(
        event_type=Notification.EVENT_FUNDING_REQUESTED,
        title="Wallet withdrawal awaiting review",
        payload={"request_id": str(req.id), "kind": req.kind, "amount": str(amt), "crypto_type": crypto},
    )

    logger.info(
        "Wallet withdrawal requested",
        extra={"user_id": str(user.pk), "request_id": str(req.id), "amount": str(amt), "crypto_type": crypto},
    )
    return req


# ============================================================
# ADMIN REVIEW
# ============================================================


def _mark_reviewed(req: WalletFundingRequest, *, status: str, actor, note: str):
    req.status = status
    req.reviewed_by = actor
    req.reviewed_at = timezone.now()
    req.review_note = note or ""
    req.save(update_fields=["status", "reviewed_by", "reviewed_at", "review_note", "updated_at"])

    notify(
        event_type=Notification.EVENT_FUNDING_REVIEWED,
        recipients=[req.user],
        title=f"Your {req.kind} was {status}",
        message=note or "",
        payload={"request_id": str(req.id), "kind": req.kind, "status": status, "amount": str(req.amount)},
    )


@transaction.atomic
def approve_funding_request(*, request_id, actor, note: str = "") -> WalletFundingRequest:
    req = _lock_request(request_id)

    if req.status == WalletFundingRequest.STATUS_APPROVED:
        return req
    if req.status == WalletFundingRequest.STATUS_REJECTED:
        raise ConflictError("Funding request was already rejected", entity_id=req.id)

    if req.kind == WalletFundingRequest.KIND_DEPOSIT:
        release_pending(user=req.user, amount=req.amount)
        credit(
            user=req.user,
            amount=req.amount,
            tx_type=WalletTransaction.TYPE_DEPOSIT,
            description=f"{req.crypto_type} deposit {req.proof}".strip(),
            idempotency_key=f"deposit:{req.id}",
        )

    _mark_reviewed(req, status=WalletFundingRequest.STATUS_APPROVED, actor=actor, note=note)

    logger.info(
        "Funding request approved",
        extra={"request_id": str(req.id), "kind": req.kind, "actor_id": str(actor.pk)},
    )
    return req


@transaction.atomic
def reject_funding_request(*, request_id, actor, reason: str) -> WalletFundingRequest:
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A rejection reason is required")

    req = _lock_request(request_id)

    if req.status == WalletFundingRequest.STATUS_REJECTED:
        return req
    if req.status == WalletFundingRequest.STATUS_APPROVED:
        raise ConflictError("Funding request was already approved", entity_id=req.id)

    if req.kind == WalletFundingRequest.KIND_DEPOSIT:
        release_pending(user=req.user, amount=req.amount)
    else:
        credit(
            user=req.user,
            amount=req.amount,
            tx_type=WalletTransaction.TYPE_REFUND,
            description=f"Withdrawal {req.id} rejected",
            idempotency_key=f"withdrawal-reversal:{req.id}",
        )

    _mark_reviewed(req, status=WalletFundingRequest.STATUS_REJECTED, actor=actor, note=reason)

    logger.info(
        "Funding request rejected",
        extra={"request_id": str(req.id), "kind": req.kind, "actor_id": str(actor.pk)},
    )
    return req
