# wallet/services/ledger.py

"""
WALLET LEDGER SERVICE (SOLE WRITER OF WALLET ROWS)

Purpose:
- Per-user balance + append-only transaction history.
- Consumed by cancellation refunds, partner commission, wallet payments
  and funding requests.

GUARANTEES:
- Balance changes are single-statement conditional F() updates:
  no read-modify-write, no lost updates under concurrent debits/credits.
- A debit that would take the balance below zero updates zero rows and
  raises InsufficientBalanceError; nothing is written.
- The balance update and its WalletTransaction are one atomic unit.
- idempotency_key makes refunds / earnings safe to re-issue after a timeout.
- Replaying a user's completed transactions from zero reproduces the balance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import DecimalField, F, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.exceptions import ConflictError, InsufficientBalanceError, ValidationError
from core.money import ZERO, money, positive_money
from wallet.models import WalletBalance, WalletTransaction

logger = logging.getLogger(__name__)


# ============================================================
# READ MODELS
# ============================================================


@dataclass(frozen=True)
class LedgerAudit:
    user_id: str
    recorded: Decimal
    replayed: Decimal

    @property
    def difference(self) -> Decimal:
        return self.recorded - self.replayed

    @property
    def consistent(self) -> bool:
        return self.difference == ZERO


# ============================================================
# HELPERS
# ============================================================


def _currency() -> str:
    return getattr(settings, "WALLET_CURRENCY", "USD")


def _existing_entry(*, idempotency_key, user, amount: Decimal, tx_type: str):
    if not idempotency_key:
        return None

    existing = WalletTransaction.objects.filter(idempotency_key=idempotency_key).first()
    if existing is None:
        return None

    if existing.user_id != user.pk or existing.amount != amount or existing.tx_type != tx_type:
        raise ConflictError(
            f"Idempotency key {idempotency_key} already used for a different wallet entry",
            entity_id=existing.id,
        )

    logger.info(
        "Wallet entry already recorded; returning existing",
        extra={"idempotency_key": idempotency_key, "transaction_id": str(existing.id)},
    )
    return existing


def _append(*, wallet: WalletBalance, user, amount: Decimal, tx_type: str, description: str, related_order, idempotency_key):
    try:
        with transaction.atomic():
            return WalletTransaction.objects.create(
                user=user,
                amount=amount,
                tx_type=tx_type,
                status=WalletTransaction.STATUS_COMPLETED,
                balance_after=wallet.balance,
                related_order=related_order,
                order_number=getattr(related_order, "order_number", "") or "",
                description=(description or "")[:255],
                idempotency_key=idempotency_key or None,
            )
    except IntegrityError as exc:
        # concurrent writer won the idempotency key; the enclosing atomic
        # rolls our balance update back
        raise ConflictError(
            f"Wallet entry {idempotency_key} was recorded concurrently",
            entity_id=idempotency_key,
        ) from exc


# ============================================================
# BALANCE
# ============================================================


def get_balance(*, user) -> WalletBalance:
    """
    Lazily creates a zero balance on first access (idempotent).
    """
    wallet, created = WalletBalance.objects.get_or_create(
        user=user,
        defaults={"currency": _currency()},
    )
    if created:
        logger.info("Wallet created", extra={"user_id": str(user.pk)})
    return wallet


@transaction.atomic
def credit(
    *,
    user,
    amount,
    tx_type: str = WalletTransaction.TYPE_DEPOSIT,
    description: str = "",
    related_order=None,
    idempotency_key: str | None = None,
) -> WalletTransaction:
    amt = positive_money(amount)
    if tx_type not in WalletTransaction.CREDIT_TYPES:
        raise ValidationError(f"'{tx_type}' is not a credit transaction type")

    existing = _existing_entry(idempotency_key=idempotency_key, user=user, amount=amt, tx_type=tx_type)
    if existing is not None:
        return existing

    wallet = get_balance(user=user)

    WalletBalance.objects.filter(pk=wallet.pk).update(
        balance=F("balance") + amt,
        version=F("version") + 1,
        updated_at=timezone.now(),
    )
    wallet.refresh_from_db(fields=["balance", "version"])

    entry = _append(
        wallet=wallet,
        user=user,
        amount=amt,
        tx_type=tx_type,
        description=description,
        related_order=related_order,
        idempotency_key=idempotency_key,
    )

    logger.info(
        "Wallet credited",
        extra={
            "user_id": str(user.pk),
            "amount": str(amt),
            "tx_type": tx_type,
            "transaction_id": str(entry.id),
            "order_id": str(related_order.pk) if related_order is not None else None,
        },
    )
    return entry


@transaction.atomic
def debit(
    *,
    user,
    amount,
    tx_type: str = WalletTransaction.TYPE_PAYMENT,
    description: str = "",
    related_order=None,
    idempotency_key: str | None = None,
) -> WalletTransaction:
    amt = positive_money(amount)
    if tx_type not in WalletTransaction.DEBIT_TYPES:
        raise ValidationError(f"'{tx_type}' is not a debit transaction type")

    existing = _existing_entry(idempotency_key=idempotency_key, user=user, amount=-amt, tx_type=tx_type)
    if existing is not None:
        return existing

    wallet = get_balance(user=user)

    updated = WalletBalance.objects.filter(pk=wallet.pk, balance__gte=amt).update(
        balance=F("balance") - amt,
        version=F("version") + 1,
        updated_at=timezone.now(),
    )
    if not updated:
        wallet.refresh_from_db(fields=["balance"])
        logger.warning(
            "Wallet debit refused: insufficient balance",
            extra={"user_id": str(user.pk), "amount": str(amt), "balance": str(wallet.balance)},
        )
        raise InsufficientBalanceError(
            f"Wallet balance {wallet.balance} is less than {amt}",
            entity_id=wallet.pk,
        )

    wallet.refresh_from_db(fields=["balance", "version"])

    entry = _append(
        wallet=wallet,
        user=user,
        amount=-amt,
        tx_type=tx_type,
        description=description,
        related_order=related_order,
        idempotency_key=idempotency_key,
    )

    logger.info(
        "Wallet debited",
        extra={
            "user_id": str(user.pk),
            "amount": str(amt),
            "tx_type": tx_type,
            "transaction_id": str(entry.id),
        },
    )
    return entry


# ============================================================
# PENDING FUNDS (deposits awaiting review)
# ============================================================


def hold_pending(*, user, amount) -> WalletBalance:
    amt = positive_money(amount)
    wallet = get_balance(user=user)
    WalletBalance.objects.filter(pk=wallet.pk).update(
        pending_balance=F("pending_balance") + amt,
        version=F("version") + 1,
        updated_at=timezone.now(),
    )
    wallet.refresh_from_db(fields=["pending_balance", "version"])
    return wallet


def release_pending(*, user, amount) -> WalletBalance:
    amt = positive_money(amount)
    wallet = get_balance(user=user)
    updated = WalletBalance.objects.filter(pk=wallet.pk, pending_balance__gte=amt).update(
        pending_balance=F("pending_balance") - amt,
        version=F("version") + 1,
        updated_at=timezone.now(),
    )
    if not updated:
        raise ConflictError(f"Pending balance is less than {amt}", entity_id=wallet.pk)
    wallet.refresh_from_db(fields=["pending_balance", "version"])
    return wallet


# ============================================================
# AUDIT / QUERIES
# ============================================================


def replay_balance(*, user) -> Decimal:
    """
    Rebuild the balance from the transaction log alone.
    """
    total = WalletTransaction.objects.filter(
        user=user,
        status=WalletTransaction.STATUS_COMPLETED,
    ).aggregate(
        total=Coalesce(
            Sum("amount"),
            Value(ZERO),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    )["total"]
    return money(total)


def audit_balance(*, user) -> LedgerAudit:
    wallet = get_balance(user=user)
    audit = LedgerAudit(
        user_id=str(user.pk),
        recorded=money(wallet.balance),
        replayed=replay_balance(user=user),
    )
    if not audit.consistent:
        logger.error(
            "Wallet ledger mismatch",
            extra={
                "user_id": audit.user_id,
                "recorded": str(audit.recorded),
                "replayed": str(audit.replayed),
            },
        )
    return audit


def list_transactions(*, user):
    return WalletTransaction.objects.filter(user=user).select_related("related_order").order_by("-created_at")


def wallet_stats(*, user) -> dict:
    rows = (
        WalletTransaction.objects.filter(user=user, status=WalletTransaction.STATUS_COMPLETED)
        .values("tx_type")
        .annotate(total=Sum("amount"))
    )
    totals = {tx_type: ZERO for tx_type, _ in WalletTransaction.TYPE_CHOICES}
    for row in rows:
        totals[row["tx_type"]] = money(row["total"])

    wallet = get_balance(user=user)
    return {
        "balance": money(wallet.balance),
        "pending_balance": money(wallet.pending_balance),
        "currency": wallet.currency,
        "totals": totals,
    }
