# wallet/tests/test_ledger.py

from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase

from core.exceptions import ConflictError, InsufficientBalanceError, ValidationError
from orders.tests.builders import make_order, make_user
from wallet.models import WalletBalance, WalletTransaction
from wallet.services.ledger import (
    audit_balance,
    credit,
    debit,
    get_balance,
    replay_balance,
    wallet_stats,
)


class WalletLedgerTests(TestCase):
    """
    Wallet ledger tests.

    GUARANTEES:
    - balance never goes negative
    - every mutation writes exactly one transaction row
    - replaying the log reproduces the balance
    """

    def setUp(self):
        self.user = make_user("partner")

    def test_balance_created_lazily(self):
        self.assertFalse(WalletBalance.objects.filter(user=self.user).exists())
        wallet = get_balance(user=self.user)

        self.assertEqual(wallet.balance, Decimal("0.00"))
        self.assertEqual(wallet.currency, "USD")
        self.assertEqual(get_balance(user=self.user).pk, wallet.pk)

    def test_overdraft_refused_without_side_effects(self):
        credit(user=self.user, amount="50.00")

        with self.assertRaises(InsufficientBalanceError):
            debit(user=self.user, amount="100.00")

        self.assertEqual(get_balance(user=self.user).balance, Decimal("50.00"))
        self.assertEqual(WalletTransaction.objects.filter(user=self.user).count(), 1)

    def test_debit_to_exactly_zero(self):
        credit(user=self.user, amount="25.00")
        entry = debit(user=self.user, amount="25.00")

        self.assertEqual(entry.amount, Decimal("-25.00"))
        self.assertEqual(entry.balance_after, Decimal("0.00"))

    def test_replay_reproduces_balance(self):
        order = make_order(customer=make_user("customer"))
        credit(user=self.user, amount="100.00", tx_type=WalletTransaction.TYPE_DEPOSIT)
        credit(user=self.user, amount="6.00", tx_type=WalletTransaction.TYPE_EARNING, related_order=order)
        debit(user=self.user, amount="40.00", tx_type=WalletTransaction.TYPE_PAYMENT, related_order=order)
        credit(user=self.user, amount="60.00", tx_type=WalletTransaction.TYPE_REFUND, related_order=order)

        self.assertEqual(replay_balance(user=self.user), Decimal("126.00"))
        audit = audit_balance(user=self.user)
        self.assertTrue(audit.consistent)
        self.assertEqual(audit.recorded, Decimal("126.00"))

    def test_audit_detects_tampering(self):
        credit(user=self.user, amount="10.00")
        WalletBalance.objects.filter(user=self.user).update(balance=Decimal("99.00"))

        audit = audit_balance(user=self.user)
        self.assertFalse(audit.consistent)
        self.assertEqual(audit.difference, Decimal("89.00"))

    def test_invalid_amounts(self):
        for bad in ("0", "-5", "abc", None):
            with self.assertRaises(ValidationError):
                credit(user=self.user, amount=bad)

    def test_type_must_match_direction(self):
        with self.assertRaises(ValidationError):
            credit(user=self.user, amount="5.00", tx_type=WalletTransaction.TYPE_PAYMENT)
        with self.assertRaises(ValidationError):
            debit(user=self.user, amount="5.00", tx_type=WalletTransaction.TYPE_REFUND)

    def test_idempotency_key_returns_existing_entry(self):
        first = credit(user=self.user, amount="60.00", tx_type=WalletTransaction.TYPE_REFUND, idempotency_key="refund:x")
        second = credit(user=self.user, amount="60.00", tx_type=WalletTransaction.TYPE_REFUND, idempotency_key="refund:x")

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(get_balance(user=self.user).balance, Decimal("60.00"))

    def test_idempotency_key_reuse_for_other_entry_conflicts(self):
        credit(user=self.user, amount="60.00", idempotency_key="k-1")
        with self.assertRaises(ConflictError):
            credit(user=self.user, amount="61.00", idempotency_key="k-1")

    def test_transactions_are_append_only(self):
        entry = credit(user=self.user, amount="5.00")
        with self.assertRaises(RuntimeError):
            entry.save()
        with self.assertRaises(RuntimeError):
            entry.delete()

    def test_database_refuses_negative_balance(self):
        wallet = get_balance(user=self.user)
        with self.assertRaises(IntegrityError), transaction.atomic():
            WalletBalance.objects.filter(pk=wallet.pk).update(balance=Decimal("-1.00"))

    def test_stats_totals_by_type(self):
        credit(user=self.user, amount="30.00")
        debit(user=self.user, amount="10.00", tx_type=WalletTransaction.TYPE_WITHDRAWAL)

        stats = wallet_stats(user=self.user)
        self.assertEqual(stats["balance"], Decimal("20.00"))
        self.assertEqual(stats["totals"][WalletTransaction.TYPE_DEPOSIT], Decimal("30.00"))
        self.assertEqual(stats["totals"][WalletTransaction.TYPE_WITHDRAWAL], Decimal("-10.00"))
        self.assertEqual(stats["totals"][WalletTransaction.TYPE_EARNING], Decimal("0.00"))
