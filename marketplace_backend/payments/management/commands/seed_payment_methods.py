# payments/management/commands/seed_payment_methods.py

from __future__ import annotations

from django.core.management.base import BaseCommand
from django.db import transaction

from payments.models import PaymentMethodConfig

DEFAULT_METHODS = [
    {
        "method_name": "card",
        "display_name": "Credit / debit card",
        "kind": PaymentMethodConfig.KIND_CAPTURE,
    },
    {
        "method_name": "wallet",
        "display_name": "Wallet balance",
        "kind": PaymentMethodConfig.KIND_WALLET,
    },
    {
        "method_name": "bank_transfer",
        "display_name": "Bank transfer",
        "kind": PaymentMethodConfig.KIND_MANUAL,
        "admin_confirmation_required": True,
        "config_data": {"note": "Quote your order number as the transfer reference."},
    },
    {
        "method_name": "crypto",
        "display_name": "Cryptocurrency",
        "kind": PaymentMethodConfig.KIND_MANUAL,
        "admin_confirmation_required": True,
        "config_data": {"accepted": ["BTC", "ETH", "USDT_TRX", "XRP"]},
    },
]


class Command(BaseCommand):
    help = "Create the default payment methods (existing rows are left untouched)."

    @transaction.atomic
    def handle(self, *args, **options):
        created_count = 0
        for spec in DEFAULT_METHODS:
            defaults = {k: v for k, v in spec.items() if k != "method_name"}
            _, created = PaymentMethodConfig.objects.get_or_create(
                method_name=spec["method_name"],
                defaults=defaults,
            )
            created_count += int(created)
            self.stdout.write(f"{'created' if created else 'exists '}: {spec['method_name']}")

        self.stdout.write(f"Payment methods created: {created_count}")
