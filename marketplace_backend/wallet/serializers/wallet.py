# wallet/serializers/wallet.py

from rest_framework import serializers

from wallet.models import WalletBalance, WalletTransaction


class WalletBalanceSerializer(serializers.ModelSerializer):
    class Meta:
        model = WalletBalance
        fields = ["balance", "pending_balance", "currency", "updated_at"]
        read_only_fields = fields


class WalletTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = WalletTransaction
        fields = [
            "id",
            "amount",
            "tx_type",
            "status",
            "balance_after",
            "related_order",
            "order_number",
            "description",
            "created_at",
        ]
        read_only_fields = fields
