# wallet/serializers/funding.py

from decimal import Decimal

from rest_framework import serializers

from wallet.models import WalletFundingRequest


class WalletFundingRequestSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = WalletFundingRequest
        fields = [
            "id",
            "user",
            "user_email",
            "kind",
            "crypto_type",
            "amount",
            "crypto_amount",
            "wallet_address",
            "destination_tag",
            "proof",
            "required_confirmations",
            "status",
            "review_note",
            "reviewed_at",
            "created_at",
        ]
        read_only_fields = fields


class DepositRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    crypto_type = serializers.ChoiceField(choices=WalletFundingRequest.CRYPTO_CHOICES)
    proof = serializers.CharField(max_length=255)
    wallet_address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    crypto_amount = serializers.DecimalField(max_digits=24, decimal_places=8, required=False, allow_null=True)


class WithdrawalRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    crypto_type = serializers.ChoiceField(choices=WalletFundingRequest.CRYPTO_CHOICES)
    wallet_address = serializers.CharField(max_length=255)
    destination_tag = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    crypto_amount = serializers.DecimalField(max_digits=24, decimal_places=8, required=False, allow_null=True)


class FundingDecisionSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default="")
