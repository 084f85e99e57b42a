# payments/serializers/payment.py

from rest_framework import serializers

from orders.serializers import OrderSerializer
from payments.models import PaymentRecord


class PaymentMethodSerializer(serializers.Serializer):
    method_name = serializers.CharField()
    display_name = serializers.CharField()
    strategy = serializers.CharField()
    requires_confirmation = serializers.SerializerMethodField()
    instructions = serializers.SerializerMethodField()

    def get_requires_confirmation(self, obj):
        return obj.strategy == "manual"

    def get_instructions(self, obj):
        return dict(obj.instructions)


class PaymentRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentRecord
        fields = [
            "id",
            "order",
            "order_number",
            "payer",
            "method",
            "kind",
            "amount",
            "currency",
            "status",
            "external_reference",
            "rejection_reason",
            "collected_data",
            "verifier",
            "verified_at",
            "created_at",
        ]
        read_only_fields = fields


class PaymentSubmitSerializer(serializers.Serializer):
    """
    `details` is validated by the per-kind payload serializer once the
    method's strategy is known.
    """

    order_id = serializers.UUIDField()
    method = serializers.CharField(max_length=32)
    details = serializers.DictField(required=False, default=dict)


class PaymentRejectSerializer(serializers.Serializer):
    reason = serializers.CharField()


class PaymentDecisionSerializer(serializers.Serializer):
    payment = PaymentRecordSerializer()
    order = OrderSerializer(allow_null=True)
    changed = serializers.BooleanField()
