# orders/serializers/inputs.py

"""
Request bodies for the order endpoints.

Documents ONLY what the client is allowed to send. There is no total
field: the Order Store prices the items itself.
"""

from decimal import Decimal

from rest_framework import serializers

from orders.models import LogisticsRecord


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
        required=False,
        allow_null=True,
        help_text="Optional; the catalog price is used when omitted.",
    )


class OrderCreateSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    shipping_address = serializers.JSONField()
    billing_address = serializers.JSONField(required=False, default=dict)
    payment_method = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_shipping_address(self, value):
        if not isinstance(value, dict) or not value:
            raise serializers.ValidationError("Shipping address must be a non-empty object.")
        return value


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField()


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True, required=False, default="")


class AssignPartnerSerializer(serializers.Serializer):
    partner_id = serializers.UUIDField()


class ShipmentSerializer(serializers.Serializer):
    tracking_number = serializers.CharField(max_length=128)
    carrier = serializers.CharField(max_length=64)
    shipping_method = serializers.CharField(max_length=32, required=False, default="standard")
    estimated_delivery = serializers.DateField(required=False, allow_null=True, default=None)


class TrackingUpdateInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=sorted(LogisticsRecord.IN_FLIGHT_STATUSES))
    location = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
