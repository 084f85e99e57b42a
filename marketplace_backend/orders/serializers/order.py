# orders/serializers/order.py

from rest_framework import serializers

from orders.models import LogisticsRecord, Order, OrderChangeEvent, OrderItem, TrackingUpdate


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "product", "product_name", "sku", "quantity", "unit_price", "subtotal"]
        read_only_fields = fields


class TrackingUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = TrackingUpdate
        fields = ["id", "status", "location", "description", "created_at"]
        read_only_fields = fields


class LogisticsRecordSerializer(serializers.ModelSerializer):
    updates = TrackingUpdateSerializer(many=True, read_only=True)

    class Meta:
        model = LogisticsRecord
        fields = [
            "provider",
            "tracking_number",
            "shipping_method",
            "current_status",
            "estimated_delivery",
            "shipped_at",
            "actual_delivery",
            "updates",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    Back-office representation (admins, assigned partners).
    """

    items = OrderItemSerializer(many=True, read_only=True)
    logistics = serializers.SerializerMethodField()
    status_label = serializers.CharField(read_only=True)
    customer_email = serializers.EmailField(source="customer.email", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer",
            "customer_email",
            "partner",
            "total_amount",
            "currency",
            "status",
            "status_label",
            "payment_status",
            "payment_method",
            "shipping_address",
            "billing_address",
            "notes",
            "cancellation_reason",
            "payment_rejection_reason",
            "partner_payout_status",
            "version",
            "items",
            "logistics",
            "created_at",
            "updated_at",
            "confirmed_at",
            "shipped_at",
            "delivered_at",
            "cancelled_at",
        ]
        read_only_fields = fields

    def get_logistics(self, obj):
        try:
            record = obj.logistics
        except LogisticsRecord.DoesNotExist:
            return None
        return LogisticsRecordSerializer(record).data


class CustomerOrderSerializer(OrderSerializer):
    """
    Buyer-facing: friendly status label, no internal bookkeeping fields.
    """

    class Meta(OrderSerializer.Meta):
        fields = [
            "id",
            "order_number",
            "total_amount",
            "currency",
            "status_label",
            "payment_status",
            "payment_method",
            "shipping_address",
            "billing_address",
            "notes",
            "cancellation_reason",
            "items",
            "logistics",
            "created_at",
            "shipped_at",
            "delivered_at",
            "cancelled_at",
        ]
        read_only_fields = fields


class ChangeEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderChangeEvent
        fields = ["sequence", "order_id", "order_number", "event_type", "snapshot", "created_at"]
        read_only_fields = fields
