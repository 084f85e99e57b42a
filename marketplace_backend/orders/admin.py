# orders/admin.py

"""
ORDERS ADMIN

Read-only. Status changes go through the API so the lifecycle rules,
row locks and change feed are never bypassed.
"""

from django.contrib import admin

from orders.models import LogisticsRecord, Order, OrderChangeEvent, OrderDeletionAudit, OrderItem, TrackingUpdate


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "sku", "quantity", "unit_price", "subtotal")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(ReadOnlyAdmin):
    list_display = ("order_number", "customer", "partner", "status", "payment_status", "total_amount", "created_at")
    list_filter = ("status", "payment_status", "partner_payout_status")
    search_fields = ("order_number", "customer__email", "partner__email")
    inlines = [OrderItemInline]


@admin.register(LogisticsRecord)
class LogisticsRecordAdmin(ReadOnlyAdmin):
    list_display = ("order", "provider", "tracking_number", "current_status", "estimated_delivery")
    search_fields = ("tracking_number", "order__order_number")


@admin.register(TrackingUpdate)
class TrackingUpdateAdmin(ReadOnlyAdmin):
    list_display = ("logistics", "status", "location", "created_at")
    list_filter = ("status",)


@admin.register(OrderChangeEvent)
class OrderChangeEventAdmin(ReadOnlyAdmin):
    list_display = ("sequence", "event_type", "order_number", "created_at")
    list_filter = ("event_type",)


@admin.register(OrderDeletionAudit)
class OrderDeletionAuditAdmin(ReadOnlyAdmin):
    list_display = ("order_number", "deleted_by", "deleted_at")
    search_fields = ("order_number",)
