# payments/admin.py

from django.contrib import admin

from payments.models import PaidOrderArchive, PaymentMethodConfig, PaymentRecord, PaymentSecurityLog


@admin.register(PaymentMethodConfig)
class PaymentMethodConfigAdmin(admin.ModelAdmin):
    """
    The only editable payment table: method policy is configuration.
    """

    list_display = (
        "method_name",
        "kind",
        "enabled",
        "customer_access",
        "partner_access",
        "admin_access",
        "admin_confirmation_required",
        "collect_data_only",
    )
    list_editable = ("enabled", "customer_access", "partner_access", "admin_access")


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PaymentRecord)
class PaymentRecordAdmin(ReadOnlyAdmin):
    list_display = ("order_number", "method", "kind", "amount", "status", "created_at")
    list_filter = ("status", "kind", "method")
    search_fields = ("order_number", "external_reference", "payer__email")


@admin.register(PaymentSecurityLog)
class PaymentSecurityLogAdmin(ReadOnlyAdmin):
    list_display = ("event_type", "user", "order_number", "method", "ip_address", "created_at")
    list_filter = ("event_type",)


@admin.register(PaidOrderArchive)
class PaidOrderArchiveAdmin(ReadOnlyAdmin):
    list_display = ("order_number", "method", "amount", "currency", "archived_at")
    search_fields = ("order_number", "customer_email")
