# wallet/admin.py

"""
WALLET ADMIN

Read-only: balances and ledger rows are written by wallet.services only.
"""

from django.contrib import admin

from wallet.models import WalletBalance, WalletFundingRequest, WalletTransaction


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(WalletBalance)
class WalletBalanceAdmin(ReadOnlyAdmin):
    list_display = ("user", "balance", "pending_balance", "currency", "updated_at")
    search_fields = ("user__email",)


@admin.register(WalletTransaction)
class WalletTransactionAdmin(ReadOnlyAdmin):
    list_display = ("user", "tx_type", "amount", "balance_after", "order_number", "created_at")
    list_filter = ("tx_type", "status")
    search_fields = ("user__email", "order_number", "idempotency_key")


@admin.register(WalletFundingRequest)
class WalletFundingRequestAdmin(ReadOnlyAdmin):
    list_display = ("user", "kind", "crypto_type", "amount", "status", "created_at")
    list_filter = ("kind", "status", "crypto_type")
    search_fields = ("user__email", "proof", "wallet_address")
