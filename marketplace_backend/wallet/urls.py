# wallet/urls.py

"""
WALLET API URLS

/api/wallet/                                       balance
/api/wallet/transactions/                          ledger
/api/wallet/audit/                                 replay check
/api/wallet/deposits/                              POST pending crypto deposit
/api/wallet/withdrawals/                           POST pending crypto withdrawal
/api/wallet/funding-requests/                      list
/api/wallet/funding-requests/<uuid>/approve/       admin
/api/wallet/funding-requests/<uuid>/reject/        admin
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from wallet.views import (
    DepositRequestView,
    FundingRequestViewSet,
    WalletAuditView,
    WalletTransactionListView,
    WalletView,
    WithdrawalRequestView,
)

router = DefaultRouter()
router.register(r"funding-requests", FundingRequestViewSet, basename="wallet-funding-requests")

urlpatterns = [
    path("", WalletView.as_view(), name="wallet-balance"),
    path("transactions/", WalletTransactionListView.as_view(), name="wallet-transactions"),
    path("audit/", WalletAuditView.as_view(), name="wallet-audit"),
    path("deposits/", DepositRequestView.as_view(), name="wallet-deposits"),
    path("withdrawals/", WithdrawalRequestView.as_view(), name="wallet-withdrawals"),
    path("", include(router.urls)),
]
