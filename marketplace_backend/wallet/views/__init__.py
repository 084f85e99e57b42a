from .funding import DepositRequestView, FundingRequestViewSet, WithdrawalRequestView
from .wallet import WalletAuditView, WalletTransactionListView, WalletView

__all__ = [
    "WalletView",
    "WalletTransactionListView",
    "WalletAuditView",
    "DepositRequestView",
    "WithdrawalRequestView",
    "FundingRequestViewSet",
]
