from .funding import (
    DepositRequestSerializer,
    FundingDecisionSerializer,
    WalletFundingRequestSerializer,
    WithdrawalRequestSerializer,
)
from .wallet import WalletBalanceSerializer, WalletTransactionSerializer

__all__ = [
    "WalletBalanceSerializer",
    "WalletTransactionSerializer",
    "WalletFundingRequestSerializer",
    "DepositRequestSerializer",
    "WithdrawalRequestSerializer",
    "FundingDecisionSerializer",
]
