# wallet/models/__init__.py

from .funding_request import WalletFundingRequest
from .wallet_balance import WalletBalance
from .wallet_transaction import WalletTransaction

__all__ = [
    "WalletBalance",
    "WalletTransaction",
    "WalletFundingRequest",
]
