# payments/models/__init__.py

from .paid_order import PaidOrderArchive
from .payment_method import PaymentMethodConfig
from .payment_record import PaymentRecord
from .security_log import PaymentSecurityLog

__all__ = [
    "PaymentMethodConfig",
    "PaymentRecord",
    "PaymentSecurityLog",
    "PaidOrderArchive",
]
