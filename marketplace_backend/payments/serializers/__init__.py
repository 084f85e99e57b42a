from .payment import (
    PaymentDecisionSerializer,
    PaymentMethodSerializer,
    PaymentRecordSerializer,
    PaymentRejectSerializer,
    PaymentSubmitSerializer,
)

__all__ = [
    "PaymentMethodSerializer",
    "PaymentRecordSerializer",
    "PaymentSubmitSerializer",
    "PaymentRejectSerializer",
    "PaymentDecisionSerializer",
]
