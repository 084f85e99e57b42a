from .payment import (
    PaymentMethodListView,
    PaymentRefreshView,
    PaymentRejectView,
    PaymentSubmitView,
    PaymentVerifyView,
    PendingPaymentListView,
)

__all__ = [
    "PaymentMethodListView",
    "PaymentSubmitView",
    "PendingPaymentListView",
    "PaymentVerifyView",
    "PaymentRejectView",
    "PaymentRefreshView",
]
