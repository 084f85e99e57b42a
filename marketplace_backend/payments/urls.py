# payments/urls.py

from django.urls import path

from payments.views import (
    PaymentMethodListView,
    PaymentRefreshView,
    PaymentRejectView,
    PaymentSubmitView,
    PaymentVerifyView,
    PendingPaymentListView,
)

urlpatterns = [
    path("methods/", PaymentMethodListView.as_view(), name="payment-methods"),
    path("submit/", PaymentSubmitView.as_view(), name="payment-submit"),
    path("pending/", PendingPaymentListView.as_view(), name="payment-pending"),
    path("<uuid:payment_id>/verify/", PaymentVerifyView.as_view(), name="payment-verify"),
    path("<uuid:payment_id>/reject/", PaymentRejectView.as_view(), name="payment-reject"),
    path("<uuid:payment_id>/refresh/", PaymentRefreshView.as_view(), name="payment-refresh"),
]
