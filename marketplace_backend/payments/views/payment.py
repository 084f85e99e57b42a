# payments/views/payment.py

"""
PAYMENT ENDPOINTS

GET  /api/payments/methods/            methods the caller may use
POST /api/payments/submit/             payment router
GET  /api/payments/pending/            admin confirmation queue
POST /api/payments/<uuid>/verify/      admin verify (idempotent)
POST /api/payments/<uuid>/reject/      admin reject (reason required)
POST /api/payments/<uuid>/refresh/     admin gateway status refresh
"""

from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.api import DomainErrorMixin, client_ip
from orders.services.order_store import get_order
from payments.serializers import (
    PaymentDecisionSerializer,
    PaymentMethodSerializer,
    PaymentRecordSerializer,
    PaymentRejectSerializer,
    PaymentSubmitSerializer,
)
from payments.services.policy import available_methods_for
from payments.services.router import PaymentRouter
from payments.services.verification import (
    list_pending_payments,
    refresh_capture_status,
    reject_payment,
    verify_payment,
)
from permissions.roles import CAP_PAYMENTS_SUBMIT, CAP_PAYMENTS_VERIFY, HasCapability


def _decision_response(decision):
    order = get_order(order_id=decision.order.id) if decision.order is not None else None
    return Response(
        PaymentDecisionSerializer(
            {"payment": decision.payment, "order": order, "changed": decision.changed}
        ).data
    )


class PaymentMethodListView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PAYMENTS_SUBMIT

    @extend_schema(responses={200: PaymentMethodSerializer(many=True)})
    def get(self, request):
        methods = available_methods_for(request.user)
        return Response(PaymentMethodSerializer(methods, many=True).data)


class PaymentSubmitView(DomainErrorMixin, APIView):
    """
    Route one payment attempt.

    201: payment recorded (verified or pending confirmation)
    200: capture declined (order stays pending)
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PAYMENTS_SUBMIT

    router_class = PaymentRouter

    @extend_schema(request=PaymentSubmitSerializer, responses={201: PaymentRecordSerializer})
    def post(self, request):
        serializer = PaymentSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        outcome = self.router_class().submit(
            order_id=data["order_id"],
            payer=request.user,
            method=data["method"],
            payload=data.get("details") or {},
            ip_address=client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )

        declined = outcome.payment.status == outcome.payment.STATUS_FAILED
        return Response(
            {
                "payment": PaymentRecordSerializer(outcome.payment).data,
                "strategy": outcome.strategy,
                "order_status": outcome.order.status,
                "order_status_label": outcome.order.status_label,
                "confirmed": outcome.confirmed,
                "awaiting_confirmation": outcome.awaiting_confirmation,
            },
            status=status.HTTP_200_OK if declined else status.HTTP_201_CREATED,
        )


class PendingPaymentListView(generics.ListAPIView):
    serializer_class = PaymentRecordSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PAYMENTS_VERIFY
    filterset_fields = ["method", "kind"]

    def get_queryset(self):
        return list_pending_payments()


class PaymentVerifyView(DomainErrorMixin, APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PAYMENTS_VERIFY

    @extend_schema(request=None, responses={200: PaymentDecisionSerializer})
    def post(self, request, payment_id):
        return _decision_response(verify_payment(payment_id=payment_id, actor=request.user))


class PaymentRejectView(DomainErrorMixin, APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PAYMENTS_VERIFY

    @extend_schema(request=PaymentRejectSerializer, responses={200: PaymentDecisionSerializer})
    def post(self, request, payment_id):
        serializer = PaymentRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        decision = reject_payment(
            payment_id=payment_id,
            actor=request.user,
            reason=serializer.validated_data["reason"],
        )
        return _decision_response(decision)


class PaymentRefreshView(DomainErrorMixin, APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PAYMENTS_VERIFY

    @extend_schema(request=None, responses={200: PaymentDecisionSerializer})
    def post(self, request, payment_id):
        return _decision_response(refresh_capture_status(payment_id=payment_id))
