# wallet/views/funding.py

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.api import DomainErrorMixin
from core.exceptions import ValidationError
from permissions.roles import (
    CAP_WALLET_REVIEW,
    CAP_WALLET_USE,
    HasCapability,
    user_has_capability,
)
from wallet.models import WalletFundingRequest
from wallet.serializers import (
    DepositRequestSerializer,
    FundingDecisionSerializer,
    WalletFundingRequestSerializer,
    WithdrawalRequestSerializer,
)
from wallet.services.funding import (
    approve_funding_request,
    reject_funding_request,
    request_deposit,
    request_withdrawal,
)


class DepositRequestView(DomainErrorMixin, APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_WALLET_USE

    @extend_schema(request=DepositRequestSerializer, responses={201: WalletFundingRequestSerializer})
    def post(self, request):
        serializer = DepositRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        req = request_deposit(
            user=request.user,
            amount=data["amount"],
            crypto_type=data["crypto_type"],
            proof=data["proof"],
            wallet_address=data.get("wallet_address", ""),
            crypto_amount=data.get("crypto_amount"),
        )
        return Response(WalletFundingRequestSerializer(req).data, status=status.HTTP_201_CREATED)


class WithdrawalRequestView(DomainErrorMixin, APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_WALLET_USE

    @extend_schema(request=WithdrawalRequestSerializer, responses={201: WalletFundingRequestSerializer})
    def post(self, request):
        serializer = WithdrawalRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        req = request_withdrawal(
            user=request.user,
            amount=data["amount"],
            crypto_type=data["crypto_type"],
            wallet_address=data["wallet_address"],
            destination_tag=data.get("destination_tag", ""),
            crypto_amount=data.get("crypto_amount"),
        )
        return Response(WalletFundingRequestSerializer(req).data, status=status.HTTP_201_CREATED)


class FundingRequestViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    list/retrieve: own requests (admins see all)
    approve/reject: CAP_WALLET_REVIEW
    """

    serializer_class = WalletFundingRequestSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "kind", "crypto_type"]
    lookup_value_regex = "[0-9a-f-]{36}"

    required_capability = None

    def get_permissions(self):
        if self.action in ("approve", "reject"):
            self.required_capability = CAP_WALLET_REVIEW
        else:
            self.required_capability = CAP_WALLET_USE
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = WalletFundingRequest.objects.select_related("user")
        if user_has_capability(self.request.user, CAP_WALLET_REVIEW):
            return qs
        return qs.filter(user=self.request.user)

    @extend_schema(request=FundingDecisionSerializer, responses={200: WalletFundingRequestSerializer})
    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request, pk=None):
        serializer = FundingDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        req = approve_funding_request(
            request_id=pk,
            actor=request.user,
            note=serializer.validated_data.get("note", ""),
        )
        return Response(WalletFundingRequestSerializer(req).data)

    @extend_schema(request=FundingDecisionSerializer, responses={200: WalletFundingRequestSerializer})
    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request, pk=None):
        serializer = FundingDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        reason = serializer.validated_data.get("note", "")
        if not reason.strip():
            raise ValidationError("A rejection reason is required")

        req = reject_funding_request(request_id=pk, actor=request.user, reason=reason)
        return Response(WalletFundingRequestSerializer(req).data)
