# wallet/views/wallet.py

"""
WALLET QUERY ENDPOINTS

GET /api/wallet/                 balance + per-type totals
GET /api/wallet/transactions/    caller's ledger (paginated)
GET /api/wallet/audit/           ledger replay check (admins may pass ?user_id=)
"""

from django.contrib.auth import get_user_model
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.api import DomainErrorMixin
from core.exceptions import NotFoundError
from permissions.roles import CAP_WALLET_REVIEW, CAP_WALLET_USE, HasCapability, user_has_capability
from wallet.serializers import WalletTransactionSerializer
from wallet.services.ledger import audit_balance, list_transactions, wallet_stats


class WalletView(DomainErrorMixin, APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_WALLET_USE

    @extend_schema(description="Current wallet balance and totals per transaction type")
    def get(self, request):
        stats = wallet_stats(user=request.user)
        return Response(
            {
                "balance": str(stats["balance"]),
                "pending_balance": str(stats["pending_balance"]),
                "currency": stats["currency"],
                "totals": {k: str(v) for k, v in stats["totals"].items()},
            }
        )


class WalletTransactionListView(generics.ListAPIView):
    serializer_class = WalletTransactionSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_WALLET_USE
    filterset_fields = ["tx_type", "status"]

    def get_queryset(self):
        return list_transactions(user=self.request.user)


class WalletAuditView(DomainErrorMixin, APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_WALLET_USE

    @extend_schema(
        parameters=[OpenApiParameter("user_id", str, required=False)],
        description="Replay the transaction log and compare it with the stored balance",
    )
    def get(self, request):
        target = request.user
        user_id = (request.query_params.get("user_id") or "").strip()

        if user_id and user_id != str(request.user.pk):
            if not user_has_capability(request.user, CAP_WALLET_REVIEW):
                raise NotFoundError("User not found", entity_id=user_id)
            target = get_user_model().objects.filter(pk=user_id).first()
            if target is None:
                raise NotFoundError("User not found", entity_id=user_id)

        audit = audit_balance(user=target)
        return Response(
            {
                "user_id": audit.user_id,
                "recorded": str(audit.recorded),
                "replayed": str(audit.replayed),
                "difference": str(audit.difference),
                "consistent": audit.consistent,
            }
        )
