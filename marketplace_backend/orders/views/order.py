# orders/views/order.py

"""
ORDER API

Visibility:
- customers: their own orders
- partners: their own purchases + orders assigned to them
- admins: everything (filterable)

Every write goes through orders.services; views only parse input,
pick the capability and serialize the result.
"""

from django.contrib.auth import get_user_model
from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import DomainErrorMixin, domain_error_response
from core.exceptions import MarketplaceError, NotFoundError
from orders.models import Order
from orders.serializers import (
    AssignPartnerSerializer,
    CancelOrderSerializer,
    ChangeEventSerializer,
    CustomerOrderSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    ShipmentSerializer,
    StatusUpdateSerializer,
    TrackingUpdateInputSerializer,
    TrackingUpdateSerializer,
)
from orders.services.cancellation import cancel_order
from orders.services.change_feed import changes_since, latest_sequence
from orders.services.deletion import delete_order
from orders.services.lifecycle_controller import (
    assign_partner,
    complete_order,
    confirm_order,
    update_status,
)
from orders.services.order_store import create_order, get_order
from orders.services.shipping import add_tracking_update, record_shipment
from permissions.roles import (
    CAP_ORDERS_CANCEL,
    CAP_ORDERS_CREATE,
    CAP_ORDERS_DELETE,
    CAP_ORDERS_MANAGE,
    CAP_ORDERS_SYNC,
    CAP_ORDERS_VIEW_ALL,
    CAP_ORDERS_VIEW_ASSIGNED,
    CAP_ORDERS_VIEW_OWN,
    HasAnyCapability,
    HasCapability,
    user_has_capability,
)

READ_ACTIONS = {"list", "retrieve", "by_number"}

ACTION_CAPABILITIES = {
    "create": CAP_ORDERS_CREATE,
    "destroy": CAP_ORDERS_DELETE,
    "set_status": CAP_ORDERS_MANAGE,
    "confirm": CAP_ORDERS_MANAGE,
    "cancel": CAP_ORDERS_CANCEL,
    "assign": CAP_ORDERS_MANAGE,
    "ship": CAP_ORDERS_MANAGE,
    "complete": CAP_ORDERS_MANAGE,
    "tracking_updates": CAP_ORDERS_MANAGE,
    "changes": CAP_ORDERS_SYNC,
}


class OrderViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "payment_status", "partner", "customer"]
    lookup_value_regex = "[0-9a-f-]{36}"

    required_capability = None
    required_any_capabilities = None

    def get_permissions(self):
        if self.action in READ_ACTIONS:
            self.required_any_capabilities = {
                CAP_ORDERS_VIEW_OWN,
                CAP_ORDERS_VIEW_ASSIGNED,
                CAP_ORDERS_VIEW_ALL,
            }
            return [IsAuthenticated(), HasAnyCapability()]

        self.required_capability = ACTION_CAPABILITIES.get(self.action)
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        user = self.request.user
        qs = Order.objects.select_related("customer", "partner", "logistics").prefetch_related(
            "items", "logistics__updates"
        )

        if user_has_capability(user, CAP_ORDERS_VIEW_ALL):
            return qs
        if user_has_capability(user, CAP_ORDERS_VIEW_ASSIGNED):
            return qs.filter(Q(customer=user) | Q(partner=user))
        return qs.filter(customer=user)

    def get_serializer_class(self):
        user = self.request.user
        if user_has_capability(user, CAP_ORDERS_VIEW_ALL) or user_has_capability(user, CAP_ORDERS_VIEW_ASSIGNED):
            return OrderSerializer
        return CustomerOrderSerializer

    def _render(self, order, *, http_status=status.HTTP_200_OK):
        order = get_order(order_id=order.id)
        return Response(self.get_serializer(order).data, status=http_status)

    # ------------------------------------------------------------------
    # CREATE
    # ------------------------------------------------------------------

    @extend_schema(request=OrderCreateSerializer, responses={201: OrderSerializer})
    def create(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = create_order(
            customer=request.user,
            items=[
                {
                    "product_id": item["product_id"],
                    "quantity": item["quantity"],
                    "unit_price": item.get("unit_price"),
                }
                for item in data["items"]
            ],
            shipping_address=data["shipping_address"],
            billing_address=data.get("billing_address") or {},
            payment_method=data.get("payment_method", ""),
            notes=data.get("notes", ""),
        )
        return self._render(order, http_status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"], url_path=r"by-number/(?P<order_number>[A-Za-z0-9-]+)")
    def by_number(self, request, order_number=None):
        order = self.get_queryset().filter(order_number=order_number).first()
        if order is None:
            raise NotFoundError(f"Order {order_number} not found", entity_id=order_number)
        return Response(self.get_serializer(order).data)

    @extend_schema(
        parameters=[
            OpenApiParameter("after", int, required=False),
            OpenApiParameter("limit", int, required=False),
        ],
        responses={200: ChangeEventSerializer(many=True)},
        description="Authoritative change feed; resync with ?after=<last sequence seen>",
    )
    @action(detail=False, methods=["get"], url_path="changes")
    def changes(self, request):
        try:
            after = int(request.query_params.get("after") or 0)
            limit = int(request.query_params.get("limit") or 200)
        except ValueError:
            return Response(
                {"detail": "after and limit must be integers."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        events = changes_since(after_sequence=after, limit=limit)
        return Response(
            {
                "events": ChangeEventSerializer(events, many=True).data,
                "last_sequence": events[-1].sequence if events else max(after, 0),
                "latest_sequence": latest_sequence(),
            }
        )

    # ------------------------------------------------------------------
    # ADMIN LIFECYCLE
    # ------------------------------------------------------------------

    @extend_schema(request=StatusUpdateSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = update_status(
            order_id=pk,
            target_status=serializer.validated_data["status"],
            actor=request.user,
        )
        return self._render(order)

    @action(detail=True, methods=["post"], url_path="confirm")
    def confirm(self, request, pk=None):
        return self._render(confirm_order(order_id=pk, actor=request.user))

    @extend_schema(request=CancelOrderSerializer)
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        """
        {success: true, order} | {success: false, error}
        """
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = cancel_order(
                order_id=pk,
                reason=serializer.validated_data.get("reason", ""),
                actor=request.user,
            )
        except MarketplaceError as exc:
            response = domain_error_response(request, exc)
            response.data["success"] = False
            return response

        order = get_order(order_id=result.order.id)
        return Response(
            {
                "success": result.success,
                "order": self.get_serializer(order).data,
                "refund": (
                    {"transaction_id": str(result.refund.id), "amount": str(result.refund.amount)}
                    if result.refunded
                    else None
                ),
            }
        )

    def destroy(self, request, pk=None, *args, **kwargs):
        summary = delete_order(order_id=pk, actor=request.user)
        return Response(summary.as_dict(), status=status.HTTP_200_OK)

    @extend_schema(request=AssignPartnerSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="assign-partner")
    def assign(self, request, pk=None):
        serializer = AssignPartnerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        partner_id = serializer.validated_data["partner_id"]
        partner = get_user_model().objects.filter(pk=partner_id).first()
        if partner is None:
            raise NotFoundError(f"Partner {partner_id} not found", entity_id=partner_id)

        order = assign_partner(order_id=pk, partner=partner, actor=request.user)
        return self._render(order)

    @extend_schema(request=ShipmentSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="ship")
    def ship(self, request, pk=None):
        serializer = ShipmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = record_shipment(
            order_id=pk,
            tracking_number=data["tracking_number"],
            carrier=data["carrier"],
            shipping_method=data.get("shipping_method", "standard"),
            estimated_delivery=data.get("estimated_delivery"),
            actor=request.user,
        )
        return self._render(order)

    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request, pk=None):
        return self._render(complete_order(order_id=pk, actor=request.user))

    @extend_schema(request=TrackingUpdateInputSerializer, responses={201: TrackingUpdateSerializer})
    @action(detail=True, methods=["post"], url_path="tracking-updates")
    def tracking_updates(self, request, pk=None):
        serializer = TrackingUpdateInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        update = add_tracking_update(
            order_id=pk,
            status=data["status"],
            location=data.get("location", ""),
            description=data.get("description", ""),
            actor=request.user,
        )
        return Response(TrackingUpdateSerializer(update).data, status=status.HTTP_201_CREATED)
