from .inputs import (
    AssignPartnerSerializer,
    CancelOrderSerializer,
    OrderCreateSerializer,
    OrderItemInputSerializer,
    ShipmentSerializer,
    StatusUpdateSerializer,
    TrackingUpdateInputSerializer,
)
from .order import (
    ChangeEventSerializer,
    CustomerOrderSerializer,
    LogisticsRecordSerializer,
    OrderItemSerializer,
    OrderSerializer,
    TrackingUpdateSerializer,
)

__all__ = [
    "OrderItemInputSerializer",
    "OrderCreateSerializer",
    "StatusUpdateSerializer",
    "CancelOrderSerializer",
    "AssignPartnerSerializer",
    "ShipmentSerializer",
    "TrackingUpdateInputSerializer",
    "OrderItemSerializer",
    "OrderSerializer",
    "CustomerOrderSerializer",
    "LogisticsRecordSerializer",
    "TrackingUpdateSerializer",
    "ChangeEventSerializer",
]
