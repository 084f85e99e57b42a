# orders/models/__init__.py

"""
ORDERS MODELS PACKAGE EXPORTS
"""

from .change_event import OrderChangeEvent
from .deletion_audit import OrderDeletionAudit
from .logistics import LogisticsRecord, TrackingUpdate
from .order import Order
from .order_item import OrderItem

__all__ = [
    "Order",
    "OrderItem",
    "LogisticsRecord",
    "TrackingUpdate",
    "OrderChangeEvent",
    "OrderDeletionAudit",
]
