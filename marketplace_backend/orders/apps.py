# orders/apps.py

"""
ORDERS APP CONFIG

Order lifecycle core:
- Order Store (create / lookup)
- Lifecycle Controller (state machine + compensating actions)
- Admin reconciliation (change feed, deletion audit)
- Public tracking lookup
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders"
