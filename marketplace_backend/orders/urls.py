# orders/urls.py

"""
ORDER API URLS

/api/orders/                                 list / create
/api/orders/<uuid>/                          retrieve / DELETE (admin)
/api/orders/by-number/<order_number>/        lookup by human-readable number
/api/orders/changes/?after=<seq>             authoritative change feed (admin)
/api/orders/<uuid>/status/                   admin status edit
/api/orders/<uuid>/confirm/                  admin confirm
/api/orders/<uuid>/cancel/                   admin cancel (+ partner refund)
/api/orders/<uuid>/assign-partner/           admin assign
/api/orders/<uuid>/ship/                     admin record shipment
/api/orders/<uuid>/complete/                 admin mark delivered
/api/orders/<uuid>/tracking-updates/         admin tracking timeline entry

Public tracking lives in orders/public_urls.py (mounted at /api/public/).
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from orders.views import OrderViewSet

router = DefaultRouter()
router.register(r"", OrderViewSet, basename="orders")

urlpatterns = [
    path("", include(router.urls)),
]
