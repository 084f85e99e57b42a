# products/views/product.py

"""
PRODUCT VIEWSET

- Any authenticated user can read active parts (price + stock).
- Admins manage the catalog.
"""

from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from permissions.roles import ROLE_ADMIN, IsAdmin, get_user_role
from products.models import Product
from products.serializers import ProductSerializer


class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    filterset_fields = ["is_active", "brand", "sku", "part_number"]

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsAdmin()]

    def get_queryset(self):
        qs = Product.objects.all()
        if get_user_role(self.request.user) != ROLE_ADMIN:
            qs = qs.filter(is_active=True)
        return qs.order_by("name")
