# orders/views/public_tracking.py

"""
PUBLIC TRACKING LOOKUP

GET /api/public/tracking/<tracking_number>/

- No auth; independent of the authenticated order views.
- Throttled (public_poll): storefronts poll this endpoint.
- Exposes the carrier timeline only: no customer, no amounts.
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from core.api import DomainErrorMixin
from orders.services.shipping import public_tracking_lookup


class PublicPollThrottle(AnonRateThrottle):
    """
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['public_poll'].
    """

    scope = "public_poll"


class PublicTrackingView(DomainErrorMixin, APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicPollThrottle]

    @extend_schema(
        tags=["Public"],
        responses={
            200: OpenApiResponse(description="Tracking timeline"),
            404: OpenApiResponse(description="Unknown tracking number"),
            429: OpenApiResponse(description="Rate limited"),
        },
    )
    def get(self, request, tracking_number, *args, **kwargs):
        return Response(public_tracking_lookup(tracking_number=tracking_number))
