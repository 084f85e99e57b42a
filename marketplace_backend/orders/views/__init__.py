from .order import OrderViewSet
from .public_tracking import PublicPollThrottle, PublicTrackingView

__all__ = ["OrderViewSet", "PublicTrackingView", "PublicPollThrottle"]
