# orders/public_urls.py

from django.urls import path

from orders.views import PublicTrackingView

urlpatterns = [
    path("tracking/<str:tracking_number>/", PublicTrackingView.as_view(), name="public-tracking"),
]
