# notifications/views.py

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from notifications.models import Notification
from notifications.serializers import NotificationSerializer


class NotificationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    The caller's own in-app notifications.
    """

    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["is_read", "event_type"]
    lookup_value_regex = "[0-9a-f-]{36}"

    def get_queryset(self):
        return Notification.objects.filter(recipient=self.request.user).select_related("order")

    @action(detail=True, methods=["post"], url_path="read")
    def mark_read(self, request, pk=None):
        updated = self.get_queryset().filter(pk=pk).update(is_read=True)
        if not updated:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response({"id": pk, "is_read": True})
