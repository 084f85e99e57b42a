# notifications/admin.py

from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("event_type", "recipient", "order", "is_read", "created_at")
    list_filter = ("event_type", "is_read")
    search_fields = ("recipient__email", "title")
    readonly_fields = ("payload", "created_at")
