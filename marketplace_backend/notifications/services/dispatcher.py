# notifications/services/dispatcher.py

"""
NOTIFICATION DISPATCHER

notify(event_type, payload) collaborator. Writes outbox rows only; delivery
is somebody else's job. Called inside the caller's transaction so a rolled
back operation never leaves a notification behind.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model

from notifications.models import Notification

logger = logging.getLogger(__name__)

_JSON_TYPES = (str, int, float, bool, type(None), list, dict)


def _json_safe(payload: dict | None) -> dict:
    # Decimal / UUID / datetime -> str
    return {k: (v if isinstance(v, _JSON_TYPES) else str(v)) for k, v in (payload or {}).items()}


def notify(
    *,
    event_type: str,
    recipients,
    payload: dict | None = None,
    order=None,
    title: str = "",
    message: str = "",
) -> list[Notification]:
    unique = []
    seen = set()
    for user in recipients:
        if user is None or user.pk in seen:
            continue
        seen.add(user.pk)
        unique.append(user)

    rows = [
        Notification(
            recipient=user,
            event_type=event_type,
            title=title,
            message=message,
            payload=_json_safe(payload),
            order=order,
        )
        for user in unique
    ]
    created = Notification.objects.bulk_create(rows)

    logger.info(
        "Notification queued",
        extra={
            "event_type": event_type,
            "recipients": len(created),
            "order_id": str(order.id) if order is not None else None,
        },
    )
    return created


def admin_recipients():
    User = get_user_model()
    return User.objects.filter(role=User.ROLE_ADMIN, is_active=True)


def notify_admins(*, event_type: str, payload: dict | None = None, order=None, title: str = "", message: str = ""):
    return notify(
        event_type=event_type,
        recipients=list(admin_recipients()),
        payload=payload,
        order=order,
        title=title,
        message=message,
    )
