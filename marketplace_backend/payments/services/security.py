# payments/services/security.py

from __future__ import annotations

import logging

from payments.models import PaymentSecurityLog

logger = logging.getLogger(__name__)


def log_security_event(
    *,
    event_type: str,
    user=None,
    order_number: str = "",
    method: str = "",
    payload: dict | None = None,
    ip_address: str | None = None,
    user_agent: str = "",
) -> PaymentSecurityLog:
    entry = PaymentSecurityLog.objects.create(
        user=user,
        event_type=event_type,
        order_number=order_number or "",
        method=method or "",
        payload={k: str(v) for k, v in (payload or {}).items()},
        ip_address=ip_address or None,
        user_agent=(user_agent or "")[:255],
    )
    logger.warning(
        "Payment security event",
        extra={
            "event_type": event_type,
            "user_id": str(user.pk) if user is not None else None,
            "order_number": order_number,
            "method": method,
        },
    )
    return entry
