# core/retry.py

"""
BOUNDED RETRY FOR IDEMPOTENT GATEWAY CALLS

Only ExternalGatewayError(retryable=True) is retried. Use this for status
queries and verification lookups, never for capture, order creation or refunds.
"""

from __future__ import annotations

import logging
import time

from django.conf import settings

from core.exceptions import ExternalGatewayError

logger = logging.getLogger(__name__)


def _max_retries() -> int:
    cfg = (getattr(settings, "PAYMENTS", {}) or {}).get("GATEWAY") or {}
    return int(cfg.get("MAX_RETRIES", 3))


def retry_idempotent(func, *args, attempts: int | None = None, backoff: float = 0.2, sleep=time.sleep, **kwargs):
    attempts = attempts or _max_retries()

    for attempt in range(1, attempts + 1):
        try:
            return func(*args, **kwargs)
        except ExternalGatewayError as exc:
            if not exc.retryable or attempt >= attempts:
                raise
            logger.warning(
                "Retrying idempotent gateway call",
                extra={"attempt": attempt, "max_attempts": attempts, "error": str(exc)},
            )
            sleep(backoff * attempt)
