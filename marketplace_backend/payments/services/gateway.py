# payments/services/gateway.py

"""
CAPTURE GATEWAY CLIENT

Opaque capture / status calls. Wire details stay in this module.

Config: settings.PAYMENTS["GATEWAY"] = {BASE_URL, SECRET_KEY, TIMEOUT, MAX_RETRIES}
Class:  settings.PAYMENTS["GATEWAY_CLASS"] (dotted path; swapped in tests)

Error mapping:
- HTTP 5xx / network failure -> ExternalGatewayError(retryable=True)
- HTTP 4xx / malformed body  -> ExternalGatewayError(retryable=False)
- A well-formed decline is NOT an error: CaptureResult(approved=False)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings
from django.utils.module_loading import import_string

from core.exceptions import ExternalGatewayError

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_CLASS = "payments.services.gateway.HttpCaptureGateway"

STATUS_CAPTURED = "captured"
STATUS_DECLINED = "declined"
STATUS_PENDING = "pending"


@dataclass(frozen=True)
class CaptureResult:
    approved: bool
    reference: str
    status: str
    decline_reason: str = ""
    raw: dict = field(default_factory=dict)


def _gateway_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    return payments.get("GATEWAY") or {}


def _to_minor_units(amount) -> int:
    return int((Decimal(str(amount)) * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _safe_preview(text: str, limit: int = 300) -> str:
    text = (text or "").strip()
    return text if len(text) <= limit else text[:limit] + "...(truncated)"


class HttpCaptureGateway:
    def __init__(self, *, base_url: str | None = None, secret_key: str | None = None, timeout: int | None = None):
        cfg = _gateway_cfg()
        self.base_url = (base_url or cfg.get("BASE_URL") or "").rstrip("/")
        self.secret_key = secret_key or cfg.get("SECRET_KEY") or ""
        self.timeout = int(timeout or cfg.get("TIMEOUT") or 20)

    def _request_json(self, method: str, path: str, *, body: dict | None = None) -> dict[str, Any]:
        if not self.base_url or not self.secret_key:
            raise ExternalGatewayError("Payment gateway is not configured", retryable=False)

        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = Request(
            f"{self.base_url}{path}",
            data=data,
            headers={
                "Authorization": f"Bearer {self.secret_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            method=method,
        )

        try:
            with urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as exc:
            retryable = exc.code >= 500
            logger.warning(
                "Gateway HTTP error",
                extra={"path": path, "status_code": exc.code, "retryable": retryable},
            )
            raise ExternalGatewayError(f"Gateway HTTP {exc.code}", retryable=retryable) from exc
        except (URLError, TimeoutError) as exc:
            logger.warning("Gateway unreachable", extra={"path": path, "error": str(exc)})
            raise ExternalGatewayError(f"Gateway unreachable: {exc}", retryable=True) from exc

        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            raise ExternalGatewayError(f"Gateway returned non-JSON: {_safe_preview(raw)}") from exc
        if not isinstance(parsed, dict):
            raise ExternalGatewayError("Gateway returned an unexpected body")
        return parsed

    @staticmethod
    def _result(parsed: dict, *, reference: str) -> CaptureResult:
        status = str(parsed.get("status") or "").strip().lower()
        return CaptureResult(
            approved=status == STATUS_CAPTURED,
            reference=str(parsed.get("reference") or reference),
            status=status or STATUS_PENDING,
            decline_reason=str(parsed.get("decline_reason") or parsed.get("message") or ""),
            raw=parsed,
        )

    def capture(self, *, amount, currency: str, reference: str, card_token: str, metadata: dict | None = None) -> CaptureResult:
        parsed = self._request_json(
            "POST",
            "/captures",
            body={
                "amount": _to_minor_units(amount),
                "currency": currency,
                "reference": reference,
                "source": card_token,
                "metadata": metadata or {},
            },
        )
        return self._result(parsed, reference=reference)

    def fetch_status(self, *, reference: str) -> CaptureResult:
        parsed = self._request_json("GET", f"/captures/{reference}")
        return self._result(parsed, reference=reference)


def get_gateway():
    payments = getattr(settings, "PAYMENTS", {}) or {}
    return import_string(payments.get("GATEWAY_CLASS") or DEFAULT_GATEWAY_CLASS)()
