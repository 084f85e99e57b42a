# payments/tests/fakes.py

from __future__ import annotations

from core.exceptions import ExternalGatewayError
from payments.services.gateway import STATUS_CAPTURED, STATUS_DECLINED, STATUS_PENDING, CaptureResult


class FakeGateway:
    """
    In-memory capture gateway.

    mode: "approve" | "decline" | "pending" | "error"
    on_capture: optional callable run before the result is returned
    """

    def __init__(self, mode: str = "approve", *, on_capture=None, status_after: str = STATUS_CAPTURED):
        self.mode = mode
        self.on_capture = on_capture
        self.status_after = status_after
        self.captures = []
        self.status_calls = []

    def capture(self, *, amount, currency, reference, card_token, metadata=None) -> CaptureResult:
        self.captures.append({"amount": amount, "currency": currency, "reference": reference, "card_token": card_token})

        if self.on_capture is not None:
            self.on_capture()

        if self.mode == "error":
            raise ExternalGatewayError("Gateway timed out", retryable=True)
        if self.mode == "pending":
            return CaptureResult(approved=False, reference=reference, status=STATUS_PENDING)
        if self.mode == "decline":
            return CaptureResult(
                approved=False,
                reference=reference,
                status=STATUS_DECLINED,
                decline_reason="Insufficient funds",
            )
        return CaptureResult(approved=True, reference=f"GW-{reference}", status=STATUS_CAPTURED)

    def fetch_status(self, *, reference) -> CaptureResult:
        self.status_calls.append(reference)
        return CaptureResult(
            approved=self.status_after == STATUS_CAPTURED,
            reference=reference,
            status=self.status_after,
            decline_reason="Card expired" if self.status_after == STATUS_DECLINED else "",
        )


class DefaultFakeGateway(FakeGateway):
    """Approving gateway constructible without arguments (settings.PAYMENTS["GATEWAY_CLASS"])."""
