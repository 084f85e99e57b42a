# core/exceptions.py

"""
MARKETPLACE DOMAIN ERRORS

Centralized error taxonomy shared by the order, payment and wallet services.

Rules:
- Every error carries a stable `code` (admin-facing) and a customer-safe
  `public_message` (no internal codes, no ids).
- `entity_id` names the record an administrator needs to retry or fix.
- Validation/conflict errors are returned to the caller as-is and never retried.
"""

from __future__ import annotations


class MarketplaceError(Exception):
    """Base exception for all marketplace service failures."""

    code = "MARKETPLACE_ERROR"
    public_message = "Something went wrong. Please try again later."

    def __init__(self, message: str = "", *, entity_id=None, code: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.entity_id = str(entity_id) if entity_id is not None else None
        if code:
            self.code = code


class ValidationError(MarketplaceError):
    """Malformed input."""

    code = "VALIDATION_ERROR"
    public_message = "Some of the details you entered are not valid."


class NotFoundError(MarketplaceError):
    """Unknown id or order number."""

    code = "NOT_FOUND"
    public_message = "We could not find what you were looking for."


class ConflictError(MarketplaceError):
    """Illegal state transition or duplicate key."""

    code = "CONFLICT"
    public_message = "This order can no longer be changed."


class InsufficientBalanceError(MarketplaceError):
    """Wallet debit would take the balance below zero."""

    code = "INSUFFICIENT_BALANCE"
    public_message = "Your wallet balance is too low for this payment."


class PolicyRejectedError(MarketplaceError):
    """Payment method not allowed for the caller's role."""

    code = "PAYMENT_METHOD_NOT_ALLOWED"
    public_message = "This payment method is not available for your account."


class ExternalGatewayError(MarketplaceError):
    """Capture/status call to the payment gateway failed."""

    code = "GATEWAY_ERROR"
    public_message = "The payment provider is unavailable. Please try again shortly."

    def __init__(self, message: str = "", *, retryable: bool = False, **kwargs):
        super().__init__(message, **kwargs)
        self.retryable = retryable


class PartialFailureError(MarketplaceError):
    """
    A multi-step operation finished some steps but not all.

    `primary_succeeded` tells the caller whether the first (primary) state
    change is durable even though a later step failed.
    """

    code = "PARTIAL_FAILURE"
    public_message = (
        "Your request was received but could not be fully processed. "
        "Our team has been notified."
    )

    def __init__(
        self,
        message: str = "",
        *,
        completed_steps=(),
        failed_step: str = "",
        primary_succeeded: bool = True,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.completed_steps = tuple(completed_steps)
        self.failed_step = failed_step
        self.primary_succeeded = primary_succeeded


class PermissionDeniedError(MarketplaceError):
    """Caller lacks the capability for an administrative operation."""

    code = "FORBIDDEN"
    public_message = "You are not allowed to perform this action."
