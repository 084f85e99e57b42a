# core/api.py

"""
API ERROR NORMALIZATION

Canonical error envelope:
    {"error": {"code": "...", "message": "...", "entity_id": "..."}}

Audience rules:
- Admins get the specific failure code, reason and entity id.
- Everyone else gets a friendly message only (no internal codes).
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from core.exceptions import (
    ConflictError,
    ExternalGatewayError,
    InsufficientBalanceError,
    MarketplaceError,
    NotFoundError,
    PartialFailureError,
    PermissionDeniedError,
    PolicyRejectedError,
    ValidationError,
)
from permissions.roles import ROLE_ADMIN, get_user_role

HTTP_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InsufficientBalanceError, status.HTTP_409_CONFLICT),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PolicyRejectedError, status.HTTP_403_FORBIDDEN),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (ExternalGatewayError, status.HTTP_502_BAD_GATEWAY),
    (PartialFailureError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def error_response(*, code: str, message: str, http_status: int, entity_id=None, extra=None):
    """
    Canonical API error response.
    """
    body = {"code": code, "message": message}
    if entity_id is not None:
        body["entity_id"] = str(entity_id)
    if extra:
        body.update(extra)
    return Response({"error": body}, status=http_status)


def http_status_for(exc: MarketplaceError) -> int:
    for klass, http_status in HTTP_STATUS_BY_ERROR:
        if isinstance(exc, klass):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def domain_error_response(request, exc: MarketplaceError):
    http_status = http_status_for(exc)
    user = getattr(request, "user", None)
    is_admin = bool(user and user.is_authenticated and get_user_role(user) == ROLE_ADMIN)

    extra = None
    if isinstance(exc, PartialFailureError):
        extra = {"primary_succeeded": exc.primary_succeeded}

    if is_admin:
        if isinstance(exc, PartialFailureError):
            extra.update(
                {
                    "completed_steps": list(exc.completed_steps),
                    "failed_step": exc.failed_step,
                }
            )
        return error_response(
            code=exc.code,
            message=exc.message,
            http_status=http_status,
            entity_id=exc.entity_id,
            extra=extra,
        )

    body = {"detail": exc.public_message}
    if extra:
        body.update(extra)
    return Response(body, status=http_status)


class DomainErrorMixin:
    """
    APIView mixin: turns MarketplaceError raised inside a handler into the
    audience-appropriate error response.
    """

    def handle_exception(self, exc):
        if isinstance(exc, MarketplaceError):
            return domain_error_response(self.request, exc)
        return super().handle_exception(exc)


def client_ip(request) -> str | None:
    forwarded = (request.META.get("HTTP_X_FORWARDED_FOR") or "").split(",")[0].strip()
    return forwarded or request.META.get("REMOTE_ADDR") or None
