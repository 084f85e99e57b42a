# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
# customer: buys parts
# partner: fulfils orders and earns commission (B2B side)
# admin: back-office operator
ROLE_CUSTOMER = "customer"
ROLE_PARTNER = "partner"
ROLE_ADMIN = "admin"

ALL_ROLES = {
    ROLE_CUSTOMER,
    ROLE_PARTNER,
    ROLE_ADMIN,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views should protect capabilities, not raw roles.
CAP_ORDERS_CREATE = "orders.create"
CAP_ORDERS_VIEW_OWN = "orders.view_own"
CAP_ORDERS_VIEW_ASSIGNED = "orders.view_assigned"
CAP_ORDERS_VIEW_ALL = "orders.view_all"
CAP_ORDERS_MANAGE = "orders.manage"          # confirm, status edits, assign, ship, complete
CAP_ORDERS_CANCEL = "orders.cancel"
CAP_ORDERS_DELETE = "orders.delete"          # irreversible cascade
CAP_ORDERS_SYNC = "orders.sync"              # authoritative change feed

CAP_PAYMENTS_SUBMIT = "payments.submit"
CAP_PAYMENTS_VERIFY = "payments.verify"

CAP_WALLET_USE = "wallet.use"
CAP_WALLET_REVIEW = "wallet.review"          # approve/reject funding requests

ALL_CAPABILITIES = {
    CAP_ORDERS_CREATE,
    CAP_ORDERS_VIEW_OWN,
    CAP_ORDERS_VIEW_ASSIGNED,
    CAP_ORDERS_VIEW_ALL,
    CAP_ORDERS_MANAGE,
    CAP_ORDERS_CANCEL,
    CAP_ORDERS_DELETE,
    CAP_ORDERS_SYNC,
    CAP_PAYMENTS_SUBMIT,
    CAP_PAYMENTS_VERIFY,
    CAP_WALLET_USE,
    CAP_WALLET_REVIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_PARTNER: {
        CAP_ORDERS_CREATE,
        CAP_ORDERS_VIEW_OWN,
        CAP_ORDERS_VIEW_ASSIGNED,
        CAP_PAYMENTS_SUBMIT,
        CAP_WALLET_USE,
    },
    ROLE_CUSTOMER: {
        CAP_ORDERS_CREATE,
        CAP_ORDERS_VIEW_OWN,
        CAP_PAYMENTS_SUBMIT,
        CAP_WALLET_USE,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    if not user or not getattr(user, "is_authenticated", False):
        return set()
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def user_has_capability(user, capability: str) -> bool:
    return capability in capabilities_for(user)


# =========================================================
# Base Role Permission (Internal Use)
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_ORDERS_CANCEL
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default
            return False

        return required in capabilities_for(user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a list.

    Usage:
        view.required_any_capabilities = {CAP_ORDERS_VIEW_OWN, CAP_ORDERS_VIEW_ALL}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = capabilities_for(user)
        return any(cap in caps for cap in set(required))


# =========================================================
# Role Permissions
# =========================================================
class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsPartner(BaseRolePermission):
    allowed_roles = {ROLE_PARTNER}


class IsPartnerOrAdmin(BaseRolePermission):
    allowed_roles = {ROLE_PARTNER, ROLE_ADMIN}


class IsCustomer(BaseRolePermission):
    allowed_roles = {ROLE_CUSTOMER}
