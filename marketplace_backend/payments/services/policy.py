# payments/services/policy.py

"""
PAYMENT METHOD POLICY (READ-ONLY CAPABILITY MAP)

{method_name: MethodPolicy} built from PaymentMethodConfig rows.
The router only reads it; admins edit the rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from core.exceptions import ValidationError
from payments.models import PaymentMethodConfig
from permissions.roles import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_PARTNER, get_user_role

STRATEGY_CAPTURE = PaymentMethodConfig.KIND_CAPTURE
STRATEGY_WALLET = PaymentMethodConfig.KIND_WALLET
STRATEGY_MANUAL = PaymentMethodConfig.KIND_MANUAL


@dataclass(frozen=True)
class MethodPolicy:
    method_name: str
    display_name: str
    kind: str
    enabled: bool
    customer_access: bool
    partner_access: bool
    admin_access: bool
    admin_confirmation_required: bool
    collect_data_only: bool
    instructions: MappingProxyType

    @property
    def strategy(self) -> str:
        """
        Exactly one handling strategy per method.
        """
        if self.admin_confirmation_required:
            return STRATEGY_MANUAL
        return self.kind

    def allows_role(self, role: str | None) -> bool:
        if not self.enabled:
            return False
        return {
            ROLE_CUSTOMER: self.customer_access,
            ROLE_PARTNER: self.partner_access,
            ROLE_ADMIN: self.admin_access,
        }.get(role, False)


def _policy(row: PaymentMethodConfig) -> MethodPolicy:
    return MethodPolicy(
        method_name=row.method_name,
        display_name=row.display_name or row.method_name,
        kind=row.kind,
        enabled=row.enabled,
        customer_access=row.customer_access,
        partner_access=row.partner_access,
        admin_access=row.admin_access,
        admin_confirmation_required=row.admin_confirmation_required,
        collect_data_only=row.collect_data_only,
        instructions=MappingProxyType(dict(row.config_data or {})),
    )


def get_method_policies() -> MappingProxyType:
    return MappingProxyType({row.method_name: _policy(row) for row in PaymentMethodConfig.objects.all()})


def get_method_policy(method: str) -> MethodPolicy:
    method = (method or "").strip()
    policy = get_method_policies().get(method)
    if policy is None:
        raise ValidationError(f"Unknown payment method '{method}'", entity_id=method)
    return policy


def can_use_method(user, method: str) -> bool:
    policy = get_method_policies().get((method or "").strip())
    if policy is None:
        return False
    return policy.allows_role(get_user_role(user)) and not policy.collect_data_only


def available_methods_for(user) -> list[MethodPolicy]:
    role = get_user_role(user)
    return [policy for policy in get_method_policies().values() if policy.allows_role(role)]
