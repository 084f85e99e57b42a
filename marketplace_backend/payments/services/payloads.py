# payments/services/payloads.py

"""
PER-KIND PAYMENT PAYLOADS (TAGGED UNION)

CapturePayload | WalletPayload | ManualPayload

Each kind has its own serializer; the router never sees a raw dict.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Union

from rest_framework import serializers

from core.exceptions import ValidationError
from payments.services.policy import STRATEGY_CAPTURE, STRATEGY_MANUAL, STRATEGY_WALLET


@dataclass(frozen=True)
class CapturePayload:
    card_token: str
    cardholder_name: str = ""
    last4: str = ""

    kind = STRATEGY_CAPTURE

    def public_data(self) -> dict:
        # the token goes to the gateway only; never stored
        return {"cardholder_name": self.cardholder_name, "last4": self.last4}


@dataclass(frozen=True)
class WalletPayload:
    note: str = ""

    kind = STRATEGY_WALLET

    def public_data(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ManualPayload:
    reference: str
    proof: str = ""
    sender_name: str = ""
    crypto_type: str = ""
    transaction_hash: str = ""

    kind = STRATEGY_MANUAL

    def public_data(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v}


PaymentPayload = Union[CapturePayload, WalletPayload, ManualPayload]


class CapturePayloadSerializer(serializers.Serializer):
    card_token = serializers.CharField(max_length=255)
    cardholder_name = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    last4 = serializers.RegexField(r"^\d{4}$", required=False, allow_blank=True, default="")


class WalletPayloadSerializer(serializers.Serializer):
    note = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class ManualPayloadSerializer(serializers.Serializer):
    reference = serializers.CharField(max_length=128)
    proof = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    sender_name = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    crypto_type = serializers.CharField(max_length=16, required=False, allow_blank=True, default="")
    transaction_hash = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


PAYLOAD_TYPES = {
    STRATEGY_CAPTURE: (CapturePayloadSerializer, CapturePayload),
    STRATEGY_WALLET: (WalletPayloadSerializer, WalletPayload),
    STRATEGY_MANUAL: (ManualPayloadSerializer, ManualPayload),
}


def parse_payload(strategy: str, data) -> PaymentPayload:
    try:
        serializer_class, payload_class = PAYLOAD_TYPES[strategy]
    except KeyError as exc:
        raise ValidationError(f"Unsupported payment strategy '{strategy}'") from exc

    serializer = serializer_class(data=data or {})
    if not serializer.is_valid():
        fields = ", ".join(sorted(serializer.errors))
        raise ValidationError(f"Invalid {strategy} payment details: {fields}")
    return payload_class(**serializer.validated_data)
