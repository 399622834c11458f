"""
Gateway wire format helpers

Webhooks are signed with HMAC-SHA256 over the raw body, base64 encoded in the
`x-gateway-signature` header. Payload:

    {
        "type": "payment.approved",
        "externalReference": "...",
        "amount": 45,
        "currency": "USD",
        "metadata": {"purchaseId": "..."}
    }
"""

import base64
import hashlib
import hmac
from typing import Any, Mapping, Optional
from uuid import UUID

import orjson

from src.platform.exception.exceptions import GatewayRejectedError
from src.service.purchasing.domain.value_object.payment import (
    PaymentOutcome,
    PaymentOutcomeStatus,
)


SIGNATURE_HEADER = 'x-gateway-signature'

_STATUS_ALIASES = {
    'approved': PaymentOutcomeStatus.APPROVED,
    'succeeded': PaymentOutcomeStatus.APPROVED,
    'paid': PaymentOutcomeStatus.APPROVED,
    'pending': PaymentOutcomeStatus.PENDING,
    'in_process': PaymentOutcomeStatus.PENDING,
    'rejected': PaymentOutcomeStatus.REJECTED,
    'failed': PaymentOutcomeStatus.REJECTED,
    'cancelled': PaymentOutcomeStatus.CANCELLED,
    'canceled': PaymentOutcomeStatus.CANCELLED,
}


def sign_payload(*, secret: str, payload: bytes) -> str:
    mac = hmac.new(secret.encode(), payload, hashlib.sha256).digest()
    return base64.b64encode(mac).decode()


def verify_and_decode(
    *, secret: str, payload: bytes, headers: Mapping[str, str]
) -> dict[str, Any]:
    signature = _get_header(headers, SIGNATURE_HEADER)
    expected = sign_payload(secret=secret, payload=payload)
    if not signature or not hmac.compare_digest(expected, signature):
        raise GatewayRejectedError('Invalid webhook signature')
    try:
        data = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise GatewayRejectedError('Invalid webhook payload') from e
    if not isinstance(data, dict):
        raise GatewayRejectedError('Invalid webhook payload')
    return data


def parse_status(raw: Optional[str]) -> PaymentOutcomeStatus:
    """`payment.approved` and `approved` both map to APPROVED; unknown kinds stay PENDING."""
    kind = (raw or '').split('.')[-1].lower()
    return _STATUS_ALIASES.get(kind, PaymentOutcomeStatus.PENDING)


def outcome_from_payload(data: Mapping[str, Any]) -> PaymentOutcome:
    external_reference = data.get('externalReference')
    if not external_reference:
        raise GatewayRejectedError('Gateway payload has no externalReference')

    metadata = data.get('metadata') or {}
    if not isinstance(metadata, Mapping):
        raise GatewayRejectedError('Invalid gateway payload')
    purchase_id = metadata.get('purchaseId')
    amount = data.get('amount')
    try:
        return PaymentOutcome(
            external_reference=str(external_reference),
            status=parse_status(data.get('type') or data.get('status')),
            purchase_id=UUID(str(purchase_id)) if purchase_id else None,
            amount=int(amount) if amount is not None else None,
            currency=data.get('currency'),
        )
    except (TypeError, ValueError) as e:
        raise GatewayRejectedError('Invalid gateway payload') from e


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None
