"""
In-memory Payment Gateway

Stands in for the hosted checkout during development and tests:
- one payment request per idempotency key, however many times it is called
- scripted failures are raised, in order, before any request is recorded
- `settle` plays the part of the buyer finishing (or abandoning) checkout; over HTTP the
  same happens through `/api/payment/mockpay/{external_reference}`
"""

from typing import Dict, List, Mapping, Optional, Tuple
from uuid import UUID

import orjson
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import CustomBaseError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.purchasing.domain.value_object.payment import (
    Payer,
    PaymentOutcome,
    PaymentOutcomeStatus,
    PaymentSession,
)
from src.service.purchasing.driven_adapter.payment.gateway_payload import (
    SIGNATURE_HEADER,
    outcome_from_payload,
    sign_payload,
    verify_and_decode,
)


class InMemoryPaymentGateway(IPaymentGateway):
    def __init__(
        self,
        *,
        webhook_secret: str,
        checkout_base_url: str = 'http://localhost:8000/api/payment/mockpay',
    ) -> None:
        self.webhook_secret = webhook_secret
        self.checkout_base_url = checkout_base_url.rstrip('/')
        self.request_count = 0
        self.scripted_failures: List[CustomBaseError] = []
        self._sessions_by_key: Dict[str, PaymentSession] = {}
        self._outcomes: Dict[str, PaymentOutcome] = {}

    def fail_next(self, *errors: CustomBaseError) -> None:
        self.scripted_failures.extend(errors)

    @property
    def external_request_count(self) -> int:
        """Distinct payment requests created at the 'provider'."""
        return len(self._sessions_by_key)

    @Logger.io
    async def create_payment_request(
        self, *, amount: int, currency: str, payer: Payer, idempotency_key: str
    ) -> PaymentSession:
        self.request_count += 1
        if self.scripted_failures:
            raise self.scripted_failures.pop(0)

        existing = self._sessions_by_key.get(idempotency_key)
        if existing is not None:
            return existing

        external_reference = f'mock_{uuid7().hex}'
        session = PaymentSession(
            hosted_url=f'{self.checkout_base_url}/{external_reference}',
            external_reference=external_reference,
        )
        self._sessions_by_key[idempotency_key] = session
        self._outcomes[external_reference] = PaymentOutcome(
            external_reference=external_reference,
            status=PaymentOutcomeStatus.PENDING,
            purchase_id=_as_uuid(idempotency_key),
            amount=amount,
            currency=currency,
        )
        return session

    @Logger.io
    async def fetch_outcome(self, *, external_reference: str) -> PaymentOutcome:
        outcome = self._outcomes.get(external_reference)
        if outcome is None:
            raise NotFoundError(f'Payment {external_reference} not found')
        return outcome

    @Logger.io
    def settle(
        self,
        *,
        external_reference: str,
        status: PaymentOutcomeStatus = PaymentOutcomeStatus.APPROVED,
    ) -> PaymentOutcome:
        outcome = self._outcomes.get(external_reference)
        if outcome is None:
            raise NotFoundError(f'Payment {external_reference} not found')
        settled = PaymentOutcome(
            external_reference=outcome.external_reference,
            status=status,
            purchase_id=outcome.purchase_id,
            amount=outcome.amount,
            currency=outcome.currency,
        )
        self._outcomes[external_reference] = settled
        return settled

    def build_webhook(self, *, outcome: PaymentOutcome) -> Tuple[bytes, Dict[str, str]]:
        """Signed callback body and headers, as the provider would send them."""
        payload = orjson.dumps(
            {
                'type': f'payment.{outcome.status.value}',
                'externalReference': outcome.external_reference,
                'amount': outcome.amount,
                'currency': outcome.currency,
                'metadata': {
                    'purchaseId': str(outcome.purchase_id) if outcome.purchase_id else None
                },
            }
        )
        signature = sign_payload(secret=self.webhook_secret, payload=payload)
        return payload, {SIGNATURE_HEADER: signature, 'content-type': 'application/json'}

    @Logger.io
    def parse_webhook(self, *, payload: bytes, headers: Mapping[str, str]) -> PaymentOutcome:
        data = verify_and_decode(secret=self.webhook_secret, payload=payload, headers=headers)
        return outcome_from_payload(data)


def _as_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(value)
    except ValueError:
        return None
