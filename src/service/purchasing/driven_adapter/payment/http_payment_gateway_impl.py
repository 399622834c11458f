"""
HTTP Payment Gateway (httpx)

POST {base_url}/payments
    headers: Authorization: Bearer <api key>, X-Idempotency-Key: <purchase id>
    body:    {amount, currency, payer: {email, name}, metadata: {purchaseId}}
    200:     {paymentUrl, externalReference}

GET {base_url}/payments/{externalReference}
    200:     {externalReference, status, amount, currency, metadata: {purchaseId}}
"""

from typing import Any, Mapping, Optional

import httpx

from src.platform.exception.exceptions import GatewayRejectedError
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_gateway_error_policy import IGatewayErrorPolicy
from src.service.purchasing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.purchasing.domain.value_object.payment import (
    Payer,
    PaymentOutcome,
    PaymentSession,
)
from src.service.purchasing.driven_adapter.payment.gateway_payload import (
    outcome_from_payload,
    verify_and_decode,
)


IDEMPOTENCY_HEADER = 'X-Idempotency-Key'


class HttpPaymentGateway(IPaymentGateway):
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        webhook_secret: str,
        timeout_seconds: float,
        error_policy: IGatewayErrorPolicy,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.timeout_seconds = timeout_seconds
        self.error_policy = error_policy
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=self.transport,
            headers={'Authorization': f'Bearer {self.api_key}', 'Accept': 'application/json'},
        )

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise self.error_policy.classify_transport_error(error=e) from e

        if response.is_error:
            raise self.error_policy.classify_status(
                status_code=response.status_code, detail=response.text[:200] or None
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayRejectedError('Payment gateway returned invalid JSON') from e
        if not isinstance(data, dict):
            raise GatewayRejectedError('Payment gateway returned unexpected body')
        return data

    @Logger.io
    async def create_payment_request(
        self, *, amount: int, currency: str, payer: Payer, idempotency_key: str
    ) -> PaymentSession:
        data = await self._send(
            'POST',
            '/payments',
            json={
                'amount': amount,
                'currency': currency,
                'payer': {'email': payer.email, 'name': payer.name},
                'metadata': {'purchaseId': idempotency_key},
            },
            headers={IDEMPOTENCY_HEADER: idempotency_key},
        )

        payment_url = data.get('paymentUrl')
        external_reference = data.get('externalReference')
        if not payment_url or not external_reference:
            raise GatewayRejectedError('Payment gateway response is missing paymentUrl')

        Logger.base.info(f'💳 [GATEWAY] Payment request {external_reference} for {idempotency_key}')
        return PaymentSession(hosted_url=payment_url, external_reference=str(external_reference))

    @Logger.io
    async def fetch_outcome(self, *, external_reference: str) -> PaymentOutcome:
        data = await self._send('GET', f'/payments/{external_reference}')
        data.setdefault('externalReference', external_reference)
        return outcome_from_payload(data)

    @Logger.io
    def parse_webhook(self, *, payload: bytes, headers: Mapping[str, str]) -> PaymentOutcome:
        data = verify_and_decode(secret=self.webhook_secret, payload=payload, headers=headers)
        return outcome_from_payload(data)
