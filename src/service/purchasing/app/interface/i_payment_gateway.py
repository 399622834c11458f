"""
Payment Gateway Interface

Pure boundary to the external payment provider: implementations never touch
purchase or ticket state.
"""

from abc import ABC, abstractmethod
from typing import Mapping

from src.service.purchasing.domain.value_object.payment import (
    Payer,
    PaymentOutcome,
    PaymentSession,
)


class IPaymentGateway(ABC):
    @abstractmethod
    async def create_payment_request(
        self, *, amount: int, currency: str, payer: Payer, idempotency_key: str
    ) -> PaymentSession:
        """
        Open a hosted payment page.

        Repeated calls with the same idempotency key must not create a second
        external payment request.

        Raises:
            GatewayUnavailableError: Transient failure, safe to retry with the same key
            GatewayRejectedError: Terminal refusal
        """
        pass

    @abstractmethod
    async def fetch_outcome(self, *, external_reference: str) -> PaymentOutcome:
        """Poll the gateway for the current outcome of a payment."""
        pass

    @abstractmethod
    def parse_webhook(self, *, payload: bytes, headers: Mapping[str, str]) -> PaymentOutcome:
        """
        Verify and decode a gateway callback.

        Raises:
            GatewayRejectedError: Bad signature or malformed payload
        """
        pass
