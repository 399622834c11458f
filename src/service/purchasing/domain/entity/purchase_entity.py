from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError, InvalidStateError
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.domain.value_object.payment import PaymentSession


class PurchaseStatus(StrEnum):
    PENDING = 'pending'
    PAID = 'paid'
    VALIDATED = 'validated'  # informational: every ticket redeemed
    CANCELLED = 'cancelled'


class PaymentMethod(StrEnum):
    CARD = 'card'
    WALLET = 'wallet'
    PROMO_CODE = 'promo_code'
    CASH = 'cash'
    BANK_TRANSFER = 'bank_transfer'


@attrs.define
class Purchase:
    id: UUID
    buyer_id: UUID
    event_id: UUID
    total_price: int
    currency: str
    payment_method: PaymentMethod
    status: PurchaseStatus = PurchaseStatus.PENDING
    external_reference: Optional[str] = None
    payment_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        buyer_id: UUID,
        event_id: UUID,
        total_price: int,
        currency: str,
        payment_method: PaymentMethod,
    ) -> 'Purchase':
        if total_price < 0:
            raise DomainError('Total price cannot be negative')

        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            buyer_id=buyer_id,
            event_id=event_id,
            total_price=total_price,
            currency=currency,
            payment_method=PaymentMethod(payment_method),
            status=PurchaseStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @property
    def payment_session(self) -> Optional[PaymentSession]:
        if not self.external_reference or not self.payment_url:
            return None
        return PaymentSession(
            hosted_url=self.payment_url, external_reference=self.external_reference
        )

    def is_owned_by(self, buyer_id: UUID) -> bool:
        return self.buyer_id == buyer_id

    @Logger.io
    def validate_can_request_payment(self) -> None:
        if self.status != PurchaseStatus.PENDING:
            raise InvalidStateError(f'Cannot request payment for {self.status.value} purchase')

    @Logger.io
    def attach_payment_session(self, session: PaymentSession) -> 'Purchase':
        self.validate_can_request_payment()
        return attrs.evolve(
            self,
            external_reference=session.external_reference,
            payment_url=session.hosted_url,
            updated_at=datetime.now(timezone.utc),
        )

    @Logger.io
    def validate_can_be_paid(self) -> None:
        """
        Raises:
            InvalidStateError: When the purchase was cancelled
        """
        if self.status == PurchaseStatus.CANCELLED:
            raise InvalidStateError('Cannot pay for cancelled purchase')

    @property
    def is_settled(self) -> bool:
        return self.status in (PurchaseStatus.PAID, PurchaseStatus.VALIDATED)

    @Logger.io
    def mark_as_paid(self) -> 'Purchase':
        self.validate_can_be_paid()
        if self.is_settled:
            raise InvalidStateError('Purchase already paid')
        now = datetime.now(timezone.utc)
        return attrs.evolve(self, status=PurchaseStatus.PAID, paid_at=now, updated_at=now)

    @Logger.io
    def cancel(self) -> 'Purchase':
        """
        Raises:
            InvalidStateError: When the purchase is no longer pending
        """
        if self.status == PurchaseStatus.CANCELLED:
            raise InvalidStateError('Purchase already cancelled')
        elif self.is_settled:
            raise InvalidStateError(f'Cannot cancel {self.status.value} purchase')

        now = datetime.now(timezone.utc)
        return attrs.evolve(
            self, status=PurchaseStatus.CANCELLED, cancelled_at=now, updated_at=now
        )

    @Logger.io
    def mark_as_validated(self) -> 'Purchase':
        if self.status != PurchaseStatus.PAID:
            raise InvalidStateError(f'Cannot validate {self.status.value} purchase')
        return attrs.evolve(
            self, status=PurchaseStatus.VALIDATED, updated_at=datetime.now(timezone.utc)
        )
