"""Value objects exchanged with the payment gateway."""

from enum import StrEnum
from typing import Optional
from uuid import UUID

import attrs


@attrs.define(frozen=True)
class Payer:
    email: str
    name: str

    @classmethod
    def from_contact(cls, *, email: str, name: str | None = None) -> 'Payer':
        # Profiles without a full name display the e-mail instead
        return cls(email=email, name=name or email)


@attrs.define(frozen=True)
class PaymentSession:
    hosted_url: str
    external_reference: str


class PaymentOutcomeStatus(StrEnum):
    APPROVED = 'approved'
    PENDING = 'pending'
    REJECTED = 'rejected'
    CANCELLED = 'cancelled'


@attrs.define(frozen=True)
class PaymentOutcome:
    external_reference: str
    status: PaymentOutcomeStatus
    purchase_id: Optional[UUID] = None
    amount: Optional[int] = None
    currency: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == PaymentOutcomeStatus.APPROVED
