from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import InvalidStateError
from src.platform.logging.loguru_io import Logger


class TicketStatus(StrEnum):
    PENDING = 'pending'
    PAID = 'paid'
    VALIDATED = 'validated'
    CANCELLED = 'cancelled'


@attrs.define
class Ticket:
    id: UUID
    purchase_id: UUID
    ticket_type_id: UUID
    event_id: UUID
    purchaser_id: UUID
    price_paid: int
    code: str
    status: TicketStatus = TicketStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    validated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        """Counts against inventory and the purchase total."""
        return self.status != TicketStatus.CANCELLED

    @Logger.io
    def mark_as_paid(self) -> 'Ticket':
        if self.status != TicketStatus.PENDING:
            raise InvalidStateError(f'Cannot pay for {self.status.value} ticket')
        now = datetime.now(timezone.utc)
        return attrs.evolve(self, status=TicketStatus.PAID, updated_at=now)

    @Logger.io
    def validate(self) -> 'Ticket':
        """Redeem the ticket at the venue."""
        if self.status == TicketStatus.VALIDATED:
            raise InvalidStateError('Ticket already validated')
        elif self.status == TicketStatus.CANCELLED:
            raise InvalidStateError('Cannot validate cancelled ticket')
        elif self.status != TicketStatus.PAID:
            raise InvalidStateError('Ticket is not paid')

        now = datetime.now(timezone.utc)
        return attrs.evolve(
            self, status=TicketStatus.VALIDATED, validated_at=now, updated_at=now
        )

    @Logger.io
    def cancel(self) -> 'Ticket':
        if self.status != TicketStatus.PENDING:
            raise InvalidStateError(f'Cannot cancel {self.status.value} ticket')
        now = datetime.now(timezone.utc)
        return attrs.evolve(self, status=TicketStatus.CANCELLED, updated_at=now)
