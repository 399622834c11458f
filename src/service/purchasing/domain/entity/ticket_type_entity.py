from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger


@attrs.define(frozen=True)
class EventTicketType:
    """Purchasable admission category. Price and capacity never change after creation."""

    id: UUID
    event_id: UUID
    name: str
    price: int
    total_capacity: int
    created_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        event_id: UUID,
        name: str,
        price: int,
        total_capacity: int,
    ) -> 'EventTicketType':
        if not name:
            raise DomainError('Ticket type name is required')
        if price < 0:
            raise DomainError('Ticket type price cannot be negative')
        if total_capacity < 0:
            raise DomainError('Ticket type capacity cannot be negative')

        return cls(
            id=uuid7(),
            event_id=event_id,
            name=name,
            price=price,
            total_capacity=total_capacity,
            created_at=datetime.now(timezone.utc),
        )

    def belongs_to(self, event_id: UUID) -> bool:
        return self.event_id == event_id


@attrs.define(frozen=True)
class TicketTypeAvailability:
    ticket_type_id: UUID
    event_id: UUID
    name: str
    price: int
    total_capacity: int
    quantity_available: int

    @property
    def quantity_sold(self) -> int:
        return self.total_capacity - self.quantity_available

    @property
    def is_sold_out(self) -> bool:
        return self.quantity_available <= 0
