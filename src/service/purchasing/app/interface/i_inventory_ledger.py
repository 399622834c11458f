"""
Inventory Ledger Interface

Tracks how many units of each ticket type are still for sale.

quantity_available(T) = total_capacity(T) - count(non-cancelled tickets of T)
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.service.purchasing.domain.entity.ticket_type_entity import (
    EventTicketType,
    TicketTypeAvailability,
)
from src.service.purchasing.domain.value_object.reservation import Reservation


class IInventoryLedger(ABC):
    @abstractmethod
    async def reserve(self, *, ticket_type_id: UUID, quantity: int) -> Reservation:
        """
        Claim `quantity` units with a single conditional decrement.

        Never a read followed by a write: the availability check and the
        decrement happen in one statement, so two buyers cannot both take the
        last unit.

        Args:
            ticket_type_id: Ticket type to reserve from
            quantity: Units to reserve (> 0)

        Returns:
            Reservation carrying freshly generated ticket ids, one per unit

        Raises:
            OutOfStockError: Fewer than `quantity` units are available
            NotFoundError: Unknown ticket type
        """
        pass

    @abstractmethod
    async def release(self, *, reservation: Reservation) -> int:
        """
        Return the units of a reservation to the pool.

        Only tickets still pending are cancelled and counted back, so releasing
        the same reservation twice returns 0 the second time.

        Returns:
            Number of units released
        """
        pass

    @abstractmethod
    async def register_ticket_type(self, *, ticket_type: EventTicketType) -> EventTicketType:
        """Persist a new ticket type with its whole capacity available."""
        pass

    @abstractmethod
    async def get_availability(self, *, event_id: UUID) -> List[TicketTypeAvailability]:
        pass
