"""
Purchase Command Repository Interface

Every status change is a compare-and-set on the row:
    UPDATE ... SET status = :new WHERE id = :id AND status = :expected
A transition that lost a race returns None (purchase) or skips the row (tickets)
instead of overwriting the winner's state.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Sequence
from uuid import UUID

from src.service.purchasing.domain.entity.purchase_entity import Purchase, PurchaseStatus
from src.service.purchasing.domain.entity.ticket_entity import Ticket, TicketStatus
from src.service.purchasing.domain.value_object.payment import PaymentSession


class IPurchaseCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, purchase: Purchase) -> Purchase:
        pass

    @abstractmethod
    async def add_tickets(self, *, tickets: Sequence[Ticket]) -> List[Ticket]:
        pass

    @abstractmethod
    async def get_by_id(self, *, purchase_id: UUID) -> Purchase | None:
        pass

    @abstractmethod
    async def get_tickets(self, *, purchase_id: UUID) -> List[Ticket]:
        pass

    @abstractmethod
    async def get_ticket_by_id(self, *, ticket_id: UUID) -> Ticket | None:
        pass

    @abstractmethod
    async def transition_status(
        self, *, purchase: Purchase, expected_status: PurchaseStatus
    ) -> Purchase | None:
        """
        Persist the already-transitioned `purchase` if the row is still in `expected_status`.

        Args:
            purchase: Entity carrying the new status and timestamps
            expected_status: Status the row must currently hold

        Returns:
            Updated purchase, or None when another writer got there first
        """
        pass

    @abstractmethod
    async def transition_tickets(
        self,
        *,
        purchase_id: UUID,
        from_status: TicketStatus,
        to_status: TicketStatus,
    ) -> List[UUID]:
        """
        Move every ticket of the purchase still in `from_status` to `to_status`.

        Returns:
            Ids of the tickets that actually transitioned
        """
        pass

    @abstractmethod
    async def transition_ticket(
        self, *, ticket: Ticket, expected_status: TicketStatus
    ) -> Ticket | None:
        pass

    @abstractmethod
    async def attach_payment_session(
        self, *, purchase_id: UUID, session: PaymentSession
    ) -> Purchase | None:
        """
        Store the gateway session on a purchase that has no reference yet, or
        whose reference was already recorded from the same payment's outcome.
        A payment confirmed before its session was stored still gets the URL.

        Returns:
            Updated purchase, or None when the purchase was cancelled or
            already carries another reference
        """
        pass

    @abstractmethod
    async def record_external_reference(
        self, *, purchase_id: UUID, external_reference: str
    ) -> bool:
        """Keep the gateway reference of a confirmed payment when none is stored yet."""
        pass

    @abstractmethod
    async def list_pending_created_before(self, *, cutoff: datetime) -> List[UUID]:
        pass
