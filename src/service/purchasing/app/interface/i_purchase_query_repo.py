from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.service.purchasing.domain.entity.purchase_entity import Purchase, PurchaseStatus
from src.service.purchasing.domain.entity.ticket_entity import Ticket


class IPurchaseQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, purchase_id: UUID) -> Purchase | None:
        pass

    @abstractmethod
    async def get_by_external_reference(self, *, external_reference: str) -> Purchase | None:
        pass

    @abstractmethod
    async def list_by_buyer(
        self, *, buyer_id: UUID, status: Optional[PurchaseStatus] = None
    ) -> List[Purchase]:
        """Newest first."""
        pass

    @abstractmethod
    async def list_tickets_by_purchase(self, *, purchase_id: UUID) -> List[Ticket]:
        pass

    @abstractmethod
    async def list_tickets_by_buyer(self, *, buyer_id: UUID) -> List[Ticket]:
        """
        Tickets the buyer holds, newest first.

        Pending tickets are left out: they become the buyer's only once paid.
        """
        pass
