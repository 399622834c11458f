from abc import ABC, abstractmethod
from typing import Dict, Iterable
from uuid import UUID

from src.service.purchasing.domain.entity.ticket_type_entity import EventTicketType


class ITicketTypeRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, ticket_type_id: UUID) -> EventTicketType | None:
        pass

    @abstractmethod
    async def get_by_ids(self, *, ticket_type_ids: Iterable[UUID]) -> Dict[UUID, EventTicketType]:
        """
        Authoritative ticket types keyed by id.

        Unknown ids are simply absent from the result.
        """
        pass
