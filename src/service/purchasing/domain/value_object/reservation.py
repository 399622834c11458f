from collections import defaultdict
from typing import TYPE_CHECKING, Iterable, List
from uuid import UUID

import attrs


if TYPE_CHECKING:
    from src.service.purchasing.domain.entity.ticket_entity import Ticket


@attrs.define(frozen=True)
class Reservation:
    """
    A claim on `quantity` units of one ticket type.

    Identified by the ids of the tickets it backs; the ids are generated when
    the units are reserved and reused by the Ticket Issuer.
    """

    ticket_type_id: UUID
    ticket_ids: tuple[UUID, ...] = attrs.field(converter=tuple)

    @property
    def quantity(self) -> int:
        return len(self.ticket_ids)

    @classmethod
    def from_tickets(cls, tickets: Iterable['Ticket']) -> List['Reservation']:
        by_type: dict[UUID, list[UUID]] = defaultdict(list)
        for ticket in tickets:
            by_type[ticket.ticket_type_id].append(ticket.id)
        return [
            cls(ticket_type_id=ticket_type_id, ticket_ids=ticket_ids)
            for ticket_type_id, ticket_ids in sorted(by_type.items(), key=lambda kv: str(kv[0]))
        ]
