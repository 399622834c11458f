"""
Purchase Aggregate - Aggregate Root for a buyer's order

[DDD Design Principles]
- PurchaseAggregate is the Aggregate Root
- Purchase and its Tickets are entities within the aggregate
- Purchase and Tickets are written in one unit of work

[Business Invariants]
- A purchase covers tickets of a single event
- Every line's unit price equals the authoritative ticket type price
- total_price equals the sum of price_paid over the non-cancelled tickets
  while the purchase is not cancelled; a cancelled purchase keeps the total
  that was due and holds no non-cancelled ticket
"""

from collections import defaultdict
from typing import Dict, List, Mapping, Sequence, Tuple
from uuid import UUID

import attrs

from src.platform.exception.exceptions import DomainError, NotFoundError, PriceMismatchError
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.domain.entity.purchase_entity import (
    PaymentMethod,
    Purchase,
    PurchaseStatus,
)
from src.service.purchasing.domain.entity.ticket_entity import Ticket
from src.service.purchasing.domain.entity.ticket_type_entity import EventTicketType
from src.service.purchasing.domain.value_object.line_item import LineItem


@attrs.define
class PurchaseAggregate:
    purchase: Purchase
    tickets: List[Ticket] = attrs.field(factory=list)
    ticket_types: Dict[UUID, EventTicketType] = attrs.field(factory=dict)
    line_items: List[LineItem] = attrs.field(factory=list)

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        buyer_id: UUID,
        event_id: UUID,
        line_items: Sequence[LineItem],
        payment_method: PaymentMethod,
        currency: str,
        ticket_types: Mapping[UUID, EventTicketType],
    ) -> 'PurchaseAggregate':
        """
        Validate the cart against the authoritative ticket types and build the pending purchase.

        Tickets are issued afterwards, once inventory has been reserved for them.

        Raises:
            DomainError: Empty cart or a ticket type of another event
            NotFoundError: Unknown ticket type
            PriceMismatchError: The buyer was shown a stale price
        """
        if not line_items:
            raise DomainError('Cart is empty')

        for line in line_items:
            ticket_type = ticket_types.get(line.ticket_type_id)
            if ticket_type is None:
                raise NotFoundError(f'Ticket type {line.ticket_type_id} not found')
            if not ticket_type.belongs_to(event_id):
                raise DomainError(
                    f'Ticket type {line.ticket_type_id} does not belong to event {event_id}'
                )
            if line.unit_price != ticket_type.price:
                raise PriceMismatchError(
                    f'Price of ticket type {ticket_type.name} changed '
                    f'from {line.unit_price} to {ticket_type.price}'
                )

        purchase = Purchase.create(
            buyer_id=buyer_id,
            event_id=event_id,
            total_price=sum(line.subtotal for line in line_items),
            currency=currency,
            payment_method=payment_method,
        )
        return cls(
            purchase=purchase,
            ticket_types={line.ticket_type_id: ticket_types[line.ticket_type_id] for line in line_items},
            line_items=list(line_items),
        )

    def quantities_by_ticket_type(self) -> List[Tuple[UUID, int]]:
        """Units to reserve per ticket type, merged and in ascending ticket type id order."""
        quantities: Dict[UUID, int] = defaultdict(int)
        for line in self.line_items:
            quantities[line.ticket_type_id] += line.quantity
        return sorted(quantities.items())

    def unit_price_for(self, ticket_type_id: UUID) -> int:
        return self.ticket_types[ticket_type_id].price

    @property
    def active_tickets(self) -> List[Ticket]:
        return [ticket for ticket in self.tickets if ticket.is_active]

    @Logger.io
    def add_tickets(self, tickets: Sequence[Ticket]) -> None:
        for ticket in tickets:
            if ticket.purchase_id != self.purchase.id:
                raise DomainError('Ticket belongs to another purchase')
        self.tickets.extend(tickets)

    @Logger.io
    def verify_total(self) -> None:
        issued_total = sum(ticket.price_paid for ticket in self.active_tickets)
        if self.purchase.status == PurchaseStatus.CANCELLED:
            if self.active_tickets:
                raise DomainError(
                    f'Cancelled purchase still holds {len(self.active_tickets)} active ticket(s)'
                )
            return
        if issued_total != self.purchase.total_price:
            raise DomainError(
                f'Issued tickets total {issued_total} but purchase total is {self.purchase.total_price}'
            )
