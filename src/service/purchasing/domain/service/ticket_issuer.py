from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import UUID

from uuid_utils.compat import uuid7

from src.platform.logging.loguru_io import Logger
from src.service.purchasing.domain.entity.purchase_entity import Purchase
from src.service.purchasing.domain.entity.ticket_entity import Ticket, TicketStatus
from src.service.purchasing.domain.value_object.reservation import Reservation
from src.service.purchasing.domain.value_object.ticket_code import generate_ticket_code


class TicketIssuer:
    """Creates pending tickets bound to a purchase and a ticket type."""

    def __init__(self, code_generator: Callable[[], str] = generate_ticket_code):
        self.code_generator = code_generator

    def issue(
        self,
        *,
        purchase_id: UUID,
        ticket_type_id: UUID,
        event_id: UUID,
        purchaser_id: UUID,
        price_at_purchase: int,
        ticket_id: Optional[UUID] = None,
    ) -> Ticket:
        now = datetime.now(timezone.utc)
        return Ticket(
            id=ticket_id or uuid7(),
            purchase_id=purchase_id,
            ticket_type_id=ticket_type_id,
            event_id=event_id,
            purchaser_id=purchaser_id,
            price_paid=price_at_purchase,
            code=self.code_generator(),
            status=TicketStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @Logger.io
    def issue_for_reservation(
        self, *, purchase: Purchase, reservation: Reservation, price_at_purchase: int
    ) -> List[Ticket]:
        """One ticket per reserved unit, reusing the ids the reservation was taken for."""
        return [
            self.issue(
                purchase_id=purchase.id,
                ticket_type_id=reservation.ticket_type_id,
                event_id=purchase.event_id,
                purchaser_id=purchase.buyer_id,
                price_at_purchase=price_at_purchase,
                ticket_id=ticket_id,
            )
            for ticket_id in reservation.ticket_ids
        ]
