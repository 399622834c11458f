"""Model <-> entity conversion shared by the purchasing repositories"""

from datetime import datetime, timezone

from src.service.purchasing.domain.entity.purchase_entity import (
    PaymentMethod,
    Purchase,
    PurchaseStatus,
)
from src.service.purchasing.domain.entity.ticket_entity import Ticket, TicketStatus
from src.service.purchasing.domain.entity.ticket_type_entity import (
    EventTicketType,
    TicketTypeAvailability,
)
from src.service.purchasing.driven_adapter.model.purchase_model import PurchaseModel
from src.service.purchasing.driven_adapter.model.ticket_model import TicketModel
from src.service.purchasing.driven_adapter.model.ticket_type_model import TicketTypeModel


def to_ticket_type(db_ticket_type: TicketTypeModel) -> EventTicketType:
    return EventTicketType(
        id=db_ticket_type.id,
        event_id=db_ticket_type.event_id,
        name=db_ticket_type.name,
        price=db_ticket_type.price,
        total_capacity=db_ticket_type.total_capacity,
        created_at=db_ticket_type.created_at,
    )


def to_availability(db_ticket_type: TicketTypeModel) -> TicketTypeAvailability:
    return TicketTypeAvailability(
        ticket_type_id=db_ticket_type.id,
        event_id=db_ticket_type.event_id,
        name=db_ticket_type.name,
        price=db_ticket_type.price,
        total_capacity=db_ticket_type.total_capacity,
        quantity_available=db_ticket_type.quantity_available,
    )


def to_purchase(db_purchase: PurchaseModel) -> Purchase:
    return Purchase(
        id=db_purchase.id,
        buyer_id=db_purchase.buyer_id,
        event_id=db_purchase.event_id,
        total_price=db_purchase.total_price,
        currency=db_purchase.currency,
        payment_method=PaymentMethod(db_purchase.payment_method),
        status=PurchaseStatus(db_purchase.status),
        external_reference=db_purchase.external_reference,
        payment_url=db_purchase.payment_url,
        created_at=db_purchase.created_at,
        updated_at=db_purchase.updated_at,
        paid_at=db_purchase.paid_at,
        cancelled_at=db_purchase.cancelled_at,
    )


def purchase_values(purchase: Purchase) -> dict:
    return {
        'id': purchase.id,
        'buyer_id': purchase.buyer_id,
        'event_id': purchase.event_id,
        'total_price': purchase.total_price,
        'currency': purchase.currency,
        'payment_method': purchase.payment_method.value,
        'status': purchase.status.value,
        'external_reference': purchase.external_reference,
        'payment_url': purchase.payment_url,
        'created_at': purchase.created_at or datetime.now(timezone.utc),
        'updated_at': purchase.updated_at or datetime.now(timezone.utc),
        'paid_at': purchase.paid_at,
        'cancelled_at': purchase.cancelled_at,
    }


def to_ticket(db_ticket: TicketModel) -> Ticket:
    return Ticket(
        id=db_ticket.id,
        purchase_id=db_ticket.purchase_id,
        ticket_type_id=db_ticket.ticket_type_id,
        event_id=db_ticket.event_id,
        purchaser_id=db_ticket.purchaser_id,
        price_paid=db_ticket.price_paid,
        code=db_ticket.code,
        status=TicketStatus(db_ticket.status),
        created_at=db_ticket.created_at,
        updated_at=db_ticket.updated_at,
        validated_at=db_ticket.validated_at,
    )


def ticket_values(ticket: Ticket) -> dict:
    return {
        'id': ticket.id,
        'purchase_id': ticket.purchase_id,
        'ticket_type_id': ticket.ticket_type_id,
        'event_id': ticket.event_id,
        'purchaser_id': ticket.purchaser_id,
        'price_paid': ticket.price_paid,
        'code': ticket.code,
        'status': ticket.status.value,
        'created_at': ticket.created_at or datetime.now(timezone.utc),
        'updated_at': ticket.updated_at or datetime.now(timezone.utc),
        'validated_at': ticket.validated_at,
    }
