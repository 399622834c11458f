from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.service.purchasing.domain.entity.purchase_entity import PaymentMethod, Purchase
from src.service.purchasing.domain.entity.ticket_entity import Ticket
from src.service.purchasing.domain.value_object.payment import PaymentOutcome


class LineItemRequest(BaseModel):
    ticket_type_id: UUID
    quantity: int = Field(gt=0)
    unit_price: int = Field(ge=0)


class PurchaseCreateRequest(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'event_id': '01936d8f-5e73-7c4e-a9c5-0000000000e1',
                'payment_method': 'card',
                'line_items': [
                    {
                        'ticket_type_id': '01936d8f-5e73-7c4e-a9c5-0000000000a1',
                        'quantity': 2,
                        'unit_price': 10,
                    },
                    {
                        'ticket_type_id': '01936d8f-5e73-7c4e-a9c5-0000000000b2',
                        'quantity': 1,
                        'unit_price': 25,
                    },
                ],
            }
        },
    }

    event_id: UUID
    payment_method: PaymentMethod = PaymentMethod.CARD
    line_items: List[LineItemRequest] = Field(min_length=1)


class PurchaseResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'buyer_id': '01936d8f-5e73-7c4e-a9c5-0000000000c3',
                'event_id': '01936d8f-5e73-7c4e-a9c5-0000000000e1',
                'total_price': 45,
                'currency': 'USD',
                'payment_method': 'card',
                'status': 'pending',
                'payment_url': None,
                'created_at': '2025-01-10T10:30:00',
                'paid_at': None,
                'cancelled_at': None,
            }
        },
    }

    id: UUID
    buyer_id: UUID
    event_id: UUID
    total_price: int
    currency: str
    payment_method: str
    status: str
    payment_url: Optional[str] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, purchase: Purchase) -> 'PurchaseResponse':
        return cls(
            id=purchase.id,
            buyer_id=purchase.buyer_id,
            event_id=purchase.event_id,
            total_price=purchase.total_price,
            currency=purchase.currency,
            payment_method=purchase.payment_method.value,
            status=purchase.status.value,
            payment_url=purchase.payment_url,
            created_at=purchase.created_at,
            paid_at=purchase.paid_at,
            cancelled_at=purchase.cancelled_at,
        )


class PaymentRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    name: Optional[str] = None

    class Config:
        json_schema_extra = {'example': {'email': 'buyer@example.com', 'name': 'Ada Buyer'}}


class PaymentSessionResponse(BaseModel):
    purchase_id: UUID
    payment_url: str
    external_reference: str


class PaymentOutcomeResponse(BaseModel):
    external_reference: str
    status: str
    purchase_id: Optional[UUID] = None
    amount: Optional[int] = None
    currency: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: PaymentOutcome) -> 'PaymentOutcomeResponse':
        return cls(
            external_reference=outcome.external_reference,
            status=outcome.status.value,
            purchase_id=outcome.purchase_id,
            amount=outcome.amount,
            currency=outcome.currency,
        )


class TicketResponse(BaseModel):
    id: UUID
    purchase_id: UUID
    ticket_type_id: UUID
    event_id: UUID
    price_paid: int
    code: str
    status: str
    created_at: Optional[datetime] = None
    validated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket: Ticket) -> 'TicketResponse':
        return cls(
            id=ticket.id,
            purchase_id=ticket.purchase_id,
            ticket_type_id=ticket.ticket_type_id,
            event_id=ticket.event_id,
            price_paid=ticket.price_paid,
            code=ticket.code,
            status=ticket.status.value,
            created_at=ticket.created_at,
            validated_at=ticket.validated_at,
        )


class CancelPurchaseResponse(BaseModel):
    status: str
    cancelled_at: Optional[datetime] = None
