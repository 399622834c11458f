from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.service.purchasing.domain.entity.ticket_type_entity import (
    EventTicketType,
    TicketTypeAvailability,
)


class TicketTypeCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    price: int = Field(ge=0)
    total_capacity: int = Field(ge=0)

    class Config:
        json_schema_extra = {'example': {'name': 'General Admission', 'price': 10, 'total_capacity': 500}}


class TicketTypeResponse(BaseModel):
    id: UUID
    event_id: UUID
    name: str
    price: int
    total_capacity: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket_type: EventTicketType) -> 'TicketTypeResponse':
        return cls(
            id=ticket_type.id,
            event_id=ticket_type.event_id,
            name=ticket_type.name,
            price=ticket_type.price,
            total_capacity=ticket_type.total_capacity,
            created_at=ticket_type.created_at,
        )


class TicketTypeAvailabilityResponse(BaseModel):
    ticket_type_id: UUID
    name: str
    price: int
    total_capacity: int
    quantity_sold: int
    quantity_available: int
    is_sold_out: bool

    @classmethod
    def from_entity(cls, availability: TicketTypeAvailability) -> 'TicketTypeAvailabilityResponse':
        return cls(
            ticket_type_id=availability.ticket_type_id,
            name=availability.name,
            price=availability.price,
            total_capacity=availability.total_capacity,
            quantity_sold=availability.quantity_sold,
            quantity_available=availability.quantity_available,
            is_sold_out=availability.is_sold_out,
        )
