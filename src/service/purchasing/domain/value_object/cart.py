from typing import List, Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.purchasing.domain.entity.purchase_entity import PaymentMethod
from src.service.purchasing.domain.value_object.line_item import LineItem


@attrs.define(frozen=True)
class CartItem:
    ticket_type_id: UUID
    event_id: UUID
    ticket_type_name: str
    unit_price: int
    quantity: int

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity


@attrs.define
class Cart:
    """
    Client-side ticket selections for a single event.

    Prices are the ones the buyer was shown; the server re-verifies them when
    the cart is turned into a purchase.
    """

    items: List[CartItem] = attrs.field(factory=list)
    payment_method: PaymentMethod = PaymentMethod.CARD

    @property
    def event_id(self) -> Optional[UUID]:
        return self.items[0].event_id if self.items else None

    @property
    def is_empty(self) -> bool:
        return not self.items

    def add(self, item: CartItem) -> None:
        if item.quantity <= 0:
            raise DomainError('Quantity must be positive')
        if self.event_id is not None and item.event_id != self.event_id:
            raise DomainError('Cart can only hold tickets for one event')

        existing = self._find(item.ticket_type_id)
        if existing is None:
            self.items.append(item)
            return
        self._replace(existing, attrs.evolve(existing, quantity=existing.quantity + item.quantity))

    def update_quantity(self, ticket_type_id: UUID, quantity: int) -> None:
        existing = self._find(ticket_type_id)
        if existing is None:
            raise DomainError('Ticket type is not in the cart')
        if quantity <= 0:
            self.remove(ticket_type_id)
            return
        self._replace(existing, attrs.evolve(existing, quantity=quantity))

    def remove(self, ticket_type_id: UUID) -> None:
        self.items = [item for item in self.items if item.ticket_type_id != ticket_type_id]

    def clear(self) -> None:
        self.items = []

    def subtotal(self) -> int:
        return sum(item.subtotal for item in self.items)

    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_line_items(self) -> List[LineItem]:
        return [
            LineItem(
                ticket_type_id=item.ticket_type_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in self.items
        ]

    def _find(self, ticket_type_id: UUID) -> Optional[CartItem]:
        return next((item for item in self.items if item.ticket_type_id == ticket_type_id), None)

    def _replace(self, old: CartItem, new: CartItem) -> None:
        self.items = [new if item is old else item for item in self.items]
