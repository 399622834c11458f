from uuid import UUID

import attrs

from src.platform.exception.exceptions import DomainError


def _validate_positive_quantity(instance: 'LineItem', attribute: attrs.Attribute, value: int) -> None:
    if value <= 0:
        raise DomainError('Quantity must be positive')


def _validate_non_negative_price(instance: 'LineItem', attribute: attrs.Attribute, value: int) -> None:
    if value < 0:
        raise DomainError('Unit price cannot be negative')


@attrs.define(frozen=True)
class LineItem:
    """One cart row: `quantity` units of a ticket type at the price the buyer was shown."""

    ticket_type_id: UUID
    quantity: int = attrs.field(
        validator=[attrs.validators.instance_of(int), _validate_positive_quantity]
    )
    unit_price: int = attrs.field(
        validator=[attrs.validators.instance_of(int), _validate_non_negative_price]
    )

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity
