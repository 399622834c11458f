"""Unit tests for Cart and LineItem value objects"""

import pytest

from src.platform.exception.exceptions import DomainError
from src.service.purchasing.domain.value_object.cart import Cart, CartItem
from src.service.purchasing.domain.value_object.line_item import LineItem
from test.test_constants import (
    TEST_EVENT_ID_1,
    TEST_EVENT_ID_2,
    TEST_TICKET_TYPE_ID_1,
    TEST_TICKET_TYPE_ID_2,
)


def _item(ticket_type_id=TEST_TICKET_TYPE_ID_1, quantity=1, unit_price=10, event_id=TEST_EVENT_ID_1):
    return CartItem(
        ticket_type_id=ticket_type_id,
        event_id=event_id,
        ticket_type_name='Standard',
        unit_price=unit_price,
        quantity=quantity,
    )


@pytest.mark.unit
class TestCart:
    def test_add_merges_same_ticket_type(self):
        cart = Cart()

        cart.add(_item(quantity=1))
        cart.add(_item(quantity=2))

        assert len(cart.items) == 1
        assert cart.total_items() == 3
        assert cart.subtotal() == 30

    def test_cart_holds_one_event_only(self):
        cart = Cart()
        cart.add(_item())

        with pytest.raises(DomainError, match='one event'):
            cart.add(_item(ticket_type_id=TEST_TICKET_TYPE_ID_2, event_id=TEST_EVENT_ID_2))

    def test_update_quantity_to_zero_removes_item(self):
        cart = Cart()
        cart.add(_item(quantity=2))

        cart.update_quantity(TEST_TICKET_TYPE_ID_1, 0)

        assert cart.is_empty
        assert cart.event_id is None

    def test_update_unknown_item_raises(self):
        with pytest.raises(DomainError):
            Cart().update_quantity(TEST_TICKET_TYPE_ID_1, 1)

    def test_to_line_items_keeps_shown_prices(self):
        cart = Cart()
        cart.add(_item(quantity=2, unit_price=10))
        cart.add(_item(ticket_type_id=TEST_TICKET_TYPE_ID_2, quantity=1, unit_price=25))

        line_items = cart.to_line_items()

        assert [(li.quantity, li.unit_price) for li in line_items] == [(2, 10), (1, 25)]
        assert sum(li.subtotal for li in line_items) == 45

    def test_clear(self):
        cart = Cart()
        cart.add(_item())

        cart.clear()

        assert cart.is_empty


@pytest.mark.unit
class TestLineItem:
    @pytest.mark.parametrize('quantity', [0, -1])
    def test_quantity_must_be_positive(self, quantity: int):
        with pytest.raises(DomainError, match='positive'):
            LineItem(ticket_type_id=TEST_TICKET_TYPE_ID_1, quantity=quantity, unit_price=10)

    def test_price_cannot_be_negative(self):
        with pytest.raises(DomainError, match='negative'):
            LineItem(ticket_type_id=TEST_TICKET_TYPE_ID_1, quantity=1, unit_price=-5)

    def test_free_tickets_allowed(self):
        assert LineItem(ticket_type_id=TEST_TICKET_TYPE_ID_1, quantity=3, unit_price=0).subtotal == 0
