"""Unit tests for TicketIssuer, Reservation and ticket codes"""

import re

import pytest

from src.service.purchasing.domain.entity.purchase_entity import Purchase
from src.service.purchasing.domain.entity.ticket_entity import TicketStatus
from src.service.purchasing.domain.service.ticket_issuer import TicketIssuer
from src.service.purchasing.domain.value_object.reservation import Reservation
from src.service.purchasing.domain.value_object.ticket_code import generate_ticket_code
from test.test_constants import (
    TEST_TICKET_ID_1,
    TEST_TICKET_ID_2,
    TEST_TICKET_TYPE_ID_1,
    TEST_TICKET_TYPE_ID_2,
)


@pytest.mark.unit
class TestTicketIssuer:
    def test_issue_for_reservation_reuses_reserved_ids(self, pending_purchase: Purchase):
        reservation = Reservation(
            ticket_type_id=TEST_TICKET_TYPE_ID_1, ticket_ids=[TEST_TICKET_ID_1, TEST_TICKET_ID_2]
        )

        tickets = TicketIssuer().issue_for_reservation(
            purchase=pending_purchase, reservation=reservation, price_at_purchase=10
        )

        assert [t.id for t in tickets] == [TEST_TICKET_ID_1, TEST_TICKET_ID_2]
        for ticket in tickets:
            assert ticket.status == TicketStatus.PENDING
            assert ticket.purchase_id == pending_purchase.id
            assert ticket.purchaser_id == pending_purchase.buyer_id
            assert ticket.event_id == pending_purchase.event_id
            assert ticket.price_paid == 10

    def test_codes_come_from_generator(self, pending_purchase: Purchase):
        codes = iter(['TKT-1', 'TKT-2'])
        issuer = TicketIssuer(code_generator=lambda: next(codes))
        reservation = Reservation(
            ticket_type_id=TEST_TICKET_TYPE_ID_1, ticket_ids=[TEST_TICKET_ID_1, TEST_TICKET_ID_2]
        )

        tickets = issuer.issue_for_reservation(
            purchase=pending_purchase, reservation=reservation, price_at_purchase=10
        )

        assert [t.code for t in tickets] == ['TKT-1', 'TKT-2']

    def test_generated_codes_are_unique_and_opaque(self):
        codes = {generate_ticket_code() for _ in range(200)}

        assert len(codes) == 200
        assert all(re.fullmatch(r'TKT-[0-9A-F]{32}', code) for code in codes)


@pytest.mark.unit
class TestReservation:
    def test_from_tickets_groups_by_ticket_type(self, pending_purchase: Purchase):
        issuer = TicketIssuer()
        tickets = [
            issuer.issue(
                purchase_id=pending_purchase.id,
                ticket_type_id=TEST_TICKET_TYPE_ID_2,
                event_id=pending_purchase.event_id,
                purchaser_id=pending_purchase.buyer_id,
                price_at_purchase=25,
            ),
            issuer.issue(
                purchase_id=pending_purchase.id,
                ticket_type_id=TEST_TICKET_TYPE_ID_1,
                event_id=pending_purchase.event_id,
                purchaser_id=pending_purchase.buyer_id,
                price_at_purchase=10,
                ticket_id=TEST_TICKET_ID_1,
            ),
            issuer.issue(
                purchase_id=pending_purchase.id,
                ticket_type_id=TEST_TICKET_TYPE_ID_1,
                event_id=pending_purchase.event_id,
                purchaser_id=pending_purchase.buyer_id,
                price_at_purchase=10,
                ticket_id=TEST_TICKET_ID_2,
            ),
        ]

        reservations = Reservation.from_tickets(tickets)

        assert [(r.ticket_type_id, r.quantity) for r in reservations] == [
            (TEST_TICKET_TYPE_ID_1, 2),
            (TEST_TICKET_TYPE_ID_2, 1),
        ]
        assert reservations[0].ticket_ids == (TEST_TICKET_ID_1, TEST_TICKET_ID_2)

    def test_no_tickets_no_reservations(self):
        assert Reservation.from_tickets([]) == []
