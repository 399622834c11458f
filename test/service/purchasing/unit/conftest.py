"""
Unit test configuration for the purchasing service.

Use cases run against a unit of work whose repositories are AsyncMocks,
so no database is involved.
"""

from datetime import datetime, timezone

import pytest

from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.service.purchasing.domain.entity.purchase_entity import (
    PaymentMethod,
    Purchase,
    PurchaseStatus,
)
from src.service.purchasing.domain.entity.ticket_type_entity import EventTicketType
from test.service.purchasing.fakes import FakeUnitOfWork
from test.test_constants import (
    TEST_BUYER_ID_1,
    TEST_CURRENCY,
    TEST_EVENT_ID_1,
    TEST_PURCHASE_ID_1,
    TEST_TICKET_TYPE_ID_1,
    TEST_TICKET_TYPE_ID_2,
)


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    return FakeUnitOfWork()


@pytest.fixture
def fake_uow_factory(fake_uow: FakeUnitOfWork) -> UnitOfWorkFactory:
    return lambda: fake_uow


@pytest.fixture
def standard_ticket_type() -> EventTicketType:
    return EventTicketType(
        id=TEST_TICKET_TYPE_ID_1,
        event_id=TEST_EVENT_ID_1,
        name='Standard',
        price=10,
        total_capacity=100,
    )


@pytest.fixture
def vip_ticket_type() -> EventTicketType:
    return EventTicketType(
        id=TEST_TICKET_TYPE_ID_2,
        event_id=TEST_EVENT_ID_1,
        name='VIP',
        price=25,
        total_capacity=10,
    )


@pytest.fixture
def pending_purchase() -> Purchase:
    now = datetime.now(timezone.utc)
    return Purchase(
        id=TEST_PURCHASE_ID_1,
        buyer_id=TEST_BUYER_ID_1,
        event_id=TEST_EVENT_ID_1,
        total_price=45,
        currency=TEST_CURRENCY,
        payment_method=PaymentMethod.CARD,
        status=PurchaseStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
