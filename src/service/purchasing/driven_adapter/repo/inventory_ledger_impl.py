"""
Inventory Ledger Implementation (SQLAlchemy)

quantity_available lives on the ticket_type row and is only ever changed by
single conditional UPDATE statements:

    reserve:  SET quantity_available = quantity_available - :n
              WHERE id = :id AND quantity_available >= :n
    release:  SET quantity_available = quantity_available + :released

PostgreSQL serialises concurrent reservations on the row lock taken by the
UPDATE; SQLite serialises them on the BEGIN IMMEDIATE write lock.
"""

from datetime import datetime, timezone
from typing import List
from uuid import UUID

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError, NotFoundError, OutOfStockError
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_inventory_ledger import IInventoryLedger
from src.service.purchasing.domain.entity.ticket_entity import TicketStatus
from src.service.purchasing.domain.entity.ticket_type_entity import (
    EventTicketType,
    TicketTypeAvailability,
)
from src.service.purchasing.domain.value_object.reservation import Reservation
from src.service.purchasing.driven_adapter.model.ticket_model import TicketModel
from src.service.purchasing.driven_adapter.model.ticket_type_model import TicketTypeModel
from src.service.purchasing.driven_adapter.repo.entity_mapper import to_availability


class InventoryLedgerImpl(IInventoryLedger):
    def __init__(self, session: AsyncSession):
        self.session = session

    @Logger.io
    async def reserve(self, *, ticket_type_id: UUID, quantity: int) -> Reservation:
        if quantity <= 0:
            raise DomainError('Quantity must be positive')

        result = await self.session.execute(
            update(TicketTypeModel)
            .where(
                TicketTypeModel.id == ticket_type_id,
                TicketTypeModel.quantity_available >= quantity,
            )
            .values(quantity_available=TicketTypeModel.quantity_available - quantity)
            .returning(TicketTypeModel.quantity_available)
            .execution_options(synchronize_session=False)
        )
        remaining = result.scalar_one_or_none()

        if remaining is None:
            available = await self.session.scalar(
                select(TicketTypeModel.quantity_available).where(
                    TicketTypeModel.id == ticket_type_id
                )
            )
            if available is None:
                raise NotFoundError(f'Ticket type {ticket_type_id} not found')
            raise OutOfStockError(
                f'Only {available} ticket(s) left for ticket type {ticket_type_id}, '
                f'requested {quantity}',
                ticket_type_id=ticket_type_id,
            )

        Logger.base.info(
            f'🎟️  [LEDGER] Reserved {quantity} of {ticket_type_id} ({remaining} left)'
        )
        return Reservation(
            ticket_type_id=ticket_type_id,
            ticket_ids=tuple(uuid7() for _ in range(quantity)),
        )

    @Logger.io
    async def release(self, *, reservation: Reservation) -> int:
        if not reservation.ticket_ids:
            return 0

        result = await self.session.execute(
            update(TicketModel)
            .where(
                TicketModel.id.in_(reservation.ticket_ids),
                TicketModel.ticket_type_id == reservation.ticket_type_id,
                TicketModel.status == TicketStatus.PENDING.value,
            )
            .values(status=TicketStatus.CANCELLED.value, updated_at=datetime.now(timezone.utc))
            .returning(TicketModel.id)
            .execution_options(synchronize_session=False)
        )
        released = len(result.scalars().all())

        if released:
            await self.session.execute(
                update(TicketTypeModel)
                .where(TicketTypeModel.id == reservation.ticket_type_id)
                .values(quantity_available=TicketTypeModel.quantity_available + released)
                .execution_options(synchronize_session=False)
            )
            Logger.base.info(
                f'♻️  [LEDGER] Released {released} of {reservation.ticket_type_id}'
            )
        return released

    @Logger.io
    async def register_ticket_type(self, *, ticket_type: EventTicketType) -> EventTicketType:
        await self.session.execute(
            insert(TicketTypeModel).values(
                id=ticket_type.id,
                event_id=ticket_type.event_id,
                name=ticket_type.name,
                price=ticket_type.price,
                total_capacity=ticket_type.total_capacity,
                quantity_available=ticket_type.total_capacity,
                created_at=ticket_type.created_at or datetime.now(timezone.utc),
            )
        )
        return ticket_type

    @Logger.io
    async def get_availability(self, *, event_id: UUID) -> List[TicketTypeAvailability]:
        result = await self.session.execute(
            select(TicketTypeModel)
            .where(TicketTypeModel.event_id == event_id)
            .order_by(TicketTypeModel.price, TicketTypeModel.name)
            .execution_options(populate_existing=True)
        )
        return [to_availability(db_ticket_type) for db_ticket_type in result.scalars().all()]
