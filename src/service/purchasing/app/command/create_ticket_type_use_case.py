from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.domain.entity.ticket_type_entity import EventTicketType


class CreateTicketTypeUseCase:
    """Put a new ticket type on sale with its whole capacity available."""

    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def execute(
        self, *, event_id: UUID, name: str, price: int, total_capacity: int
    ) -> EventTicketType:
        ticket_type = EventTicketType.create(
            event_id=event_id, name=name, price=price, total_capacity=total_capacity
        )
        async with self.uow_factory() as uow:
            await uow.inventory_ledger.register_ticket_type(ticket_type=ticket_type)
            await uow.commit()

        Logger.base.info(
            f'🏷️  [TICKET_TYPE] {ticket_type.name} for event {event_id}: '
            f'{total_capacity} x {price}'
        )
        return ticket_type
