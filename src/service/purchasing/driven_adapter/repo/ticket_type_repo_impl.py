from typing import Dict, Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_ticket_type_repo import ITicketTypeRepo
from src.service.purchasing.domain.entity.ticket_type_entity import EventTicketType
from src.service.purchasing.driven_adapter.model.ticket_type_model import TicketTypeModel
from src.service.purchasing.driven_adapter.repo.entity_mapper import to_ticket_type


class TicketTypeRepoImpl(ITicketTypeRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @Logger.io
    async def get_by_id(self, *, ticket_type_id: UUID) -> EventTicketType | None:
        db_ticket_type = await self.session.get(TicketTypeModel, ticket_type_id)
        return to_ticket_type(db_ticket_type) if db_ticket_type else None

    @Logger.io
    async def get_by_ids(self, *, ticket_type_ids: Iterable[UUID]) -> Dict[UUID, EventTicketType]:
        ids = list(set(ticket_type_ids))
        if not ids:
            return {}

        result = await self.session.execute(
            select(TicketTypeModel).where(TicketTypeModel.id.in_(ids))
        )
        return {
            db_ticket_type.id: to_ticket_type(db_ticket_type)
            for db_ticket_type in result.scalars().all()
        }
