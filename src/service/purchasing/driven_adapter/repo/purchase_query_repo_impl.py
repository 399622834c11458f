from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_purchase_query_repo import IPurchaseQueryRepo
from src.service.purchasing.domain.entity.purchase_entity import Purchase, PurchaseStatus
from src.service.purchasing.domain.entity.ticket_entity import Ticket, TicketStatus
from src.service.purchasing.driven_adapter.model.purchase_model import PurchaseModel
from src.service.purchasing.driven_adapter.model.ticket_model import TicketModel
from src.service.purchasing.driven_adapter.repo.entity_mapper import to_purchase, to_ticket


class PurchaseQueryRepoImpl(IPurchaseQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ):
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        """
        Get session for query execution.

        If session is injected, yield it directly without context management.
        Otherwise, open a short-lived one from session_factory.
        """
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @Logger.io
    async def get_by_id(self, *, purchase_id: UUID) -> Purchase | None:
        async with self._get_session() as session:
            db_purchase = await session.scalar(
                select(PurchaseModel).where(PurchaseModel.id == purchase_id)
            )
            return to_purchase(db_purchase) if db_purchase else None

    @Logger.io
    async def get_by_external_reference(self, *, external_reference: str) -> Purchase | None:
        async with self._get_session() as session:
            db_purchase = await session.scalar(
                select(PurchaseModel).where(PurchaseModel.external_reference == external_reference)
            )
            return to_purchase(db_purchase) if db_purchase else None

    @Logger.io
    async def list_by_buyer(
        self, *, buyer_id: UUID, status: Optional[PurchaseStatus] = None
    ) -> List[Purchase]:
        stmt = select(PurchaseModel).where(PurchaseModel.buyer_id == buyer_id)
        if status is not None:
            stmt = stmt.where(PurchaseModel.status == status.value)

        async with self._get_session() as session:
            result = await session.execute(stmt.order_by(PurchaseModel.created_at.desc()))
            return [to_purchase(db_purchase) for db_purchase in result.scalars().all()]

    @Logger.io
    async def list_tickets_by_purchase(self, *, purchase_id: UUID) -> List[Ticket]:
        async with self._get_session() as session:
            result = await session.execute(
                select(TicketModel)
                .where(TicketModel.purchase_id == purchase_id)
                .order_by(TicketModel.ticket_type_id, TicketModel.id)
            )
            return [to_ticket(db_ticket) for db_ticket in result.scalars().all()]

    @Logger.io
    async def list_tickets_by_buyer(self, *, buyer_id: UUID) -> List[Ticket]:
        async with self._get_session() as session:
            result = await session.execute(
                select(TicketModel)
                .where(
                    TicketModel.purchaser_id == buyer_id,
                    TicketModel.status != TicketStatus.PENDING.value,
                )
                .order_by(TicketModel.created_at.desc(), TicketModel.id)
            )
            return [to_ticket(db_ticket) for db_ticket in result.scalars().all()]
