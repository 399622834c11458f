"""
Purchase Command Repository Implementation (SQLAlchemy)

Runs inside the unit of work session. Status transitions are
`UPDATE ... WHERE id = :id AND status = :expected RETURNING id`; the row is
read back only when the compare-and-set matched.
"""

from datetime import datetime, timezone
from typing import List, Sequence
from uuid import UUID

from sqlalchemy import insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_purchase_command_repo import IPurchaseCommandRepo
from src.service.purchasing.domain.entity.purchase_entity import Purchase, PurchaseStatus
from src.service.purchasing.domain.entity.ticket_entity import Ticket, TicketStatus
from src.service.purchasing.domain.value_object.payment import PaymentSession
from src.service.purchasing.driven_adapter.model.purchase_model import PurchaseModel
from src.service.purchasing.driven_adapter.model.ticket_model import TicketModel
from src.service.purchasing.driven_adapter.repo.entity_mapper import (
    purchase_values,
    ticket_values,
    to_purchase,
    to_ticket,
)


class PurchaseCommandRepoImpl(IPurchaseCommandRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @Logger.io
    async def create(self, *, purchase: Purchase) -> Purchase:
        await self.session.execute(insert(PurchaseModel).values(**purchase_values(purchase)))
        return purchase

    @Logger.io
    async def add_tickets(self, *, tickets: Sequence[Ticket]) -> List[Ticket]:
        if not tickets:
            return []
        await self.session.execute(
            insert(TicketModel), [ticket_values(ticket) for ticket in tickets]
        )
        return list(tickets)

    @Logger.io
    async def get_by_id(self, *, purchase_id: UUID) -> Purchase | None:
        result = await self.session.execute(
            select(PurchaseModel)
            .where(PurchaseModel.id == purchase_id)
            .execution_options(populate_existing=True)
        )
        db_purchase = result.scalar_one_or_none()
        return to_purchase(db_purchase) if db_purchase else None

    @Logger.io
    async def get_tickets(self, *, purchase_id: UUID) -> List[Ticket]:
        result = await self.session.execute(
            select(TicketModel)
            .where(TicketModel.purchase_id == purchase_id)
            .order_by(TicketModel.ticket_type_id, TicketModel.id)
            .execution_options(populate_existing=True)
        )
        return [to_ticket(db_ticket) for db_ticket in result.scalars().all()]

    @Logger.io
    async def get_ticket_by_id(self, *, ticket_id: UUID) -> Ticket | None:
        result = await self.session.execute(
            select(TicketModel)
            .where(TicketModel.id == ticket_id)
            .execution_options(populate_existing=True)
        )
        db_ticket = result.scalar_one_or_none()
        return to_ticket(db_ticket) if db_ticket else None

    @Logger.io
    async def transition_status(
        self, *, purchase: Purchase, expected_status: PurchaseStatus
    ) -> Purchase | None:
        result = await self.session.execute(
            update(PurchaseModel)
            .where(
                PurchaseModel.id == purchase.id,
                PurchaseModel.status == expected_status.value,
            )
            .values(
                status=purchase.status.value,
                updated_at=purchase.updated_at or datetime.now(timezone.utc),
                paid_at=purchase.paid_at,
                cancelled_at=purchase.cancelled_at,
            )
            .returning(PurchaseModel.id)
            .execution_options(synchronize_session=False)
        )
        if result.scalar_one_or_none() is None:
            return None
        return await self.get_by_id(purchase_id=purchase.id)

    @Logger.io
    async def transition_tickets(
        self,
        *,
        purchase_id: UUID,
        from_status: TicketStatus,
        to_status: TicketStatus,
    ) -> List[UUID]:
        now = datetime.now(timezone.utc)
        values: dict = {'status': to_status.value, 'updated_at': now}
        if to_status == TicketStatus.VALIDATED:
            values['validated_at'] = now

        result = await self.session.execute(
            update(TicketModel)
            .where(
                TicketModel.purchase_id == purchase_id,
                TicketModel.status == from_status.value,
            )
            .values(**values)
            .returning(TicketModel.id)
            .execution_options(synchronize_session=False)
        )
        return list(result.scalars().all())

    @Logger.io
    async def transition_ticket(
        self, *, ticket: Ticket, expected_status: TicketStatus
    ) -> Ticket | None:
        result = await self.session.execute(
            update(TicketModel)
            .where(
                TicketModel.id == ticket.id,
                TicketModel.status == expected_status.value,
            )
            .values(
                status=ticket.status.value,
                updated_at=ticket.updated_at or datetime.now(timezone.utc),
                validated_at=ticket.validated_at,
            )
            .returning(TicketModel.id)
            .execution_options(synchronize_session=False)
        )
        if result.scalar_one_or_none() is None:
            return None
        return await self.get_ticket_by_id(ticket_id=ticket.id)

    @Logger.io
    async def attach_payment_session(
        self, *, purchase_id: UUID, session: PaymentSession
    ) -> Purchase | None:
        result = await self.session.execute(
            update(PurchaseModel)
            .where(
                PurchaseModel.id == purchase_id,
                PurchaseModel.status != PurchaseStatus.CANCELLED.value,
                or_(
                    PurchaseModel.external_reference.is_(None),
                    PurchaseModel.external_reference == session.external_reference,
                ),
            )
            .values(
                external_reference=session.external_reference,
                payment_url=session.hosted_url,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(PurchaseModel.id)
            .execution_options(synchronize_session=False)
        )
        if result.scalar_one_or_none() is None:
            return None
        return await self.get_by_id(purchase_id=purchase_id)

    @Logger.io
    async def record_external_reference(
        self, *, purchase_id: UUID, external_reference: str
    ) -> bool:
        result = await self.session.execute(
            update(PurchaseModel)
            .where(
                PurchaseModel.id == purchase_id,
                PurchaseModel.external_reference.is_(None),
            )
            .values(external_reference=external_reference)
            .returning(PurchaseModel.id)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none() is not None

    @Logger.io
    async def list_pending_created_before(self, *, cutoff: datetime) -> List[UUID]:
        result = await self.session.execute(
            select(PurchaseModel.id)
            .where(
                PurchaseModel.status == PurchaseStatus.PENDING.value,
                PurchaseModel.created_at < cutoff,
            )
            .order_by(PurchaseModel.created_at)
        )
        return list(result.scalars().all())
