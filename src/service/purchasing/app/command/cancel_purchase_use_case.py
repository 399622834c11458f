from typing import Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from src.platform.exception.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.domain.entity.purchase_entity import Purchase, PurchaseStatus
from src.service.purchasing.domain.entity.ticket_entity import TicketStatus
from src.service.purchasing.domain.value_object.reservation import Reservation


class CancelPurchaseUseCase:
    """
    Cancel a pending purchase.

    In one transaction:
    1. pending -> cancelled (compare-and-set, loses cleanly to a concurrent confirm)
    2. every still-pending ticket -> cancelled
    3. their units go back to the inventory ledger

    Paid tickets are never touched: a paid purchase cannot be cancelled.
    """

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
    async def execute(self, *, purchase_id: UUID, buyer_id: Optional[UUID] = None) -> Purchase:
        async with self.uow_factory() as uow:
            purchase = await uow.purchase_command_repo.get_by_id(purchase_id=purchase_id)
            if not purchase:
                raise NotFoundError('Purchase not found')
            if buyer_id is not None and not purchase.is_owned_by(buyer_id):
                raise ForbiddenError('Only the buyer can cancel this purchase')

            cancelled, released = await self.cancel_within(uow=uow, purchase=purchase)
            await uow.commit()

        Logger.base.info(
            f'🚫 [PURCHASE] Cancelled {purchase_id}, {released} ticket(s) back in stock'
        )
        return cancelled

    async def cancel_within(
        self, *, uow: AbstractUnitOfWork, purchase: Purchase
    ) -> tuple[Purchase, int]:
        """Cancel inside the caller's unit of work; the caller commits."""
        cancelled = await uow.purchase_command_repo.transition_status(
            purchase=purchase.cancel(), expected_status=PurchaseStatus.PENDING
        )
        if cancelled is None:
            current = await uow.purchase_command_repo.get_by_id(purchase_id=purchase.id)
            status = current.status.value if current else 'missing'
            raise InvalidStateError(f'Cannot cancel {status} purchase')

        tickets = await uow.purchase_command_repo.get_tickets(purchase_id=purchase.id)
        pending_tickets = [ticket for ticket in tickets if ticket.status == TicketStatus.PENDING]

        released = 0
        for reservation in Reservation.from_tickets(pending_tickets):
            released += await uow.inventory_ledger.release(reservation=reservation)
        return cancelled, released
