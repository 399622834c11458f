from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import InvalidStateError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.domain.entity.purchase_entity import PurchaseStatus
from src.service.purchasing.domain.entity.ticket_entity import Ticket, TicketStatus


class ValidateTicketUseCase:
    """
    Redeem a ticket at the venue: paid -> validated.

    Once every non-cancelled ticket of the purchase is validated, the purchase
    itself moves paid -> validated.
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
    async def execute(self, *, ticket_id: UUID) -> Ticket:
        async with self.uow_factory() as uow:
            repo = uow.purchase_command_repo
            ticket = await repo.get_ticket_by_id(ticket_id=ticket_id)
            if not ticket:
                raise NotFoundError('Ticket not found')

            validated = await repo.transition_ticket(
                ticket=ticket.validate(), expected_status=TicketStatus.PAID
            )
            if validated is None:
                # Redeemed by a concurrent scan
                raise InvalidStateError('Ticket already validated')

            tickets = await repo.get_tickets(purchase_id=ticket.purchase_id)
            active = [t for t in tickets if t.is_active]
            if active and all(t.status == TicketStatus.VALIDATED for t in active):
                purchase = await repo.get_by_id(purchase_id=ticket.purchase_id)
                if purchase is not None and purchase.status == PurchaseStatus.PAID:
                    await repo.transition_status(
                        purchase=purchase.mark_as_validated(),
                        expected_status=PurchaseStatus.PAID,
                    )
                    Logger.base.info(f'🏁 [TICKET] Purchase {purchase.id} fully validated')

            await uow.commit()

        Logger.base.info(f'🎫 [TICKET] Validated {ticket_id}')
        return validated
