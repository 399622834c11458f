from typing import Self, Sequence
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.domain.aggregate.purchase_aggregate import PurchaseAggregate
from src.service.purchasing.domain.entity.purchase_entity import PaymentMethod, Purchase
from src.service.purchasing.domain.service.ticket_issuer import TicketIssuer
from src.service.purchasing.domain.value_object.line_item import LineItem


class CreatePurchaseUseCase:
    """
    Turn a cart into a pending purchase with its tickets.

    Flow (single unit of work - all or nothing):
    1. Re-read the authoritative ticket types and validate the cart against them
    2. Insert the purchase
    3. Reserve inventory per ticket type, in ascending ticket type id order
    4. Issue one pending ticket per reserved unit
    5. Commit

    Any failure (OutOfStock included) rolls the whole transaction back, so no
    purchase row, no ticket row and no counter change survives.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        ticket_issuer: TicketIssuer,
        currency: str,
    ) -> None:
        self.uow_factory = uow_factory
        self.ticket_issuer = ticket_issuer
        self.currency = currency

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        ticket_issuer: TicketIssuer = Depends(Provide[Container.ticket_issuer]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            ticket_issuer=ticket_issuer,
            currency=config.PAYMENT_CURRENCY,
        )

    @Logger.io
    async def execute(
        self,
        *,
        buyer_id: UUID,
        event_id: UUID,
        line_items: Sequence[LineItem],
        payment_method: PaymentMethod,
    ) -> Purchase:
        async with self.uow_factory() as uow:
            ticket_types = await uow.ticket_type_repo.get_by_ids(
                ticket_type_ids=[line.ticket_type_id for line in line_items]
            )
            aggregate = PurchaseAggregate.create(
                buyer_id=buyer_id,
                event_id=event_id,
                line_items=line_items,
                payment_method=payment_method,
                currency=self.currency,
                ticket_types=ticket_types,
            )
            await uow.purchase_command_repo.create(purchase=aggregate.purchase)

            for ticket_type_id, quantity in aggregate.quantities_by_ticket_type():
                reservation = await uow.inventory_ledger.reserve(
                    ticket_type_id=ticket_type_id, quantity=quantity
                )
                aggregate.add_tickets(
                    self.ticket_issuer.issue_for_reservation(
                        purchase=aggregate.purchase,
                        reservation=reservation,
                        price_at_purchase=aggregate.unit_price_for(ticket_type_id),
                    )
                )

            aggregate.verify_total()
            await uow.purchase_command_repo.add_tickets(tickets=aggregate.tickets)
            await uow.commit()

        Logger.base.info(
            f'🛒 [PURCHASE] Created {aggregate.purchase.id}: '
            f'{len(aggregate.tickets)} ticket(s), total {aggregate.purchase.total_price}'
        )
        return aggregate.purchase
