from typing import List, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_purchase_query_repo import IPurchaseQueryRepo
from src.service.purchasing.domain.entity.ticket_entity import Ticket


class ListTicketsForBuyerUseCase:
    """The buyer's "My tickets" view: paid, validated and cancelled tickets, never pending ones."""

    def __init__(self, *, purchase_query_repo: IPurchaseQueryRepo) -> None:
        self.purchase_query_repo = purchase_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        purchase_query_repo: IPurchaseQueryRepo = Depends(Provide[Container.purchase_query_repo]),
    ) -> Self:
        return cls(purchase_query_repo=purchase_query_repo)

    @Logger.io
    async def execute(self, *, buyer_id: UUID) -> List[Ticket]:
        return await self.purchase_query_repo.list_tickets_by_buyer(buyer_id=buyer_id)
