from typing import List, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_purchase_query_repo import IPurchaseQueryRepo
from src.service.purchasing.domain.entity.ticket_entity import Ticket


class ListTicketsForPurchaseUseCase:
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
    async def execute(
        self, *, purchase_id: UUID, buyer_id: Optional[UUID] = None
    ) -> List[Ticket]:
        purchase = await self.purchase_query_repo.get_by_id(purchase_id=purchase_id)
        if not purchase:
            raise NotFoundError('Purchase not found')
        if buyer_id is not None and not purchase.is_owned_by(buyer_id):
            raise ForbiddenError('Only the buyer can view these tickets')
        return await self.purchase_query_repo.list_tickets_by_purchase(purchase_id=purchase_id)
