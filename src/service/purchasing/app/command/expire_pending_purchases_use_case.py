from datetime import datetime, timedelta, timezone
from typing import List, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import InvalidStateError
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.command.cancel_purchase_use_case import CancelPurchaseUseCase


class ExpirePendingPurchasesUseCase:
    """
    Cancel purchases left pending longer than the configured TTL, returning
    their tickets to stock. Each purchase is cancelled in its own transaction;
    one confirmed in the meantime is skipped.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory, pending_ttl: timedelta) -> None:
        self.uow_factory = uow_factory
        self.pending_ttl = pending_ttl
        self.cancel_purchase = CancelPurchaseUseCase(uow_factory=uow_factory)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            pending_ttl=timedelta(minutes=config.PURCHASE_PENDING_TTL_MINUTES),
        )

    @Logger.io
    async def execute(self, *, now: Optional[datetime] = None) -> List[UUID]:
        cutoff = (now or datetime.now(timezone.utc)) - self.pending_ttl

        async with self.uow_factory() as uow:
            candidate_ids = await uow.purchase_command_repo.list_pending_created_before(
                cutoff=cutoff
            )

        expired: List[UUID] = []
        for purchase_id in candidate_ids:
            try:
                await self.cancel_purchase.execute(purchase_id=purchase_id)
            except InvalidStateError:
                Logger.base.info(f'⏭️  [EXPIRE] {purchase_id} settled before expiry, skipped')
                continue
            expired.append(purchase_id)

        if expired:
            Logger.base.info(f'⌛ [EXPIRE] Cancelled {len(expired)} stale purchase(s)')
        return expired
