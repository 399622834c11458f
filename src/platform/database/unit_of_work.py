"""
Unit of Work Pattern - one database session and transaction per business operation

Architecture:
- UoW owns the session lifecycle
- UoW owns commit/rollback; leaving the block without commit rolls back
- Repositories created by the UoW share its session
- Use cases receive a UoW *factory* so one singleton use case can serve
  concurrent requests, each inside its own transaction
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Callable

from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from src.platform.database.orm_db_setting import Database
    from src.service.purchasing.app.interface.i_inventory_ledger import IInventoryLedger
    from src.service.purchasing.app.interface.i_purchase_command_repo import (
        IPurchaseCommandRepo,
    )
    from src.service.purchasing.app.interface.i_ticket_type_repo import ITicketTypeRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the purchasing service

    Usage:
        async with uow_factory() as uow:
            purchase = await uow.purchase_command_repo.create(purchase=...)
            await uow.commit()
    """

    inventory_ledger: IInventoryLedger
    ticket_type_repo: ITicketTypeRepo
    purchase_command_repo: IPurchaseCommandRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    A fresh session is opened on enter and closed on exit.
    """

    def __init__(self, database: Database):
        self.database = database
        self.session: AsyncSession | None = None

    async def __aenter__(self):
        from src.service.purchasing.driven_adapter.repo.inventory_ledger_impl import (
            InventoryLedgerImpl,
        )
        from src.service.purchasing.driven_adapter.repo.purchase_command_repo_impl import (
            PurchaseCommandRepoImpl,
        )
        from src.service.purchasing.driven_adapter.repo.ticket_type_repo_impl import (
            TicketTypeRepoImpl,
        )

        self.session = self.database.write_session_maker()

        # Repositories share the UoW session
        self.inventory_ledger = InventoryLedgerImpl(session=self.session)
        self.ticket_type_repo = TicketTypeRepoImpl(session=self.session)
        self.purchase_command_repo = PurchaseCommandRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args):
        try:
            await super().__aexit__(*args)
        finally:
            if self.session is not None:
                await self.session.close()
                self.session = None

    async def _commit(self):
        assert self.session is not None, 'Unit of work used outside its context'
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
