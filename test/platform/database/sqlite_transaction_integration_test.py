"""
Integration tests for SQLite transaction modes

Test Focus:
1. Read sessions are not queued behind an open unit of work
2. Only unit-of-work sessions ask for BEGIN IMMEDIATE
"""

import asyncio

import pytest

from src.platform.database.orm_db_setting import WRITE_LOCK_OPTION, Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.purchasing.driven_adapter.repo.purchase_query_repo_impl import (
    PurchaseQueryRepoImpl,
)
from test.test_constants import TEST_PURCHASE_ID_999


@pytest.mark.integration
class TestSqliteTransactionModes:
    @pytest.mark.asyncio
    async def test_read_does_not_wait_for_open_unit_of_work(
        self, database: Database, purchase_query_repo: PurchaseQueryRepoImpl
    ):
        """
        Given: A unit of work that has started its transaction and not committed
        When: A query repository reads in parallel
        Then: The read returns immediately instead of waiting on the write lock
        """
        async with SqlAlchemyUnitOfWork(database) as uow:
            # Arrange
            await uow.purchase_command_repo.get_by_id(purchase_id=TEST_PURCHASE_ID_999)

            # Act
            purchase = await asyncio.wait_for(
                purchase_query_repo.get_by_id(purchase_id=TEST_PURCHASE_ID_999), timeout=1
            )

            # Assert
            assert purchase is None

    @pytest.mark.asyncio
    async def test_only_unit_of_work_sessions_request_write_lock(self, database: Database):
        write_bind = database.write_session_maker.kw['bind']
        read_bind = database.session_maker.kw['bind']

        assert write_bind.get_execution_options().get(WRITE_LOCK_OPTION) is True
        assert read_bind.get_execution_options().get(WRITE_LOCK_OPTION) is None
