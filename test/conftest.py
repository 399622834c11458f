"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application module reads settings
- A throwaway SQLite database per test (integration tests)
- Shared fixtures for ticket types, use cases and the in-memory gateway

Architecture:
- Unit tests (test/**/unit/): mock ports, no database
- Integration tests: real repositories on a temporary SQLite file
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the log sink are built at import time
# =============================================================================
import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    default_db = Path(tempfile.gettempdir()) / 'ticket_purchasing_test.db'
    os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{default_db}'
    os.environ['PAYMENT_GATEWAY_BACKEND'] = 'in_memory'
    os.environ['PAYMENT_GATEWAY_WEBHOOK_SECRET'] = 'test_webhook_secret'
    os.environ['PAYMENT_GATEWAY_RETRY_BACKOFF_SECONDS'] = '0'
    os.environ['PURCHASE_EXPIRY_SWEEP_INTERVAL_SECONDS'] = '0'


_early_setup_test_environment()

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from datetime import timedelta  # noqa: E402
from uuid import UUID  # noqa: E402

import pytest  # noqa: E402
from uuid_utils.compat import uuid7  # noqa: E402

from src.platform.database.orm_db_setting import Database  # noqa: E402
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork, UnitOfWorkFactory  # noqa: E402
from src.service.purchasing.app.command.cancel_purchase_use_case import (  # noqa: E402
    CancelPurchaseUseCase,
)
from src.service.purchasing.app.command.confirm_payment_use_case import (  # noqa: E402
    ConfirmPaymentUseCase,
)
from src.service.purchasing.app.command.create_purchase_use_case import (  # noqa: E402
    CreatePurchaseUseCase,
)
from src.service.purchasing.app.command.expire_pending_purchases_use_case import (  # noqa: E402
    ExpirePendingPurchasesUseCase,
)
from src.service.purchasing.app.command.request_payment_use_case import (  # noqa: E402
    RequestPaymentUseCase,
)
from src.service.purchasing.app.command.validate_ticket_use_case import (  # noqa: E402
    ValidateTicketUseCase,
)
from src.service.purchasing.domain.entity.ticket_type_entity import EventTicketType  # noqa: E402
from src.service.purchasing.domain.service.ticket_issuer import TicketIssuer  # noqa: E402
from src.service.purchasing.driven_adapter.payment.in_memory_payment_gateway_impl import (  # noqa: E402
    InMemoryPaymentGateway,
)
from src.service.purchasing.driven_adapter.repo.purchase_query_repo_impl import (  # noqa: E402
    PurchaseQueryRepoImpl,
)
from test.test_constants import TEST_CURRENCY, TEST_WEBHOOK_SECRET  # noqa: E402


RegisterTicketType = Callable[..., Awaitable[EventTicketType]]


@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    db = Database(database_url=f'sqlite+aiosqlite:///{tmp_path / "purchasing.db"}')
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def uow_factory(database: Database) -> UnitOfWorkFactory:
    return lambda: SqlAlchemyUnitOfWork(database)


@pytest.fixture
def purchase_query_repo(database: Database) -> PurchaseQueryRepoImpl:
    return PurchaseQueryRepoImpl(session_factory=database.session)


@pytest.fixture
def payment_gateway() -> InMemoryPaymentGateway:
    return InMemoryPaymentGateway(webhook_secret=TEST_WEBHOOK_SECRET)


@pytest.fixture
def event_id() -> UUID:
    return uuid7()


@pytest.fixture
def register_ticket_type(uow_factory: UnitOfWorkFactory, event_id: UUID) -> RegisterTicketType:
    async def _register(
        *, name: str, price: int, total_capacity: int, for_event: UUID | None = None
    ) -> EventTicketType:
        ticket_type = EventTicketType.create(
            event_id=for_event or event_id,
            name=name,
            price=price,
            total_capacity=total_capacity,
        )
        async with uow_factory() as uow:
            await uow.inventory_ledger.register_ticket_type(ticket_type=ticket_type)
            await uow.commit()
        return ticket_type

    return _register


@pytest.fixture
def create_purchase_use_case(uow_factory: UnitOfWorkFactory) -> CreatePurchaseUseCase:
    return CreatePurchaseUseCase(
        uow_factory=uow_factory, ticket_issuer=TicketIssuer(), currency=TEST_CURRENCY
    )


@pytest.fixture
def request_payment_use_case(
    uow_factory: UnitOfWorkFactory,
    purchase_query_repo: PurchaseQueryRepoImpl,
    payment_gateway: InMemoryPaymentGateway,
) -> RequestPaymentUseCase:
    return RequestPaymentUseCase(
        uow_factory=uow_factory,
        purchase_query_repo=purchase_query_repo,
        payment_gateway=payment_gateway,
        max_retries=2,
        retry_backoff_seconds=0,
    )


@pytest.fixture
def confirm_payment_use_case(
    uow_factory: UnitOfWorkFactory,
    purchase_query_repo: PurchaseQueryRepoImpl,
    payment_gateway: InMemoryPaymentGateway,
) -> ConfirmPaymentUseCase:
    return ConfirmPaymentUseCase(
        uow_factory=uow_factory,
        purchase_query_repo=purchase_query_repo,
        payment_gateway=payment_gateway,
    )


@pytest.fixture
def cancel_purchase_use_case(uow_factory: UnitOfWorkFactory) -> CancelPurchaseUseCase:
    return CancelPurchaseUseCase(uow_factory=uow_factory)


@pytest.fixture
def validate_ticket_use_case(uow_factory: UnitOfWorkFactory) -> ValidateTicketUseCase:
    return ValidateTicketUseCase(uow_factory=uow_factory)


@pytest.fixture
def expire_pending_purchases_use_case(
    uow_factory: UnitOfWorkFactory,
) -> ExpirePendingPurchasesUseCase:
    return ExpirePendingPurchasesUseCase(
        uow_factory=uow_factory, pending_ttl=timedelta(minutes=30)
    )
