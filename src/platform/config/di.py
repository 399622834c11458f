"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.purchasing.domain.service.ticket_issuer import TicketIssuer
from src.service.purchasing.driven_adapter.payment.gateway_error_policy import (
    DefaultGatewayErrorPolicy,
)
from src.service.purchasing.driven_adapter.payment.payment_gateway_factory import (
    build_payment_gateway,
)
from src.service.purchasing.driven_adapter.repo.purchase_query_repo_impl import (
    PurchaseQueryRepoImpl,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (uses AsyncEngineManager with settings from config_service)
    database = providers.Singleton(Database)

    # One unit of work per call; use cases receive the provider itself as factory
    uow_factory = providers.Factory(SqlAlchemyUnitOfWork, database=database)

    # Query side (stateless - short-lived session per call)
    purchase_query_repo = providers.Singleton(
        PurchaseQueryRepoImpl, session_factory=database.provided.session
    )

    # Domain services
    ticket_issuer = providers.Singleton(TicketIssuer)

    # Payment gateway
    gateway_error_policy = providers.Singleton(DefaultGatewayErrorPolicy)
    payment_gateway = providers.Singleton(
        build_payment_gateway,
        settings=config_service,
        error_policy=gateway_error_policy,
    )


container = Container()


def setup() -> None:
    container.config_service()
    container.payment_gateway()


def cleanup() -> None:
    container.reset_singletons()
