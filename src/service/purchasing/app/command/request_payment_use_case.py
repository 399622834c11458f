import asyncio
from typing import Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ForbiddenError,
    GatewayUnavailableError,
    InvalidStateError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.purchasing.app.interface.i_purchase_query_repo import IPurchaseQueryRepo
from src.service.purchasing.domain.entity.purchase_entity import Purchase
from src.service.purchasing.domain.value_object.payment import Payer, PaymentSession


class RequestPaymentUseCase:
    """
    Open (or reopen) the hosted payment page for a pending purchase.

    The gateway is called outside any database transaction, keyed by the
    purchase id, so retries and concurrent calls resolve to one external
    payment request. The purchase stays pending until the outcome arrives.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        purchase_query_repo: IPurchaseQueryRepo,
        payment_gateway: IPaymentGateway,
        max_retries: int,
        retry_backoff_seconds: float,
    ) -> None:
        self.uow_factory = uow_factory
        self.purchase_query_repo = purchase_query_repo
        self.payment_gateway = payment_gateway
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        purchase_query_repo: IPurchaseQueryRepo = Depends(Provide[Container.purchase_query_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            purchase_query_repo=purchase_query_repo,
            payment_gateway=payment_gateway,
            max_retries=config.PAYMENT_GATEWAY_MAX_RETRIES,
            retry_backoff_seconds=config.PAYMENT_GATEWAY_RETRY_BACKOFF_SECONDS,
        )

    @Logger.io
    async def execute(
        self, *, purchase_id: UUID, payer: Payer, buyer_id: Optional[UUID] = None
    ) -> PaymentSession:
        purchase = await self.purchase_query_repo.get_by_id(purchase_id=purchase_id)
        if not purchase:
            raise NotFoundError('Purchase not found')
        if buyer_id is not None and not purchase.is_owned_by(buyer_id):
            raise ForbiddenError('Only the buyer can pay for this purchase')

        purchase.validate_can_request_payment()

        existing_session = purchase.payment_session
        if existing_session is not None:
            Logger.base.info(f'💳 [PAYMENT] Reusing payment session for {purchase_id}')
            return existing_session

        session = await self._create_payment_request(purchase=purchase, payer=payer)

        async with self.uow_factory() as uow:
            updated = await uow.purchase_command_repo.attach_payment_session(
                purchase_id=purchase_id, session=session
            )
            if updated is None:
                # Lost the race: another request stored its session, or the purchase was cancelled
                current = await uow.purchase_command_repo.get_by_id(purchase_id=purchase_id)
                if current is None:
                    raise NotFoundError('Purchase not found')
                if not current.is_settled:
                    current.validate_can_request_payment()
                if current.payment_session is None:
                    raise InvalidStateError('Purchase payment session could not be stored')
                return current.payment_session
            await uow.commit()

        if updated.is_settled:
            # The outcome arrived while the session was being stored
            Logger.base.info(f'💳 [PAYMENT] Purchase {purchase_id} already {updated.status.value}')
        else:
            Logger.base.info(
                f'💳 [PAYMENT] Purchase {purchase_id} awaiting payment ({session.external_reference})'
            )
        return session

    async def _create_payment_request(self, *, purchase: Purchase, payer: Payer) -> PaymentSession:
        attempt = 0
        while True:
            try:
                return await self.payment_gateway.create_payment_request(
                    amount=purchase.total_price,
                    currency=purchase.currency,
                    payer=payer,
                    idempotency_key=str(purchase.id),
                )
            except GatewayUnavailableError:
                if attempt >= self.max_retries:
                    raise
                delay = self.retry_backoff_seconds * (2**attempt)
                attempt += 1
                Logger.base.warning(
                    f'🔁 [PAYMENT] Gateway unavailable for {purchase.id}, '
                    f'retry {attempt}/{self.max_retries} in {delay:.2f}s'
                )
                await asyncio.sleep(delay)
