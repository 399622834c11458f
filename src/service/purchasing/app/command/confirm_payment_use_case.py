from typing import Mapping, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    InvalidStateError,
    NotFoundError,
    PaymentMismatchError,
)
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.purchasing.app.interface.i_purchase_query_repo import IPurchaseQueryRepo
from src.service.purchasing.domain.entity.purchase_entity import Purchase, PurchaseStatus
from src.service.purchasing.domain.entity.ticket_entity import TicketStatus
from src.service.purchasing.domain.value_object.payment import PaymentOutcome


class ConfirmPaymentUseCase:
    """
    Reconcile a gateway outcome with the purchase.

    - approved: pending -> paid, every pending ticket -> paid (one transaction)
    - already paid/validated: no-op, so webhook replays and polls are harmless
    - cancelled: InvalidStateError
    - rejected/cancelled/pending outcome: purchase left untouched
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        purchase_query_repo: IPurchaseQueryRepo,
        payment_gateway: IPaymentGateway,
    ) -> None:
        self.uow_factory = uow_factory
        self.purchase_query_repo = purchase_query_repo
        self.payment_gateway = payment_gateway

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory.provider]),
        purchase_query_repo: IPurchaseQueryRepo = Depends(Provide[Container.purchase_query_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            purchase_query_repo=purchase_query_repo,
            payment_gateway=payment_gateway,
        )

    @Logger.io
    async def execute(self, *, purchase_id: UUID, outcome: PaymentOutcome) -> Purchase:
        async with self.uow_factory() as uow:
            purchase = await uow.purchase_command_repo.get_by_id(purchase_id=purchase_id)
            if not purchase:
                raise NotFoundError('Purchase not found')

            self._verify_outcome_belongs_to(purchase=purchase, outcome=outcome)

            if not outcome.is_success:
                Logger.base.info(
                    f'⏸️  [PAYMENT] Outcome {outcome.status.value} for {purchase_id}, purchase unchanged'
                )
                return purchase

            if outcome.amount is not None and outcome.amount != purchase.total_price:
                raise PaymentMismatchError(
                    f'Paid amount {outcome.amount} does not match purchase total {purchase.total_price}'
                )
            if outcome.currency and outcome.currency.upper() != purchase.currency.upper():
                raise PaymentMismatchError(
                    f'Paid currency {outcome.currency} does not match purchase currency {purchase.currency}'
                )

            if purchase.is_settled:
                Logger.base.info(f'🔁 [PAYMENT] Purchase {purchase_id} already {purchase.status.value}')
                return purchase

            # Webhook can beat requestPayment storing the session
            if purchase.external_reference is None:
                await uow.purchase_command_repo.record_external_reference(
                    purchase_id=purchase_id, external_reference=outcome.external_reference
                )

            paid_purchase = purchase.mark_as_paid()
            updated = await uow.purchase_command_repo.transition_status(
                purchase=paid_purchase, expected_status=PurchaseStatus.PENDING
            )
            if updated is None:
                current = await uow.purchase_command_repo.get_by_id(purchase_id=purchase_id)
                if current is not None and current.is_settled:
                    return current
                raise InvalidStateError('Cannot pay for cancelled purchase')

            paid_ticket_ids = await uow.purchase_command_repo.transition_tickets(
                purchase_id=purchase_id,
                from_status=TicketStatus.PENDING,
                to_status=TicketStatus.PAID,
            )
            await uow.commit()

        Logger.base.info(
            f'✅ [PAYMENT] Purchase {purchase_id} paid, {len(paid_ticket_ids)} ticket(s) issued'
        )
        return updated

    @Logger.io
    async def execute_from_webhook(
        self, *, payload: bytes, headers: Mapping[str, str]
    ) -> Purchase:
        outcome = self.payment_gateway.parse_webhook(payload=payload, headers=headers)
        purchase_id = outcome.purchase_id
        if purchase_id is None:
            purchase = await self.purchase_query_repo.get_by_external_reference(
                external_reference=outcome.external_reference
            )
            if not purchase:
                raise NotFoundError(f'No purchase for payment {outcome.external_reference}')
            purchase_id = purchase.id
        return await self.execute(purchase_id=purchase_id, outcome=outcome)

    @Logger.io
    async def reconcile(self, *, purchase_id: UUID) -> Purchase:
        """Poll the gateway for a purchase whose callback never arrived."""
        purchase = await self.purchase_query_repo.get_by_id(purchase_id=purchase_id)
        if not purchase:
            raise NotFoundError('Purchase not found')
        if purchase.external_reference is None:
            return purchase

        outcome = await self.payment_gateway.fetch_outcome(
            external_reference=purchase.external_reference
        )
        return await self.execute(purchase_id=purchase_id, outcome=outcome)

    @staticmethod
    def _verify_outcome_belongs_to(*, purchase: Purchase, outcome: PaymentOutcome) -> None:
        if outcome.purchase_id is not None and outcome.purchase_id != purchase.id:
            raise PaymentMismatchError(
                f'Payment outcome is for purchase {outcome.purchase_id}, not {purchase.id}'
            )
        if (
            purchase.external_reference is not None
            and outcome.external_reference != purchase.external_reference
        ):
            raise PaymentMismatchError(
                f'Payment {outcome.external_reference} does not belong to purchase {purchase.id}'
            )
