from fastapi import APIRouter, Depends, Request

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.purchasing.domain.value_object.payment import PaymentOutcomeStatus
from src.service.purchasing.driven_adapter.payment.in_memory_payment_gateway_impl import (
    InMemoryPaymentGateway,
)
from src.service.purchasing.driving_adapter.http_controller.schema.purchase_schema import (
    PaymentOutcomeResponse,
    PurchaseResponse,
)


router = APIRouter()


@router.post('/webhook')
@Logger.io
async def payment_webhook(
    request: Request,
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> PurchaseResponse:
    """Gateway callback; the signature is checked against the raw body."""
    payload = await request.body()
    purchase = await use_case.execute_from_webhook(payload=payload, headers=dict(request.headers))
    return PurchaseResponse.from_entity(purchase)


def _mock_gateway(use_case: ConfirmPaymentUseCase) -> InMemoryPaymentGateway:
    gateway = use_case.payment_gateway
    if not isinstance(gateway, InMemoryPaymentGateway):
        raise NotFoundError('Mock checkout is only served by the in-memory gateway')
    return gateway


@router.get('/mockpay/{external_reference}')
@Logger.io
async def view_mock_checkout(
    external_reference: str,
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> PaymentOutcomeResponse:
    """Hosted page of the in-memory gateway: what the buyer is about to pay."""
    outcome = await _mock_gateway(use_case).fetch_outcome(external_reference=external_reference)
    return PaymentOutcomeResponse.from_outcome(outcome)


@router.post('/mockpay/{external_reference}')
@Logger.io
async def complete_mock_checkout(
    external_reference: str,
    outcome: PaymentOutcomeStatus = PaymentOutcomeStatus.APPROVED,
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> PurchaseResponse:
    """Finish (or abandon) the in-memory checkout and deliver its signed webhook."""
    gateway = _mock_gateway(use_case)
    settled = gateway.settle(external_reference=external_reference, status=outcome)
    payload, headers = gateway.build_webhook(outcome=settled)
    purchase = await use_case.execute_from_webhook(payload=payload, headers=headers)
    return PurchaseResponse.from_entity(purchase)
