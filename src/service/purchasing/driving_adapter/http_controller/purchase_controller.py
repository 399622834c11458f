from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.command.cancel_purchase_use_case import CancelPurchaseUseCase
from src.service.purchasing.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.purchasing.app.command.create_purchase_use_case import CreatePurchaseUseCase
from src.service.purchasing.app.command.request_payment_use_case import RequestPaymentUseCase
from src.service.purchasing.app.query.get_purchase_use_case import GetPurchaseUseCase
from src.service.purchasing.app.query.list_purchases_for_buyer_use_case import (
    ListPurchasesForBuyerUseCase,
)
from src.service.purchasing.app.query.list_tickets_for_purchase_use_case import (
    ListTicketsForPurchaseUseCase,
)
from src.service.purchasing.domain.entity.purchase_entity import PurchaseStatus
from src.service.purchasing.domain.value_object.line_item import LineItem
from src.service.purchasing.domain.value_object.payment import Payer
from src.service.purchasing.driving_adapter.http_controller.auth.buyer_auth import (
    get_current_buyer_id,
)
from src.service.purchasing.driving_adapter.http_controller.schema.purchase_schema import (
    CancelPurchaseResponse,
    PaymentRequest,
    PaymentSessionResponse,
    PurchaseCreateRequest,
    PurchaseResponse,
    TicketResponse,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_purchase(
    request: PurchaseCreateRequest,
    buyer_id: UUID = Depends(get_current_buyer_id),
    use_case: CreatePurchaseUseCase = Depends(CreatePurchaseUseCase.depends),
) -> PurchaseResponse:
    purchase = await use_case.execute(
        buyer_id=buyer_id,
        event_id=request.event_id,
        line_items=[
            LineItem(
                ticket_type_id=item.ticket_type_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in request.line_items
        ],
        payment_method=request.payment_method,
    )
    return PurchaseResponse.from_entity(purchase)


@router.get('/my_purchase')
@Logger.io
async def list_my_purchases(
    purchase_status: Optional[PurchaseStatus] = None,
    buyer_id: UUID = Depends(get_current_buyer_id),
    use_case: ListPurchasesForBuyerUseCase = Depends(ListPurchasesForBuyerUseCase.depends),
) -> List[PurchaseResponse]:
    purchases = await use_case.execute(buyer_id=buyer_id, status=purchase_status)
    return [PurchaseResponse.from_entity(purchase) for purchase in purchases]


@router.get('/{purchase_id}')
@Logger.io
async def get_purchase(
    purchase_id: UUID,
    buyer_id: UUID = Depends(get_current_buyer_id),
    use_case: GetPurchaseUseCase = Depends(GetPurchaseUseCase.depends),
) -> PurchaseResponse:
    purchase = await use_case.execute(purchase_id=purchase_id, buyer_id=buyer_id)
    return PurchaseResponse.from_entity(purchase)


@router.get('/{purchase_id}/tickets')
@Logger.io
async def list_purchase_tickets(
    purchase_id: UUID,
    buyer_id: UUID = Depends(get_current_buyer_id),
    use_case: ListTicketsForPurchaseUseCase = Depends(ListTicketsForPurchaseUseCase.depends),
) -> List[TicketResponse]:
    tickets = await use_case.execute(purchase_id=purchase_id, buyer_id=buyer_id)
    return [TicketResponse.from_entity(ticket) for ticket in tickets]


@router.post('/{purchase_id}/pay')
@Logger.io
async def pay_purchase(
    purchase_id: UUID,
    request: PaymentRequest,
    buyer_id: UUID = Depends(get_current_buyer_id),
    use_case: RequestPaymentUseCase = Depends(RequestPaymentUseCase.depends),
) -> PaymentSessionResponse:
    session = await use_case.execute(
        purchase_id=purchase_id,
        payer=Payer.from_contact(email=request.email, name=request.name),
        buyer_id=buyer_id,
    )
    return PaymentSessionResponse(
        purchase_id=purchase_id,
        payment_url=session.hosted_url,
        external_reference=session.external_reference,
    )


@router.post('/{purchase_id}/sync_payment')
@Logger.io
async def sync_purchase_payment(
    purchase_id: UUID,
    buyer_id: UUID = Depends(get_current_buyer_id),
    get_use_case: GetPurchaseUseCase = Depends(GetPurchaseUseCase.depends),
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> PurchaseResponse:
    # Ownership check before polling the gateway
    await get_use_case.execute(purchase_id=purchase_id, buyer_id=buyer_id)
    purchase = await use_case.reconcile(purchase_id=purchase_id)
    return PurchaseResponse.from_entity(purchase)


@router.patch('/{purchase_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_purchase(
    purchase_id: UUID,
    buyer_id: UUID = Depends(get_current_buyer_id),
    use_case: CancelPurchaseUseCase = Depends(CancelPurchaseUseCase.depends),
) -> CancelPurchaseResponse:
    purchase = await use_case.execute(purchase_id=purchase_id, buyer_id=buyer_id)
    return CancelPurchaseResponse(status=purchase.status.value, cancelled_at=purchase.cancelled_at)
