from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.command.validate_ticket_use_case import ValidateTicketUseCase
from src.service.purchasing.app.query.list_tickets_for_buyer_use_case import (
    ListTicketsForBuyerUseCase,
)
from src.service.purchasing.driving_adapter.http_controller.auth.buyer_auth import (
    get_current_buyer_id,
)
from src.service.purchasing.driving_adapter.http_controller.schema.purchase_schema import (
    TicketResponse,
)


router = APIRouter()


@router.get('/my_ticket')
@Logger.io
async def list_my_tickets(
    buyer_id: UUID = Depends(get_current_buyer_id),
    use_case: ListTicketsForBuyerUseCase = Depends(ListTicketsForBuyerUseCase.depends),
) -> List[TicketResponse]:
    tickets = await use_case.execute(buyer_id=buyer_id)
    return [TicketResponse.from_entity(ticket) for ticket in tickets]


@router.post('/{ticket_id}/validate')
@Logger.io
async def validate_ticket(
    ticket_id: UUID,
    use_case: ValidateTicketUseCase = Depends(ValidateTicketUseCase.depends),
) -> TicketResponse:
    """Called by the venue scanner."""
    ticket = await use_case.execute(ticket_id=ticket_id)
    return TicketResponse.from_entity(ticket)
