from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.purchasing.app.command.create_ticket_type_use_case import (
    CreateTicketTypeUseCase,
)
from src.service.purchasing.app.query.get_ticket_availability_use_case import (
    GetTicketAvailabilityUseCase,
)
from src.service.purchasing.driving_adapter.http_controller.schema.event_schema import (
    TicketTypeAvailabilityResponse,
    TicketTypeCreateRequest,
    TicketTypeResponse,
)


router = APIRouter()


@router.post('/{event_id}/ticket_type', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_ticket_type(
    event_id: UUID,
    request: TicketTypeCreateRequest,
    use_case: CreateTicketTypeUseCase = Depends(CreateTicketTypeUseCase.depends),
) -> TicketTypeResponse:
    ticket_type = await use_case.execute(
        event_id=event_id,
        name=request.name,
        price=request.price,
        total_capacity=request.total_capacity,
    )
    return TicketTypeResponse.from_entity(ticket_type)


@router.get('/{event_id}/availability')
@Logger.io
async def get_ticket_availability(
    event_id: UUID,
    use_case: GetTicketAvailabilityUseCase = Depends(GetTicketAvailabilityUseCase.depends),
) -> List[TicketTypeAvailabilityResponse]:
    availability = await use_case.execute(event_id=event_id)
    return [TicketTypeAvailabilityResponse.from_entity(item) for item in availability]
