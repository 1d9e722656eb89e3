from typing import List

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.command.create_event_use_case import CreateEventUseCase
from src.service.booking.app.command.delete_event_use_case import DeleteEventUseCase
from src.service.booking.app.command.update_event_use_case import UpdateEventUseCase
from src.service.booking.app.query.get_event_use_case import GetEventUseCase
from src.service.booking.app.query.list_event_tickets_use_case import ListEventTicketsUseCase
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_organizer_or_admin,
)
from src.service.booking.driving_adapter.http_controller.schema.event_schema import (
    EventCreateRequest,
    EventResponse,
    EventUpdateRequest,
)
from src.service.booking.driving_adapter.http_controller.schema.ticket_schema import (
    EventTicketResponse,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_event(
    request: EventCreateRequest,
    current_user: UserEntity = Depends(require_organizer_or_admin),
    use_case: CreateEventUseCase = Depends(CreateEventUseCase.depends),
) -> EventResponse:
    event = await use_case.create_event(
        organizer=current_user,
        title=request.title,
        description=request.description,
        location=request.location,
        start_date=request.start_date,
        end_date=request.end_date,
        category=request.category,
        total_tickets=request.total_tickets,
        ticket_price=request.ticket_price,
        is_featured=request.is_featured,
        image_url=request.image_url,
    )
    return EventResponse.from_entity(event)


@router.get('/{event_id}')
@Logger.io
async def get_event(
    event_id: int,
    use_case: GetEventUseCase = Depends(GetEventUseCase.depends),
) -> EventResponse:
    event = await use_case.get_event(event_id)
    return EventResponse.from_entity(event)


@router.put('/{event_id}')
@Logger.io
async def update_event(
    event_id: int,
    request: EventUpdateRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: UpdateEventUseCase = Depends(UpdateEventUseCase.depends),
) -> EventResponse:
    event = await use_case.update_event(
        event_id=event_id, requester=current_user, **request.model_dump(exclude_none=True)
    )
    return EventResponse.from_entity(event)


@router.get('/{event_id}/tickets')
@Logger.io
async def list_event_tickets(
    event_id: int,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListEventTicketsUseCase = Depends(ListEventTicketsUseCase.depends),
) -> List[EventTicketResponse]:
    sales = await use_case.list_tickets(event_id=event_id, requester=current_user)
    return [EventTicketResponse.from_sale(ticket, buyer) for ticket, buyer in sales]


@router.delete('/{event_id}')
@Logger.io
async def delete_event(
    event_id: int,
    current_user: UserEntity = Depends(get_current_user),
    use_case: DeleteEventUseCase = Depends(DeleteEventUseCase.depends),
) -> dict[str, str]:
    await use_case.delete_event(event_id=event_id, requester=current_user)
    return {'message': 'Event deleted successfully'}
