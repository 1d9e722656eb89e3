from typing import List, Union

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Response, status
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_ticket_repo import ITicketRepo
from src.service.booking.app.query.list_my_tickets_use_case import ListMyTicketsUseCase
from src.service.booking.app.service.booking_orchestrator import BookingOrchestrator
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.domain.enum.booking_attempt_state import BookingAttemptState
from src.service.booking.driving_adapter.http_controller.auth.role_auth import get_current_user
from src.service.booking.driving_adapter.http_controller.schema.ticket_schema import (
    PendingBookingResponse,
    TicketPurchaseRequest,
    TicketResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_202_ACCEPTED)
@Logger.io
@inject
async def purchase_tickets(
    request: TicketPurchaseRequest,
    response: Response,
    current_user: UserEntity = Depends(get_current_user),
    orchestrator: BookingOrchestrator = Depends(Provide[Container.booking_orchestrator]),
    ticket_repo: ITicketRepo = Depends(Provide[Container.ticket_repo]),
) -> Union[TicketResponse, PendingBookingResponse]:
    """Free events are ticketed right away (201); paid events wait for payment (202)."""
    with tracer.start_as_current_span('controller.purchase_tickets') as span:
        span.set_attribute('event_id', request.event_id)
        span.set_attribute('user_id', current_user.id or 0)

        attempt = await orchestrator.initiate_booking(
            user_id=current_user.id or 0,
            event_id=request.event_id,
            quantity=request.quantity,
        )
        span.set_attribute('booking.id', str(attempt.id))

        if attempt.state == BookingAttemptState.CONFIRMED and attempt.ticket_id is not None:
            ticket = await ticket_repo.get_by_id(attempt.ticket_id)
            if ticket is None:
                raise NotFoundError('Ticket not found')
            response.status_code = status.HTTP_201_CREATED
            return TicketResponse.from_entity(ticket)

        return PendingBookingResponse(
            booking_id=attempt.id,
            amount_due=attempt.total_amount,
            status=attempt.state.value,
        )


@router.get('', response_model=List[TicketResponse])
@Logger.io
async def list_my_tickets(
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListMyTicketsUseCase = Depends(ListMyTicketsUseCase.depends),
) -> List[TicketResponse]:
    tickets = await use_case.list_tickets(current_user.id or 0)
    return [TicketResponse.from_entity(ticket) for ticket in tickets]


@router.post('/{ticket_id}/cancel')
@Logger.io
@inject
async def cancel_ticket(
    ticket_id: int,
    current_user: UserEntity = Depends(get_current_user),
    orchestrator: BookingOrchestrator = Depends(Provide[Container.booking_orchestrator]),
) -> TicketResponse:
    ticket = await orchestrator.cancel_booking(
        ticket_id=ticket_id,
        requester_id=current_user.id or 0,
        requester_is_admin=current_user.is_admin,
    )
    return TicketResponse.from_entity(ticket)
