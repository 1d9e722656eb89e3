from typing import Dict, List, Optional, Self, Tuple

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_event_repo import IEventRepo
from src.service.booking.app.interface.i_ticket_repo import ITicketRepo
from src.service.booking.app.interface.i_user_repo import IUserRepo
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.entity.user_entity import UserEntity


class ListEventTicketsUseCase:
    """Sales view for the event's organizer: every ticket with its buyer."""

    def __init__(self, *, event_repo: IEventRepo, ticket_repo: ITicketRepo, user_repo: IUserRepo):
        self.event_repo = event_repo
        self.ticket_repo = ticket_repo
        self.user_repo = user_repo

    @classmethod
    @inject
    def depends(
        cls,
        event_repo: IEventRepo = Depends(Provide[Container.event_repo]),
        ticket_repo: ITicketRepo = Depends(Provide[Container.ticket_repo]),
        user_repo: IUserRepo = Depends(Provide[Container.user_repo]),
    ) -> Self:
        return cls(event_repo=event_repo, ticket_repo=ticket_repo, user_repo=user_repo)

    @Logger.io
    async def list_tickets(
        self, *, event_id: int, requester: UserEntity
    ) -> List[Tuple[TicketEntity, Optional[UserEntity]]]:
        event = await self.event_repo.get_by_id(event_id)
        if event is None:
            raise NotFoundError('Event not found')
        if not (requester.is_admin or event.is_owned_by(requester.id or 0)):
            raise ForbiddenError('Only the organizer or an admin can view sales for this event')

        tickets = await self.ticket_repo.list_by_event(event_id)
        buyers: Dict[int, Optional[UserEntity]] = {}
        for ticket in tickets:
            if ticket.user_id not in buyers:
                buyers[ticket.user_id] = await self.user_repo.get_by_id(ticket.user_id)
        return [(ticket, buyers[ticket.user_id]) for ticket in tickets]
