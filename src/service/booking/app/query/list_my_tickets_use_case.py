from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_ticket_repo import ITicketRepo
from src.service.booking.domain.entity.ticket_entity import TicketEntity


class ListMyTicketsUseCase:
    def __init__(self, ticket_repo: ITicketRepo):
        self.ticket_repo = ticket_repo

    @classmethod
    @inject
    def depends(cls, ticket_repo: ITicketRepo = Depends(Provide[Container.ticket_repo])) -> Self:
        return cls(ticket_repo=ticket_repo)

    @Logger.io
    async def list_tickets(self, user_id: int) -> List[TicketEntity]:
        """Newest first."""
        return await self.ticket_repo.list_by_user(user_id)
