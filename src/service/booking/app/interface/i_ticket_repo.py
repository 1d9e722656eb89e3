from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.enum.ticket_status import TicketStatus


class ITicketRepo(ABC):
    @abstractmethod
    async def create(self, ticket: TicketEntity) -> TicketEntity:
        pass

    @abstractmethod
    async def get_by_id(self, ticket_id: int) -> Optional[TicketEntity]:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: int) -> List[TicketEntity]:
        pass

    @abstractmethod
    async def update_status(
        self, *, ticket_id: int, expected: TicketStatus, new: TicketStatus
    ) -> Optional[TicketEntity]:
        """Compare-and-set on status; None when the ticket is not in `expected`."""
        pass

    @abstractmethod
    async def list_by_event(self, event_id: int) -> List[TicketEntity]:
        pass
