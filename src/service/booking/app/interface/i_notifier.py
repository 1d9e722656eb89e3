from abc import ABC, abstractmethod

from src.service.booking.domain.entity.event_entity import EventEntity
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.entity.user_entity import UserEntity


class INotifier(ABC):
    @abstractmethod
    async def notify_booking_confirmed(
        self, *, attendee: UserEntity, event: EventEntity, ticket: TicketEntity
    ) -> None:
        pass

    @abstractmethod
    async def notify_organizer_ticket_sold(
        self,
        *,
        organizer: UserEntity,
        attendee: UserEntity,
        event: EventEntity,
        ticket: TicketEntity,
    ) -> None:
        pass

    @abstractmethod
    async def notify_booking_cancelled(
        self, *, attendee: UserEntity, event: EventEntity, ticket: TicketEntity
    ) -> None:
        pass
