from abc import ABC, abstractmethod
from typing import Optional

from src.service.booking.domain.entity.event_entity import EventEntity


class IEventRepo(ABC):
    @abstractmethod
    async def get_by_id(self, event_id: int) -> Optional[EventEntity]:
        pass

    @abstractmethod
    async def create(self, event: EventEntity) -> EventEntity:
        pass

    @abstractmethod
    async def delete(self, event_id: int) -> bool:
        pass

    @abstractmethod
    async def decrement_available_tickets(self, *, event_id: int, quantity: int) -> Optional[int]:
        """
        Atomically take `quantity` tickets from an active event.

        Applies only when the event is active and has at least `quantity`
        tickets left; returns the new availability, or None when nothing changed.
        """
        pass

    @abstractmethod
    async def increment_available_tickets(self, *, event_id: int, quantity: int) -> Optional[int]:
        """Return `quantity` tickets, capped at total_tickets. None when the event is gone."""
        pass

    @abstractmethod
    async def update(self, event: EventEntity) -> Optional[EventEntity]:
        """
        Persist the editable details of `event` (see EDITABLE_FIELDS).

        Never writes total_tickets, available_tickets or status. None when the
        event no longer exists.
        """
        pass
