from datetime import datetime, timezone

import attrs
from uuid_utils import UUID
import uuid_utils

from src.service.booking.domain.enum.reservation_state import ReservationState


@attrs.frozen
class ReservationToken:
    """Handle for a quantity of tickets held against one event."""

    token_id: UUID
    event_id: int
    quantity: int
    reserved_at: datetime
    state: ReservationState = ReservationState.PENDING

    @classmethod
    def issue(cls, *, event_id: int, quantity: int) -> 'ReservationToken':
        return cls(
            token_id=uuid_utils.uuid7(),
            event_id=event_id,
            quantity=quantity,
            reserved_at=datetime.now(timezone.utc),
        )

    @classmethod
    def reconstruct(cls, *, event_id: int, quantity: int) -> 'ReservationToken':
        """Token for returning the inventory of an already issued ticket."""
        return cls.issue(event_id=event_id, quantity=quantity)

    def committed(self) -> 'ReservationToken':
        return attrs.evolve(self, state=ReservationState.COMMITTED)

    def released(self) -> 'ReservationToken':
        return attrs.evolve(self, state=ReservationState.RELEASED)
