from typing import Optional

from src.platform.types import UtilsUUID7
from src.service.booking.domain.entity.booking_attempt_entity import BookingAttempt
from src.service.booking.driving_adapter.http_controller.schema.base_schema import (
    CamelModel,
    MoneyAmount,
)


class BookingAttemptResponse(CamelModel):
    booking_id: UtilsUUID7
    event_id: int
    quantity: int
    amount_due: MoneyAmount
    status: str
    ticket_id: Optional[int] = None
    failure_reason: Optional[str] = None

    @classmethod
    def from_attempt(cls, attempt: BookingAttempt) -> 'BookingAttemptResponse':
        return cls(
            booking_id=attempt.id,
            event_id=attempt.event_id,
            quantity=attempt.quantity,
            amount_due=attempt.total_amount,
            status=attempt.state.value,
            ticket_id=attempt.ticket_id,
            failure_reason=attempt.failure_reason,
        )
