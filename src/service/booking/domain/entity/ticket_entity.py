from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.booking.domain.enum.ticket_status import TicketStatus
from src.service.booking.domain.value_object.money import to_money


@attrs.define
class TicketEntity:
    event_id: int
    user_id: int
    quantity: int
    total_amount: Decimal = attrs.field(converter=to_money)
    status: TicketStatus = TicketStatus.VALID
    purchase_date: Optional[datetime] = None
    id: Optional[int] = None

    @classmethod
    @Logger.io
    def create(
        cls, *, event_id: int, user_id: int, quantity: int, total_amount: Decimal
    ) -> 'TicketEntity':
        if quantity < 1:
            raise ValidationError('quantity must be at least 1')
        return cls(
            event_id=event_id,
            user_id=user_id,
            quantity=quantity,
            total_amount=total_amount,
            status=TicketStatus.VALID,
            purchase_date=datetime.now(timezone.utc),
        )

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id == user_id

    @Logger.io
    def cancel(self) -> 'TicketEntity':
        """
        Raises:
            DomainError(409): unless the ticket is still valid
        """
        if self.status != TicketStatus.VALID:
            raise DomainError(f'Ticket is {self.status} and cannot be cancelled', 409)
        return attrs.evolve(self, status=TicketStatus.CANCELLED)

    @Logger.io
    def mark_used(self) -> 'TicketEntity':
        if self.status != TicketStatus.VALID:
            raise DomainError(f'Ticket is {self.status} and cannot be used', 409)
        return attrs.evolve(self, status=TicketStatus.USED)
