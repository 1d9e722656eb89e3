from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

import attrs

from src.platform.exception.exceptions import DomainError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.booking.domain.enum.event_status import EventStatus
from src.service.booking.domain.value_object.money import ZERO, to_money


# Organizer-editable after creation; ticket counts and status are not
EDITABLE_FIELDS = (
    'title',
    'description',
    'location',
    'start_date',
    'end_date',
    'category',
    'ticket_price',
    'is_featured',
    'image_url',
)


def _validate_non_empty_string(instance: object, attribute: attrs.Attribute, value: str) -> None:
    if not value or not value.strip():
        raise ValidationError(f'Event {attribute.name} cannot be empty')


@attrs.define
class EventEntity:
    organizer_id: int
    title: str = attrs.field(validator=_validate_non_empty_string)
    description: str
    location: str = attrs.field(validator=_validate_non_empty_string)
    start_date: datetime
    end_date: datetime
    category: str = attrs.field(validator=_validate_non_empty_string)
    total_tickets: int
    available_tickets: int
    ticket_price: Decimal = attrs.field(converter=to_money)
    is_featured: bool = False
    status: EventStatus = EventStatus.ACTIVE
    image_url: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        organizer_id: int,
        title: str,
        description: str,
        location: str,
        start_date: datetime,
        end_date: datetime,
        category: str,
        total_tickets: int,
        ticket_price: Decimal,
        is_featured: bool = False,
        image_url: Optional[str] = None,
    ) -> 'EventEntity':
        if total_tickets < 0:
            raise ValidationError('total_tickets cannot be negative')
        if to_money(ticket_price) < ZERO:
            raise ValidationError('ticket_price cannot be negative')
        if end_date < start_date:
            raise ValidationError('end_date must not be before start_date')

        return cls(
            organizer_id=organizer_id,
            title=title,
            description=description,
            location=location,
            start_date=start_date,
            end_date=end_date,
            category=category,
            total_tickets=total_tickets,
            available_tickets=total_tickets,
            ticket_price=ticket_price,
            is_featured=is_featured,
            status=EventStatus.ACTIVE,
            image_url=image_url,
            created_at=datetime.now(timezone.utc),
        )

    @property
    def is_bookable(self) -> bool:
        return self.status == EventStatus.ACTIVE

    @property
    def is_free(self) -> bool:
        return self.ticket_price == ZERO

    def is_owned_by(self, user_id: int) -> bool:
        return self.organizer_id == user_id

    @Logger.io
    def cancel(self) -> 'EventEntity':
        if self.status != EventStatus.ACTIVE:
            raise DomainError(f'Cannot cancel an event that is {self.status}')
        return attrs.evolve(self, status=EventStatus.CANCELLED)

    @Logger.io
    def update_details(self, **changes: Any) -> 'EventEntity':
        """Apply organizer edits. Tickets already sold keep the amount they were sold at."""
        locked = sorted(set(changes) - set(EDITABLE_FIELDS))
        if locked:
            raise ValidationError(f'Cannot update {", ".join(locked)}')

        updated = attrs.evolve(self, **changes)
        if updated.ticket_price < ZERO:
            raise ValidationError('ticket_price cannot be negative')
        if updated.end_date < updated.start_date:
            raise ValidationError('end_date must not be before start_date')
        return updated
