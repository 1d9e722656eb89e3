from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.service.booking.domain.entity.event_entity import EventEntity
from src.service.booking.driving_adapter.http_controller.schema.base_schema import (
    CamelModel,
    MoneyAmount,
)


class EventCreateRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            'example': {
                'title': 'Indie Night',
                'description': 'Three bands, one stage',
                'location': 'Bengaluru',
                'startDate': '2026-12-01T19:00:00Z',
                'endDate': '2026-12-01T23:00:00Z',
                'category': 'music',
                'totalTickets': 200,
                'ticketPrice': 499.0,
                'isFeatured': False,
            }
        },
    )

    title: str = Field(min_length=1, max_length=200)
    description: str = ''
    location: str = Field(min_length=1)
    start_date: datetime
    end_date: datetime
    category: str = Field(min_length=1)
    total_tickets: int = Field(ge=0)
    ticket_price: Decimal = Field(ge=0, decimal_places=2)
    is_featured: bool = False
    image_url: Optional[str] = None


class EventUpdateRequest(CamelModel):
    """Partial update. Ticket counts are not editable and are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='forbid',
        json_schema_extra={'example': {'ticketPrice': 599.0, 'location': 'Mumbai'}},
    )

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    category: Optional[str] = Field(default=None, min_length=1)
    ticket_price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    is_featured: Optional[bool] = None
    image_url: Optional[str] = None

class EventResponse(CamelModel):
    id: int
    organizer_id: int
    title: str
    description: str
    location: str
    start_date: datetime
    end_date: datetime
    category: str
    total_tickets: int
    available_tickets: int
    ticket_price: MoneyAmount
    is_featured: bool
    status: str
    image_url: Optional[str] = None

    @classmethod
    def from_entity(cls, event: EventEntity) -> 'EventResponse':
        return cls(
            id=event.id or 0,
            organizer_id=event.organizer_id,
            title=event.title,
            description=event.description,
            location=event.location,
            start_date=event.start_date,
            end_date=event.end_date,
            category=event.category,
            total_tickets=event.total_tickets,
            available_tickets=event.available_tickets,
            ticket_price=event.ticket_price,
            is_featured=event.is_featured,
            status=event.status.value,
            image_url=event.image_url,
        )
