from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.platform.types import UtilsUUID7
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.driving_adapter.http_controller.schema.base_schema import (
    CamelModel,
    MoneyAmount,
)


class TicketPurchaseRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={'example': {'eventId': 1, 'quantity': 2}},
    )

    event_id: int
    quantity: int = Field(ge=1)


class TicketResponse(CamelModel):
    id: int
    event_id: int
    user_id: int
    quantity: int
    total_amount: MoneyAmount
    status: str
    purchase_date: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket: TicketEntity) -> 'TicketResponse':
        return cls(
            id=ticket.id or 0,
            event_id=ticket.event_id,
            user_id=ticket.user_id,
            quantity=ticket.quantity,
            total_amount=ticket.total_amount,
            status=ticket.status.value,
            purchase_date=ticket.purchase_date,
        )


class TicketBuyer(CamelModel):
    id: int
    username: str
    email: str
    full_name: str

    @classmethod
    def from_entity(cls, user: UserEntity) -> 'TicketBuyer':
        return cls(
            id=user.id or 0, username=user.username, email=user.email, full_name=user.full_name
        )


class EventTicketResponse(TicketResponse):
    user: Optional[TicketBuyer] = None

    @classmethod
    def from_sale(cls, ticket: TicketEntity, buyer: Optional[UserEntity]) -> 'EventTicketResponse':
        return cls(
            **TicketResponse.from_entity(ticket).model_dump(),
            user=TicketBuyer.from_entity(buyer) if buyer else None,
        )

class PendingBookingResponse(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            'example': {
                'bookingId': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'amountDue': 1000.0,
                'status': 'reserved',
            }
        },
    )

    booking_id: UtilsUUID7
    amount_due: MoneyAmount
    status: str
