"""Plain-text bodies for booking emails."""

import attrs

from src.service.booking.domain.entity.event_entity import EventEntity
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.entity.user_entity import UserEntity


@attrs.frozen
class EmailMessageContent:
    to: str
    subject: str
    body: str


def booking_confirmed(
    *, attendee: UserEntity, event: EventEntity, ticket: TicketEntity
) -> EmailMessageContent:
    return EmailMessageContent(
        to=attendee.email,
        subject=f'Your tickets for {event.title}',
        body=(
            f'Hi {attendee.full_name},\n\n'
            f'Your booking is confirmed.\n\n'
            f'Event: {event.title}\n'
            f'When: {event.start_date:%Y-%m-%d %H:%M}\n'
            f'Where: {event.location}\n'
            f'Ticket #{ticket.id}: {ticket.quantity} ticket(s), total {ticket.total_amount}\n'
        ),
    )


def organizer_ticket_sold(
    *, organizer: UserEntity, attendee: UserEntity, event: EventEntity, ticket: TicketEntity
) -> EmailMessageContent:
    return EmailMessageContent(
        to=organizer.email,
        subject=f'New booking for {event.title}',
        body=(
            f'Hi {organizer.full_name},\n\n'
            f'{attendee.full_name} booked {ticket.quantity} ticket(s) for {event.title} '
            f'({ticket.total_amount}).\n'
        ),
    )


def booking_cancelled(
    *, attendee: UserEntity, event: EventEntity, ticket: TicketEntity
) -> EmailMessageContent:
    return EmailMessageContent(
        to=attendee.email,
        subject=f'Booking cancelled: {event.title}',
        body=(
            f'Hi {attendee.full_name},\n\n'
            f'Ticket #{ticket.id} ({ticket.quantity} ticket(s)) for {event.title} '
            f'has been cancelled.\n'
        ),
    )
