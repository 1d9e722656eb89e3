from datetime import datetime, timezone
from typing import List

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_notifier import INotifier
from src.service.booking.domain.entity.event_entity import EventEntity
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.driven_adapter.notification import email_content
from src.service.booking.driven_adapter.notification.email_content import EmailMessageContent


class MockEmailNotifier(INotifier):
    """Logs emails instead of sending them; keeps them in `sent_emails` for tests."""

    def __init__(self) -> None:
        self.sent_emails: List[dict] = []

    async def _send(self, message: EmailMessageContent) -> None:
        self.sent_emails.append(
            {
                'to': message.to,
                'subject': message.subject,
                'body': message.body,
                'sent_at': datetime.now(timezone.utc),
            }
        )
        Logger.base.info(f'📧 [NOTIFY] (mock) to={message.to} subject="{message.subject}"')

    async def notify_booking_confirmed(
        self, *, attendee: UserEntity, event: EventEntity, ticket: TicketEntity
    ) -> None:
        await self._send(
            email_content.booking_confirmed(attendee=attendee, event=event, ticket=ticket)
        )

    async def notify_organizer_ticket_sold(
        self,
        *,
        organizer: UserEntity,
        attendee: UserEntity,
        event: EventEntity,
        ticket: TicketEntity,
    ) -> None:
        await self._send(
            email_content.organizer_ticket_sold(
                organizer=organizer, attendee=attendee, event=event, ticket=ticket
            )
        )

    async def notify_booking_cancelled(
        self, *, attendee: UserEntity, event: EventEntity, ticket: TicketEntity
    ) -> None:
        await self._send(
            email_content.booking_cancelled(attendee=attendee, event=event, ticket=ticket)
        )
