from email.message import EmailMessage
import smtplib

import anyio

from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_notifier import INotifier
from src.service.booking.domain.entity.event_entity import EventEntity
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.driven_adapter.notification import email_content
from src.service.booking.driven_adapter.notification.email_content import EmailMessageContent


class SmtpEmailNotifier(INotifier):
    """Sends through an SMTP relay with STARTTLS; smtplib runs in a worker thread."""

    def __init__(self, settings: Settings) -> None:
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD.get_secret_value()
        self.sender = settings.EMAIL_FROM

    def _build(self, content: EmailMessageContent) -> EmailMessage:
        message = EmailMessage()
        message['Subject'] = content.subject
        message['From'] = self.sender
        message['To'] = content.to
        message.set_content(content.body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            server.starttls()
            server.login(self.user, self.password)
            server.send_message(message)

    async def _send(self, content: EmailMessageContent) -> None:
        await anyio.to_thread.run_sync(self._deliver, self._build(content))
        Logger.base.info(f'📧 [NOTIFY] sent to={content.to} subject="{content.subject}"')

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
