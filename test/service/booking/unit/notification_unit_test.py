import anyio
import pytest

from src.platform.config.core_setting import Settings
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.driven_adapter.notification.mock_email_notifier import MockEmailNotifier
from src.service.booking.driven_adapter.notification.notification_dispatcher import (
    NotificationDispatcher,
)
from src.service.booking.driven_adapter.notification.notifier_factory import build_notifier


pytestmark = pytest.mark.unit


class TestNotificationDispatcher:
    @pytest.mark.asyncio
    async def test_dispatch_runs_in_background(self):
        dispatcher = NotificationDispatcher()
        delivered = []

        async def _send():
            await anyio.sleep(0.01)
            delivered.append('sent')

        dispatcher.dispatch(_send(), description='test email')

        assert delivered == []
        assert dispatcher.in_flight == 1
        await dispatcher.drain()
        assert delivered == ['sent']
        assert dispatcher.in_flight == 0

    @pytest.mark.asyncio
    async def test_failure_is_contained(self):
        dispatcher = NotificationDispatcher()

        async def _explode():
            raise RuntimeError('smtp down')

        dispatcher.dispatch(_explode(), description='test email')

        await dispatcher.drain()
        assert dispatcher.in_flight == 0


class TestNotifierFactory:
    def test_missing_smtp_credentials_selects_mock(self):
        settings = Settings(SMTP_USER='', SMTP_PASSWORD='')

        assert isinstance(build_notifier(settings), MockEmailNotifier)


class TestMockEmailNotifier:
    @pytest.mark.asyncio
    async def test_confirmation_is_recorded(self, make_event, make_user):
        notifier = MockEmailNotifier()
        event = make_event(title='Jazz at Dusk')
        ticket = TicketEntity.create(event_id=1, user_id=1, quantity=2, total_amount=200)

        await notifier.notify_booking_confirmed(
            attendee=make_user(username='meera'), event=event, ticket=ticket
        )

        assert notifier.sent_emails[0]['to'] == 'meera@test.com'
        assert notifier.sent_emails[0]['subject'] == 'Your tickets for Jazz at Dusk'
