"""
Concurrent booking against one shared in-memory record store.

Many attendees race for the same event; the store must never sell more than
the event's capacity, and every rejected or abandoned attempt must give its
tickets back.
"""

import asyncio

import pytest

from src.platform.exception.exceptions import InsufficientInventoryError
from src.service.booking.app.service.booking_orchestrator import BookingOrchestrator
from src.service.booking.app.service.inventory_guard import InventoryGuard
from src.service.booking.domain.enum.booking_attempt_state import BookingAttemptState
from src.service.booking.domain.enum.ticket_status import TicketStatus
from src.service.booking.domain.enum.user_role import UserRole
from src.service.booking.driven_adapter.notification.mock_email_notifier import MockEmailNotifier
from src.service.booking.driven_adapter.notification.notification_dispatcher import (
    NotificationDispatcher,
)
from src.service.booking.driven_adapter.payment.mock_payment_provider import MockPaymentProvider
from src.service.booking.driven_adapter.repo.in_memory_repo_impl import (
    InMemoryEventRepo,
    InMemoryPaymentRepo,
    InMemoryRecordStore,
    InMemoryTicketRepo,
    InMemoryUserRepo,
)


pytestmark = pytest.mark.integration


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def orchestrator(store) -> BookingOrchestrator:
    event_repo = InMemoryEventRepo(store=store)
    return BookingOrchestrator(
        inventory_guard=InventoryGuard(event_repo=event_repo),
        event_repo=event_repo,
        ticket_repo=InMemoryTicketRepo(store=store),
        payment_repo=InMemoryPaymentRepo(store=store),
        user_repo=InMemoryUserRepo(store=store),
        payment_provider=MockPaymentProvider(),
        notifier=MockEmailNotifier(),
        notification_dispatcher=NotificationDispatcher(),
        currency='INR',
        provider_timeout_seconds=5,
    )


@pytest.fixture
async def sold_out_soon(orchestrator, make_event, make_user):
    organizer = await orchestrator.user_repo.create(
        make_user(username='organizer', role=UserRole.ORGANIZER)
    )
    return await orchestrator.event_repo.create(
        make_event(organizer_id=organizer.id, total_tickets=5, ticket_price='250.00')
    )


async def _pay(orchestrator: BookingOrchestrator, booking_id, user_id: int):
    intent = await orchestrator.create_payment_intent(booking_id=booking_id, requester_id=user_id)
    return await orchestrator.confirm_payment(
        provider_order_id=intent.provider_order_id,
        provider_payment_id=f'pay_{booking_id.hex[-8:]}',
        provider_signature='',
        requester_id=user_id,
    )


class TestConcurrentBooking:
    @pytest.mark.asyncio
    async def test_capacity_is_never_exceeded(self, orchestrator, sold_out_soon):
        event = sold_out_soon

        results = await asyncio.gather(
            *(
                orchestrator.initiate_booking(user_id=100 + i, event_id=event.id, quantity=1)
                for i in range(20)
            ),
            return_exceptions=True,
        )

        reserved = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, InsufficientInventoryError)]
        assert len(reserved) == 5
        assert len(rejected) == 15
        assert all(a.state == BookingAttemptState.RESERVED for a in reserved)
        assert (await orchestrator.event_repo.get_by_id(event.id)).available_tickets == 0

    @pytest.mark.asyncio
    async def test_mixed_quantities_fill_exactly(self, orchestrator, sold_out_soon):
        event = sold_out_soon

        results = await asyncio.gather(
            *(
                orchestrator.initiate_booking(user_id=100 + i, event_id=event.id, quantity=q)
                for i, q in enumerate([2, 2, 2, 1, 3, 1])
            ),
            return_exceptions=True,
        )

        held = sum(r.quantity for r in results if not isinstance(r, Exception))
        remaining = (await orchestrator.event_repo.get_by_id(event.id)).available_tickets
        assert held + remaining == 5
        assert held <= 5

    @pytest.mark.asyncio
    async def test_concurrent_payments_issue_one_ticket_each(self, orchestrator, sold_out_soon):
        event = sold_out_soon
        attempts = [
            await orchestrator.initiate_booking(user_id=100 + i, event_id=event.id, quantity=1)
            for i in range(5)
        ]

        tickets = await asyncio.gather(*(_pay(orchestrator, a.id, a.user_id) for a in attempts))

        assert len({t.id for t in tickets}) == 5
        assert all(t.status == TicketStatus.VALID for t in tickets)
        assert (await orchestrator.event_repo.get_by_id(event.id)).available_tickets == 0
        await orchestrator.notification_dispatcher.drain()

    @pytest.mark.asyncio
    async def test_cancellations_reopen_seats_for_the_next_wave(self, orchestrator, sold_out_soon):
        event = sold_out_soon
        first_wave = [
            await orchestrator.initiate_booking(user_id=100 + i, event_id=event.id, quantity=1)
            for i in range(5)
        ]

        await asyncio.gather(
            *(
                orchestrator.cancel_pending_booking(booking_id=a.id, requester_id=a.user_id)
                for a in first_wave[:3]
            )
        )
        second_wave = await asyncio.gather(
            *(
                orchestrator.initiate_booking(user_id=200 + i, event_id=event.id, quantity=1)
                for i in range(6)
            ),
            return_exceptions=True,
        )

        assert sum(1 for r in second_wave if not isinstance(r, Exception)) == 3
        assert (await orchestrator.event_repo.get_by_id(event.id)).available_tickets == 0
