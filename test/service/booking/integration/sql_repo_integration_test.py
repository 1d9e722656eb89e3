"""
SQLAlchemy repositories against a real SQL engine (sqlite + aiosqlite).

Covers the conditional UPDATEs the booking core relies on when several API
instances share one database.
"""

import asyncio
from decimal import Decimal

import attrs
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from src.platform.database.orm_db_setting import Base
from src.platform.exception.exceptions import InsufficientInventoryError
from src.service.booking.app.service.inventory_guard import InventoryGuard
from src.service.booking.domain.entity.category_entity import CategoryEntity
from src.service.booking.domain.entity.payment_entity import PaymentEntity
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.enum.event_status import EventStatus
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.enum.ticket_status import TicketStatus
import src.service.booking.driven_adapter.model  # noqa: F401
from src.service.booking.driven_adapter.repo.category_repo_impl import CategoryRepoImpl
from src.service.booking.driven_adapter.repo.event_repo_impl import EventRepoImpl
from src.service.booking.driven_adapter.repo.payment_repo_impl import PaymentRepoImpl
from src.service.booking.driven_adapter.repo.ticket_repo_impl import TicketRepoImpl


pytestmark = pytest.mark.integration


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(
        f'sqlite+aiosqlite:///{tmp_path / "eventpulse.db"}',
        poolclass=NullPool,
        connect_args={'timeout': 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def event_repo(session_factory) -> EventRepoImpl:
    return EventRepoImpl(session_factory=session_factory)


class TestEventRepoImpl:
    @pytest.mark.asyncio
    async def test_create_and_read_back(self, event_repo, make_event):
        created = await event_repo.create(make_event(total_tickets=20, ticket_price='99.90'))

        loaded = await event_repo.get_by_id(created.id)

        assert loaded.title == 'Indie Night'
        assert loaded.available_tickets == 20
        assert loaded.ticket_price == Decimal('99.90')
        assert loaded.status == EventStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_conditional_decrement(self, event_repo, make_event):
        event = await event_repo.create(make_event(total_tickets=5))

        assert await event_repo.decrement_available_tickets(event_id=event.id, quantity=3) == 2
        assert await event_repo.decrement_available_tickets(event_id=event.id, quantity=3) is None
        assert await event_repo.decrement_available_tickets(event_id=event.id, quantity=2) == 0

    @pytest.mark.asyncio
    async def test_decrement_missing_event(self, event_repo):
        assert await event_repo.decrement_available_tickets(event_id=404, quantity=1) is None

    @pytest.mark.asyncio
    async def test_increment_is_capped_at_total(self, event_repo, make_event):
        event = await event_repo.create(make_event(total_tickets=5))
        await event_repo.decrement_available_tickets(event_id=event.id, quantity=2)

        assert await event_repo.increment_available_tickets(event_id=event.id, quantity=10) == 5

    @pytest.mark.asyncio
    async def test_delete(self, event_repo, make_event):
        event = await event_repo.create(make_event())

        assert await event_repo.delete(event.id) is True
        assert await event_repo.get_by_id(event.id) is None
        assert await event_repo.delete(event.id) is False

    @pytest.mark.asyncio
    async def test_update_never_writes_inventory(self, event_repo, make_event):
        stale = await event_repo.create(make_event(total_tickets=10, ticket_price='100'))
        await event_repo.decrement_available_tickets(event_id=stale.id, quantity=4)

        updated = await event_repo.update(
            stale.update_details(ticket_price=Decimal('150'), location='Chennai')
        )

        assert updated.ticket_price == Decimal('150.00')
        assert updated.location == 'Chennai'
        assert updated.available_tickets == 6
        assert updated.total_tickets == 10

    @pytest.mark.asyncio
    async def test_update_missing_event(self, event_repo, make_event):
        ghost = attrs.evolve(make_event(), id=404)

        assert await event_repo.update(ghost) is None

    @pytest.mark.asyncio
    async def test_two_instances_never_oversell(self, event_repo, session_factory, make_event):
        # Two guards model two API processes sharing one database
        event = await event_repo.create(make_event(total_tickets=7))
        guards = [
            InventoryGuard(event_repo=EventRepoImpl(session_factory=session_factory))
            for _ in range(2)
        ]

        results = await asyncio.gather(
            *(guards[i % 2].reserve(event_id=event.id, quantity=1) for i in range(12)),
            return_exceptions=True,
        )

        reserved = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, InsufficientInventoryError)]
        assert len(reserved) == 7
        assert len(rejected) == 5
        assert (await event_repo.get_by_id(event.id)).available_tickets == 0


class TestTicketRepoImpl:
    @pytest.mark.asyncio
    async def test_status_update_is_compare_and_set(self, session_factory):
        repo = TicketRepoImpl(session_factory=session_factory)
        ticket = await repo.create(
            TicketEntity.create(event_id=1, user_id=2, quantity=2, total_amount=Decimal('20'))
        )

        first = await repo.update_status(
            ticket_id=ticket.id, expected=TicketStatus.VALID, new=TicketStatus.CANCELLED
        )
        second = await repo.update_status(
            ticket_id=ticket.id, expected=TicketStatus.VALID, new=TicketStatus.CANCELLED
        )

        assert first.status == TicketStatus.CANCELLED
        assert second is None

    @pytest.mark.asyncio
    async def test_list_by_user(self, session_factory):
        repo = TicketRepoImpl(session_factory=session_factory)
        for user_id in (1, 1, 2):
            await repo.create(
                TicketEntity.create(
                    event_id=1, user_id=user_id, quantity=1, total_amount=Decimal('10')
                )
            )

        tickets = await repo.list_by_user(1)

        assert len(tickets) == 2
        assert all(t.user_id == 1 for t in tickets)

    @pytest.mark.asyncio
    async def test_list_by_event_keeps_sold_amount(self, session_factory, event_repo, make_event):
        repo = TicketRepoImpl(session_factory=session_factory)
        event = await event_repo.create(make_event(ticket_price='10'))
        for event_id in (event.id, event.id, event.id + 1):
            await repo.create(
                TicketEntity.create(
                    event_id=event_id, user_id=1, quantity=1, total_amount=Decimal('10')
                )
            )
        await event_repo.update(event.update_details(ticket_price=Decimal('99')))

        tickets = await repo.list_by_event(event.id)

        assert len(tickets) == 2
        assert tickets[0].id > tickets[1].id
        assert {t.total_amount for t in tickets} == {Decimal('10.00')}


class TestPaymentRepoImpl:
    @pytest.mark.asyncio
    async def test_capture_round_trip(self, session_factory):
        repo = PaymentRepoImpl(session_factory=session_factory)
        payment = await repo.create(
            PaymentEntity.create(user_id=1, provider_order_id='order_1', amount=Decimal('500'))
        )

        await repo.update(payment.mark_captured(provider_payment_id='pay_1', ticket_id=3))
        loaded = await repo.get_by_provider_order_id('order_1')

        assert loaded.status == PaymentStatus.CAPTURED
        assert loaded.ticket_id == 3
        assert loaded.amount == Decimal('500.00')
        assert [p.id for p in await repo.list_by_user(1)] == [payment.id]


class TestCategoryRepoImpl:
    @pytest.mark.asyncio
    async def test_event_count_never_goes_negative(self, session_factory):
        repo = CategoryRepoImpl(session_factory=session_factory)
        await repo.create(CategoryEntity(name='music', event_count=1))

        assert await repo.adjust_event_count(name='music', delta=-3) == 0
        assert await repo.adjust_event_count(name='music', delta=2) == 2
        assert await repo.adjust_event_count(name='theatre', delta=1) is None
