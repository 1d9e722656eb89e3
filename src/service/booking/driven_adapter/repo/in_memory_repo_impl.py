"""
In-memory record store

Single-process backend for local runs and tests. Every repository method
finishes without yielding to the event loop between its read and its write,
so each call is atomic with respect to other coroutines. Entities are copied
on the way in and out so callers never share mutable state with the store.
"""

from itertools import count
from typing import Dict, List, Optional

import attrs

from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.service.booking.app.interface.i_category_repo import ICategoryRepo
from src.service.booking.app.interface.i_event_repo import IEventRepo
from src.service.booking.app.interface.i_payment_repo import IPaymentRepo
from src.service.booking.app.interface.i_ticket_repo import ITicketRepo
from src.service.booking.app.interface.i_user_repo import IUserRepo
from src.service.booking.domain.entity.category_entity import CategoryEntity
from src.service.booking.domain.entity.event_entity import EDITABLE_FIELDS, EventEntity
from src.service.booking.domain.entity.payment_entity import PaymentEntity
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.entity.user_entity import UserEntity
from src.service.booking.domain.enum.event_status import EventStatus
from src.service.booking.domain.enum.ticket_status import TicketStatus


class InMemoryRecordStore:
    def __init__(self) -> None:
        self.events: Dict[int, EventEntity] = {}
        self.tickets: Dict[int, TicketEntity] = {}
        self.payments: Dict[int, PaymentEntity] = {}
        self.categories: Dict[str, CategoryEntity] = {}
        self.users: Dict[int, UserEntity] = {}
        self._sequences: Dict[str, count] = {}

    def next_id(self, table: str) -> int:
        return next(self._sequences.setdefault(table, count(1)))


class InMemoryEventRepo(IEventRepo):
    def __init__(self, store: InMemoryRecordStore) -> None:
        self.store = store

    async def get_by_id(self, event_id: int) -> Optional[EventEntity]:
        event = self.store.events.get(event_id)
        return attrs.evolve(event) if event else None

    async def create(self, event: EventEntity) -> EventEntity:
        created = attrs.evolve(event, id=self.store.next_id('event'))
        self.store.events[created.id] = created  # type: ignore[index]
        return attrs.evolve(created)

    async def update(self, event: EventEntity) -> Optional[EventEntity]:
        stored = self.store.events.get(event.id or 0)
        if stored is None:
            return None
        for field in EDITABLE_FIELDS:
            setattr(stored, field, getattr(event, field))
        return attrs.evolve(stored)

    async def delete(self, event_id: int) -> bool:
        return self.store.events.pop(event_id, None) is not None

    async def decrement_available_tickets(self, *, event_id: int, quantity: int) -> Optional[int]:
        event = self.store.events.get(event_id)
        if (
            event is None
            or event.status != EventStatus.ACTIVE
            or event.available_tickets < quantity
        ):
            return None
        event.available_tickets -= quantity
        return event.available_tickets

    async def increment_available_tickets(self, *, event_id: int, quantity: int) -> Optional[int]:
        event = self.store.events.get(event_id)
        if event is None:
            return None
        event.available_tickets = min(event.total_tickets, event.available_tickets + quantity)
        return event.available_tickets


class InMemoryTicketRepo(ITicketRepo):
    def __init__(self, store: InMemoryRecordStore) -> None:
        self.store = store

    async def create(self, ticket: TicketEntity) -> TicketEntity:
        created = attrs.evolve(ticket, id=self.store.next_id('ticket'))
        self.store.tickets[created.id] = created  # type: ignore[index]
        return attrs.evolve(created)

    async def get_by_id(self, ticket_id: int) -> Optional[TicketEntity]:
        ticket = self.store.tickets.get(ticket_id)
        return attrs.evolve(ticket) if ticket else None

    async def list_by_user(self, user_id: int) -> List[TicketEntity]:
        tickets = [t for t in self.store.tickets.values() if t.user_id == user_id]
        return [attrs.evolve(t) for t in sorted(tickets, key=lambda t: t.id or 0, reverse=True)]

    async def list_by_event(self, event_id: int) -> List[TicketEntity]:
        tickets = [t for t in self.store.tickets.values() if t.event_id == event_id]
        return [attrs.evolve(t) for t in sorted(tickets, key=lambda t: t.id or 0, reverse=True)]

    async def update_status(
        self, *, ticket_id: int, expected: TicketStatus, new: TicketStatus
    ) -> Optional[TicketEntity]:
        ticket = self.store.tickets.get(ticket_id)
        if ticket is None or ticket.status != expected:
            return None
        ticket.status = new
        return attrs.evolve(ticket)


class InMemoryPaymentRepo(IPaymentRepo):
    def __init__(self, store: InMemoryRecordStore) -> None:
        self.store = store

    async def create(self, payment: PaymentEntity) -> PaymentEntity:
        if any(
            p.provider_order_id == payment.provider_order_id for p in self.store.payments.values()
        ):
            raise ConflictError(f'Payment for order {payment.provider_order_id} already exists')
        created = attrs.evolve(payment, id=self.store.next_id('payment'))
        self.store.payments[created.id] = created  # type: ignore[index]
        return attrs.evolve(created)

    async def get_by_id(self, payment_id: int) -> Optional[PaymentEntity]:
        payment = self.store.payments.get(payment_id)
        return attrs.evolve(payment) if payment else None

    async def get_by_provider_order_id(self, provider_order_id: str) -> Optional[PaymentEntity]:
        for payment in self.store.payments.values():
            if payment.provider_order_id == provider_order_id:
                return attrs.evolve(payment)
        return None

    async def list_by_user(self, user_id: int) -> List[PaymentEntity]:
        payments = [p for p in self.store.payments.values() if p.user_id == user_id]
        return [attrs.evolve(p) for p in sorted(payments, key=lambda p: p.id or 0, reverse=True)]

    async def update(self, payment: PaymentEntity) -> PaymentEntity:
        if payment.id not in self.store.payments:
            raise NotFoundError(f'Payment {payment.id} not found')
        self.store.payments[payment.id] = attrs.evolve(payment)
        return attrs.evolve(payment)


class InMemoryCategoryRepo(ICategoryRepo):
    def __init__(self, store: InMemoryRecordStore) -> None:
        self.store = store

    async def get_by_name(self, name: str) -> Optional[CategoryEntity]:
        category = self.store.categories.get(name)
        return attrs.evolve(category) if category else None

    async def create(self, category: CategoryEntity) -> CategoryEntity:
        if category.name in self.store.categories:
            raise ConflictError(f'Category {category.name} already exists')
        created = attrs.evolve(category, id=self.store.next_id('category'))
        self.store.categories[created.name] = created
        return attrs.evolve(created)

    async def adjust_event_count(self, *, name: str, delta: int) -> Optional[int]:
        category = self.store.categories.get(name)
        if category is None:
            return None
        category.event_count = max(0, category.event_count + delta)
        return category.event_count


class InMemoryUserRepo(IUserRepo):
    def __init__(self, store: InMemoryRecordStore) -> None:
        self.store = store

    async def get_by_id(self, user_id: int) -> Optional[UserEntity]:
        user = self.store.users.get(user_id)
        return attrs.evolve(user) if user else None

    async def get_by_email(self, email: str) -> Optional[UserEntity]:
        for user in self.store.users.values():
            if user.email == email:
                return attrs.evolve(user)
        return None

    async def create(self, user: UserEntity) -> UserEntity:
        if any(u.email == user.email for u in self.store.users.values()):
            raise ConflictError(f'User with email {user.email} already exists')
        created = attrs.evolve(user, id=self.store.next_id('user'))
        self.store.users[created.id] = created  # type: ignore[index]
        return attrs.evolve(created)
