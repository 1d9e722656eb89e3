from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import case, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_event_repo import IEventRepo
from src.service.booking.domain.entity.event_entity import EDITABLE_FIELDS, EventEntity
from src.service.booking.domain.enum.event_status import EventStatus
from src.service.booking.driven_adapter.model.event_model import EventModel


class EventRepoImpl(IEventRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, event_id: int) -> Optional[EventEntity]:
        async with self.session_factory() as session:
            event_model = await session.get(EventModel, event_id)
            return self._model_to_entity(event_model) if event_model else None

    @Logger.io
    async def create(self, event: EventEntity) -> EventEntity:
        async with self.session_factory() as session:
            event_model = EventModel(
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
            session.add(event_model)
            await session.commit()
            await session.refresh(event_model)
            return self._model_to_entity(event_model)

    @Logger.io
    async def update(self, event: EventEntity) -> Optional[EventEntity]:
        stmt = (
            update(EventModel)
            .where(EventModel.id == event.id)
            .values(**{field: getattr(event, field) for field in EDITABLE_FIELDS})
            .returning(EventModel.id)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            updated_id = result.scalar_one_or_none()
            await session.commit()
            if updated_id is None:
                return None
            event_model = await session.get(EventModel, updated_id, populate_existing=True)
            return self._model_to_entity(event_model) if event_model else None

    @Logger.io
    async def delete(self, event_id: int) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(delete(EventModel).where(EventModel.id == event_id))
            await session.commit()
            return result.rowcount > 0  # type: ignore[attr-defined]

    @Logger.io
    async def decrement_available_tickets(self, *, event_id: int, quantity: int) -> Optional[int]:
        # Single conditional UPDATE: the database arbitrates between instances
        stmt = (
            update(EventModel)
            .where(
                EventModel.id == event_id,
                EventModel.status == EventStatus.ACTIVE.value,
                EventModel.available_tickets >= quantity,
            )
            .values(available_tickets=EventModel.available_tickets - quantity)
            .returning(EventModel.available_tickets)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            remaining = result.scalar_one_or_none()
            await session.commit()
            return remaining

    @Logger.io
    async def increment_available_tickets(self, *, event_id: int, quantity: int) -> Optional[int]:
        restored = EventModel.available_tickets + quantity
        stmt = (
            update(EventModel)
            .where(EventModel.id == event_id)
            .values(
                available_tickets=case(
                    (restored > EventModel.total_tickets, EventModel.total_tickets),
                    else_=restored,
                )
            )
            .returning(EventModel.available_tickets)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            remaining = result.scalar_one_or_none()
            await session.commit()
            return remaining

    def _model_to_entity(self, event_model: EventModel) -> EventEntity:
        return EventEntity(
            id=event_model.id,
            organizer_id=event_model.organizer_id,
            title=event_model.title,
            description=event_model.description,
            location=event_model.location,
            start_date=event_model.start_date,
            end_date=event_model.end_date,
            category=event_model.category,
            total_tickets=event_model.total_tickets,
            available_tickets=event_model.available_tickets,
            ticket_price=event_model.ticket_price,
            is_featured=event_model.is_featured,
            status=EventStatus(event_model.status),
            image_url=event_model.image_url,
            created_at=event_model.created_at,
        )
