from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_ticket_repo import ITicketRepo
from src.service.booking.domain.entity.ticket_entity import TicketEntity
from src.service.booking.domain.enum.ticket_status import TicketStatus
from src.service.booking.driven_adapter.model.ticket_model import TicketModel


class TicketRepoImpl(ITicketRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def create(self, ticket: TicketEntity) -> TicketEntity:
        async with self.session_factory() as session:
            ticket_model = TicketModel(
                event_id=ticket.event_id,
                user_id=ticket.user_id,
                quantity=ticket.quantity,
                total_amount=ticket.total_amount,
                status=ticket.status.value,
            )
            if ticket.purchase_date is not None:
                ticket_model.purchase_date = ticket.purchase_date
            session.add(ticket_model)
            await session.commit()
            await session.refresh(ticket_model)
            return self._model_to_entity(ticket_model)

    @Logger.io
    async def get_by_id(self, ticket_id: int) -> Optional[TicketEntity]:
        async with self.session_factory() as session:
            ticket_model = await session.get(TicketModel, ticket_id)
            return self._model_to_entity(ticket_model) if ticket_model else None

    @Logger.io
    async def list_by_user(self, user_id: int) -> List[TicketEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketModel)
                .where(TicketModel.user_id == user_id)
                .order_by(TicketModel.purchase_date.desc(), TicketModel.id.desc())
            )
            return [self._model_to_entity(model) for model in result.scalars()]

    @Logger.io
    async def list_by_event(self, event_id: int) -> List[TicketEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketModel)
                .where(TicketModel.event_id == event_id)
                .order_by(TicketModel.purchase_date.desc(), TicketModel.id.desc())
            )
            return [self._model_to_entity(model) for model in result.scalars()]

    @Logger.io
    async def update_status(
        self, *, ticket_id: int, expected: TicketStatus, new: TicketStatus
    ) -> Optional[TicketEntity]:
        async with self.session_factory() as session:
            result = await session.execute(
                update(TicketModel)
                .where(TicketModel.id == ticket_id, TicketModel.status == expected.value)
                .values(status=new.value)
                .returning(TicketModel.id)
                .execution_options(synchronize_session=False)
            )
            updated_id = result.scalar_one_or_none()
            await session.commit()
            if updated_id is None:
                return None
            ticket_model = await session.get(TicketModel, ticket_id, populate_existing=True)
            return self._model_to_entity(ticket_model) if ticket_model else None

    def _model_to_entity(self, ticket_model: TicketModel) -> TicketEntity:
        return TicketEntity(
            id=ticket_model.id,
            event_id=ticket_model.event_id,
            user_id=ticket_model.user_id,
            quantity=ticket_model.quantity,
            total_amount=ticket_model.total_amount,
            status=TicketStatus(ticket_model.status),
            purchase_date=ticket_model.purchase_date,
        )
