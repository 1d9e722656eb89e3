from datetime import datetime
from decimal import Decimal
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.command.create_event_use_case import count_event_in_category
from src.service.booking.app.interface.i_category_repo import ICategoryRepo
from src.service.booking.app.interface.i_event_repo import IEventRepo
from src.service.booking.domain.entity.event_entity import EventEntity
from src.service.booking.domain.entity.user_entity import UserEntity


class UpdateEventUseCase:
    """
    Edit an event's details and price.

    Ticket counts are owned by the inventory guard and cannot be edited here.
    A price change only affects bookings started afterwards.
    """

    def __init__(self, *, event_repo: IEventRepo, category_repo: ICategoryRepo) -> None:
        self.event_repo = event_repo
        self.category_repo = category_repo

    @classmethod
    @inject
    def depends(
        cls,
        event_repo: IEventRepo = Depends(Provide[Container.event_repo]),
        category_repo: ICategoryRepo = Depends(Provide[Container.category_repo]),
    ) -> Self:
        return cls(event_repo=event_repo, category_repo=category_repo)

    @Logger.io
    async def update_event(
        self,
        *,
        event_id: int,
        requester: UserEntity,
        title: Optional[str] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        category: Optional[str] = None,
        ticket_price: Optional[Decimal] = None,
        is_featured: Optional[bool] = None,
        image_url: Optional[str] = None,
    ) -> EventEntity:
        event = await self.event_repo.get_by_id(event_id)
        if event is None:
            raise NotFoundError('Event not found')
        if not (requester.is_admin or event.is_owned_by(requester.id or 0)):
            raise ForbiddenError('Only the organizer or an admin can update this event')

        changes = {
            name: value
            for name, value in (
                ('title', title),
                ('description', description),
                ('location', location),
                ('start_date', start_date),
                ('end_date', end_date),
                ('category', category),
                ('ticket_price', ticket_price),
                ('is_featured', is_featured),
                ('image_url', image_url),
            )
            if value is not None
        }
        if not changes:
            raise ValidationError('Nothing to update')

        updated = await self.event_repo.update(event.update_details(**changes))
        if updated is None:
            raise NotFoundError('Event not found')
        Logger.base.info(
            f'✏️ [EVENT] {event_id} updated by user {requester.id}: {", ".join(sorted(changes))}'
        )

        if updated.category != event.category:
            await self._move_category(old=event.category, new=updated.category)
        return updated

    async def _move_category(self, *, old: str, new: str) -> None:
        try:
            await self.category_repo.adjust_event_count(name=old, delta=-1)
        except Exception as e:
            Logger.base.warning(f'⚠️ [EVENT] category "{old}" count not updated: {e}')
        await count_event_in_category(self.category_repo, new)
