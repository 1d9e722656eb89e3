from datetime import datetime
from decimal import Decimal
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ConflictError, ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_category_repo import ICategoryRepo
from src.service.booking.app.interface.i_event_repo import IEventRepo
from src.service.booking.domain.entity.category_entity import CategoryEntity
from src.service.booking.domain.entity.event_entity import EventEntity
from src.service.booking.domain.entity.user_entity import UserEntity


async def count_event_in_category(category_repo: ICategoryRepo, name: str) -> None:
    # Counter is denormalised; a failure here never undoes the event
    try:
        if await category_repo.adjust_event_count(name=name, delta=1) is not None:
            return
        try:
            await category_repo.create(CategoryEntity(name=name, event_count=1))
        except ConflictError:
            # Created concurrently by another request
            await category_repo.adjust_event_count(name=name, delta=1)
    except Exception as e:
        Logger.base.warning(f'⚠️ [EVENT] category "{name}" count not updated: {e}')


class CreateEventUseCase:
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
    async def create_event(
        self,
        *,
        organizer: UserEntity,
        title: str,
        description: str,
        location: str,
        start_date: datetime,
        end_date: datetime,
        category: str,
        total_tickets: int,
        ticket_price: Decimal,
        is_featured: bool = False,
        image_url: Optional[str] = None,
    ) -> EventEntity:
        if not organizer.can_manage_events:
            raise ForbiddenError('Only organizers can create events')

        event = EventEntity.create(
            organizer_id=organizer.id or 0,
            title=title,
            description=description,
            location=location,
            start_date=start_date,
            end_date=end_date,
            category=category,
            total_tickets=total_tickets,
            ticket_price=ticket_price,
            is_featured=is_featured,
            image_url=image_url,
        )
        created = await self.event_repo.create(event)
        Logger.base.info(
            f'🎪 [EVENT] {created.id} "{created.title}" created with {created.total_tickets} '
            f'ticket(s) at {created.ticket_price}'
        )

        await count_event_in_category(self.category_repo, category)
        return created
