from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_category_repo import ICategoryRepo
from src.service.booking.app.interface.i_event_repo import IEventRepo
from src.service.booking.domain.entity.user_entity import UserEntity


class DeleteEventUseCase:
    """
    Remove an event. Tickets and payments for it stay on record.

    Holds still pending on the event are left to the reaper; releasing them
    later finds no event and restores nothing.
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
    async def delete_event(self, *, event_id: int, requester: UserEntity) -> None:
        event = await self.event_repo.get_by_id(event_id)
        if event is None:
            raise NotFoundError('Event not found')
        if not (requester.is_admin or event.is_owned_by(requester.id or 0)):
            raise ForbiddenError('Only the organizer or an admin can delete this event')

        if not await self.event_repo.delete(event_id):
            raise NotFoundError('Event not found')
        Logger.base.info(f'🗑️ [EVENT] {event_id} deleted by user {requester.id}')

        try:
            await self.category_repo.adjust_event_count(name=event.category, delta=-1)
        except Exception as e:
            Logger.base.warning(
                f'⚠️ [EVENT] category "{event.category}" count not updated: {e}'
            )
