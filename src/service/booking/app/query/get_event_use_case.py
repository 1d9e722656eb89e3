from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_event_repo import IEventRepo
from src.service.booking.domain.entity.event_entity import EventEntity


class GetEventUseCase:
    def __init__(self, event_repo: IEventRepo):
        self.event_repo = event_repo

    @classmethod
    @inject
    def depends(cls, event_repo: IEventRepo = Depends(Provide[Container.event_repo])) -> Self:
        return cls(event_repo=event_repo)

    @Logger.io
    async def get_event(self, event_id: int) -> EventEntity:
        event = await self.event_repo.get_by_id(event_id)
        if not event:
            raise NotFoundError('Event not found')
        return event
